"""
Tenant Entity

A billed customer account (called "client" by operations staff).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Numeric, String
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import BillingCycle, TenantStatus


def default_settings() -> dict:
    return {
        "notifications": {
            "email": True,
            "sms": False,
            "low_balance": True,
            "high_usage": True,
        }
    }


class Tenant(SQLModel, table=True):
    """
    Tenant entity - billed customer account.

    Business Rules:
    - code is unique and human readable (e.g. ACMEDE001)
    - current_balance decreases with usage cost and increases with payments;
      it is only changed through atomic increments in the repository
    - Suspended by the overdue sweep or manually
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(sa_column=Column(String(20), nullable=False, unique=True))
    name: str = Field(max_length=255)
    business_name: str = Field(max_length=255)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=50)

    status: TenantStatus = Field(default=TenantStatus.active)
    billing_cycle: BillingCycle = Field(default=BillingCycle.monthly)

    credit_limit: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )
    current_balance: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 4), nullable=False, default=0)
    )

    settings: dict = Field(default_factory=default_settings, sa_column=Column(JSON))

    # Payment provider customer id, set once the customer is mirrored
    external_customer_id: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_tenant_status", "status"),
    )

    def notification_enabled(self, name: str) -> bool:
        notifications = (self.settings or {}).get("notifications") or {}
        return bool(notifications.get(name, False))
