"""
PhoneNumber Entity

A billable phone number owned by exactly one tenant.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Numeric, String
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import PhoneNumberStatus, PhoneNumberType


class PhoneNumber(SQLModel, table=True):
    """
    PhoneNumber entity - recurring-fee resource owned by a tenant.

    Business Rules:
    - number is globally unique (E.164)
    - Released numbers keep their usage history but are no longer invoiced
    """

    __tablename__ = "phone_numbers"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", index=True)

    number: str = Field(sa_column=Column(String(32), nullable=False, unique=True))
    type: PhoneNumberType = Field(default=PhoneNumberType.local)
    status: PhoneNumberStatus = Field(default=PhoneNumberStatus.active)

    display_name: Optional[str] = Field(default=None, max_length=255)
    monthly_fee: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(10, 2), nullable=False, default=0)
    )
    capabilities: dict = Field(
        default_factory=lambda: {"voice": True, "sms": True, "mms": False, "fax": False},
        sa_column=Column(JSON),
    )

    # Telephony provider resource id
    provider_sid: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    provisioned_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    released_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_phone_number_tenant_status", "tenant_id", "status"),)
