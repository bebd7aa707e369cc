"""
UsageRecord Entity

Immutable record of one billable call or message.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Numeric, UniqueConstraint
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import UsageType


class UsageRecord(SQLModel, table=True):
    """
    UsageRecord entity - append-only usage event.

    Business Rules:
    - Never updated or deleted
    - (type, provider_reference_id) is the idempotency key for webhook
      redelivery; records without a provider reference are not deduplicated
    - tenant_id is denormalized from the phone number for range queries
    """

    __tablename__ = "usage_records"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id")
    phone_number_id: UUID = Field(foreign_key="phone_numbers.id")

    type: UsageType
    provider_reference_id: Optional[str] = Field(default=None, max_length=64)
    from_number: Optional[str] = Field(default=None, max_length=32)
    to_number: Optional[str] = Field(default=None, max_length=32)

    duration: int = Field(default=0)  # seconds, calls only
    quantity: int = Field(default=1)  # messages, SMS/MMS only
    cost: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 4), nullable=False, default=0)
    )

    usage_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("type", "provider_reference_id", name="uq_usage_provider_reference"),
        Index("idx_usage_phone_number_created_at", "phone_number_id", "created_at"),
        Index("idx_usage_tenant_created_at", "tenant_id", "created_at"),
        Index("idx_usage_type_created_at", "type", "created_at"),
    )
