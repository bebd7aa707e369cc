"""
Payment Entity

Money received from a tenant, optionally settling an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Numeric, String
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import PaymentMethod, PaymentStatus


class Payment(SQLModel, table=True):
    """
    Payment entity.

    Business Rules:
    - payment_number is unique (PAY-<year>-<seq>)
    - Immutable once completed, except for a refund transition
    - applied_amount is the part of amount credited to the invoice; the
      full amount always credits the tenant balance
    - external_payment_id deduplicates payment provider webhooks
    """

    __tablename__ = "payments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    payment_number: str = Field(sa_column=Column(String(32), nullable=False, unique=True))

    tenant_id: UUID = Field(foreign_key="tenants.id")
    invoice_id: Optional[UUID] = Field(default=None, foreign_key="invoices.id")

    status: PaymentStatus = Field(default=PaymentStatus.pending)
    method: PaymentMethod

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    applied_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )

    external_payment_id: Optional[str] = Field(
        default=None, sa_column=Column(String(255), nullable=True, unique=True)
    )
    reference_number: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=1000)
    payment_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_payment_tenant_created_at", "tenant_id", "created_at"),
        Index("idx_payment_invoice_id", "invoice_id"),
    )
