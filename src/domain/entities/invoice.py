"""
Invoice Entity

Billing invoice for one tenant and one billing period.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel
from sqlalchemy import Numeric, String
from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from src.domain.money import Money
from .enums import InvoiceStatus, LineItemCategory

ALLOWED_TRANSITIONS = {
    InvoiceStatus.draft: {InvoiceStatus.pending, InvoiceStatus.cancelled},
    InvoiceStatus.pending: {InvoiceStatus.paid, InvoiceStatus.overdue, InvoiceStatus.cancelled},
    InvoiceStatus.overdue: {InvoiceStatus.paid, InvoiceStatus.cancelled},
    InvoiceStatus.paid: set(),
    InvoiceStatus.cancelled: set(),
}

PAYABLE_STATUSES = (InvoiceStatus.pending, InvoiceStatus.overdue)


class InvoiceLineItem(BaseModel):
    """One row of an invoice (stored in the line_items JSON column)"""

    description: str
    quantity: int = 1
    unit_price: Money
    amount: Money
    category: LineItemCategory


class Invoice(SQLModel, table=True):
    """
    Invoice entity.

    Domain Rules:
    - invoice_number is unique (INV-<year>-<seq>)
    - subtotal == sum(line_items.amount), total_amount == subtotal + tax_amount
    - 0 <= paid_amount <= total_amount
    - status == paid exactly when paid_amount >= total_amount
    - Status only moves along ALLOWED_TRANSITIONS
    """

    __tablename__ = "invoices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id")
    invoice_number: str = Field(sa_column=Column(String(32), nullable=False, unique=True))

    status: InvoiceStatus = Field(default=InvoiceStatus.draft)

    billing_period_start: datetime = Field(sa_column=Column(DateTime, nullable=False))
    billing_period_end: datetime = Field(sa_column=Column(DateTime, nullable=False))
    due_date: datetime = Field(sa_column=Column(DateTime, nullable=False))

    subtotal: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )
    tax_rate: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(6, 3), nullable=False, default=0)
    )
    tax_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )
    total_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )
    paid_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )

    line_items: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    usage_summary: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Payment provider invoice id, set when mirroring succeeds
    external_invoice_id: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=1000)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    paid_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invoice_tenant_created_at", "tenant_id", "created_at"),
        Index("idx_invoice_status_due_date", "status", "due_date"),
        Index("idx_invoice_external_id", "external_invoice_id"),
    )

    def can_transition_to(self, status: InvoiceStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[InvoiceStatus(self.status)]

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_STATUSES

    @property
    def balance_due(self) -> Decimal:
        return max(Decimal(self.total_amount) - Decimal(self.paid_amount), Decimal("0"))
