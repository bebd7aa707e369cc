"""
Billing Use Case DTOs (Data Transfer Objects)

All Command and Response classes for invoices, payments and the overdue
sweep.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities import (
    Invoice,
    InvoiceLineItem,
    InvoiceStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from src.domain.money import Money


# ============================================================================
# Command DTOs
# ============================================================================


class GenerateInvoiceCommand(BaseModel):
    tenant_id: UUID
    period_start: datetime
    period_end: datetime
    notes: Optional[str] = None
    # Give up with INVOICE_EXISTS when the period is already billed
    # instead of issuing a second invoice
    skip_if_invoiced: bool = False


class RecordPaymentCommand(BaseModel):
    """
    Command for recording money received from a tenant.

    external_payment_id is the payment provider's id; when present it
    makes the command idempotent.
    """

    tenant_id: UUID
    amount: Decimal
    method: PaymentMethod = PaymentMethod.other
    invoice_id: Optional[UUID] = None
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    external_payment_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


# ============================================================================
# Response DTOs
# ============================================================================


class InvoiceResponse(BaseModel):
    id: str
    tenant_id: str
    invoice_number: str
    status: InvoiceStatus
    billing_period_start: datetime
    billing_period_end: datetime
    due_date: datetime
    subtotal: Money
    tax_rate: Money
    tax_amount: Money
    total_amount: Money
    paid_amount: Money
    balance_due: Money
    line_items: List[InvoiceLineItem] = Field(default_factory=list)
    usage_summary: Optional[Dict[str, Any]] = None
    external_invoice_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    paid_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=str(invoice.id),
            tenant_id=str(invoice.tenant_id),
            invoice_number=invoice.invoice_number,
            status=invoice.status,
            billing_period_start=invoice.billing_period_start,
            billing_period_end=invoice.billing_period_end,
            due_date=invoice.due_date,
            subtotal=Decimal(invoice.subtotal),
            tax_rate=Decimal(invoice.tax_rate),
            tax_amount=Decimal(invoice.tax_amount),
            total_amount=Decimal(invoice.total_amount),
            paid_amount=Decimal(invoice.paid_amount),
            balance_due=invoice.balance_due,
            line_items=[InvoiceLineItem(**item) for item in invoice.line_items or []],
            usage_summary=invoice.usage_summary,
            external_invoice_id=invoice.external_invoice_id,
            notes=invoice.notes,
            created_at=invoice.created_at,
            paid_at=invoice.paid_at,
        )


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceResponse]
    total: int
    limit: int
    offset: int


class PaymentResponse(BaseModel):
    id: str
    payment_number: str
    tenant_id: str
    invoice_id: Optional[str] = None
    status: PaymentStatus
    method: PaymentMethod
    amount: Money
    applied_amount: Money
    reference_number: Optional[str] = None
    external_payment_id: Optional[str] = None
    created_at: datetime
    processed_at: Optional[datetime] = None
    invoice_status: Optional[InvoiceStatus] = None
    invoice_paid_amount: Optional[Money] = None
    duplicate: bool = False

    @classmethod
    def from_entity(
        cls, payment: Payment, invoice: Optional[Invoice] = None, duplicate: bool = False
    ) -> "PaymentResponse":
        return cls(
            id=str(payment.id),
            payment_number=payment.payment_number,
            tenant_id=str(payment.tenant_id),
            invoice_id=str(payment.invoice_id) if payment.invoice_id else None,
            status=payment.status,
            method=payment.method,
            amount=Decimal(payment.amount),
            applied_amount=Decimal(payment.applied_amount),
            reference_number=payment.reference_number,
            external_payment_id=payment.external_payment_id,
            created_at=payment.created_at,
            processed_at=payment.processed_at,
            invoice_status=invoice.status if invoice else None,
            invoice_paid_amount=Decimal(invoice.paid_amount) if invoice else None,
            duplicate=duplicate,
        )


class SweepResponse(BaseModel):
    """Outcome of one overdue sweep; empty lists when nothing changed"""

    invoices_marked_overdue: List[str] = Field(default_factory=list)
    tenants_suspended: List[str] = Field(default_factory=list)


class CycleInvoicesResponse(BaseModel):
    run_date: date
    generated: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failed: List[Dict[str, str]] = Field(default_factory=list)


class DailyJobResponse(BaseModel):
    job: str
    ran: bool
    sweep: Optional[SweepResponse] = None
    cycle_invoices: Optional[CycleInvoicesResponse] = None
