"""Invoicing, payment and overdue sweep use cases."""

from .dtos import (
    CycleInvoicesResponse,
    DailyJobResponse,
    GenerateInvoiceCommand,
    InvoiceListResponse,
    InvoiceResponse,
    PaymentResponse,
    RecordPaymentCommand,
    SweepResponse,
)
from .generate_cycle_invoices_use_case import GenerateCycleInvoicesUseCase, closed_period
from .generate_invoice_use_case import GenerateInvoiceUseCase
from .get_invoice_use_case import GetInvoiceUseCase
from .list_invoices_use_case import ListInvoicesUseCase
from .record_payment_use_case import RecordPaymentUseCase
from .run_daily_jobs_use_case import RunDailyCycleInvoicesUseCase, RunDailySweepUseCase
from .sweep_overdue_invoices_use_case import SweepOverdueInvoicesUseCase

__all__ = [
    "GenerateInvoiceUseCase",
    "GenerateInvoiceCommand",
    "InvoiceResponse",
    "GenerateCycleInvoicesUseCase",
    "CycleInvoicesResponse",
    "closed_period",
    "GetInvoiceUseCase",
    "ListInvoicesUseCase",
    "InvoiceListResponse",
    "RecordPaymentUseCase",
    "RecordPaymentCommand",
    "PaymentResponse",
    "SweepOverdueInvoicesUseCase",
    "SweepResponse",
    "RunDailySweepUseCase",
    "RunDailyCycleInvoicesUseCase",
    "DailyJobResponse",
]
