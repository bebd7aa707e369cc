"""
Use case construction with the configured billing rules.

Shared by the HTTP routes and the scheduler so both apply the same tax
rate, thresholds and retry limits.
"""

from decimal import Decimal
from typing import Optional

from config import ApplicationConfig
from src.app.services.invoice_mirror import InvoiceMirror, MirrorSettings
from src.app.services.payment_provider import IPaymentProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_alerts import AlertThresholds
from src.app.use_cases.billing import (
    GenerateCycleInvoicesUseCase,
    GenerateInvoiceUseCase,
    RecordPaymentUseCase,
    SweepOverdueInvoicesUseCase,
)
from src.app.use_cases.tenants import CreateTenantUseCase
from src.app.use_cases.usage import RecordUsageUseCase


def alert_thresholds() -> AlertThresholds:
    return AlertThresholds(
        low_balance=Decimal(ApplicationConfig.LOW_BALANCE_THRESHOLD),
        high_usage=Decimal(ApplicationConfig.HIGH_USAGE_THRESHOLD),
        high_usage_window_hours=ApplicationConfig.HIGH_USAGE_WINDOW_HOURS,
    )


def invoice_mirror(provider: Optional[IPaymentProvider]) -> Optional[InvoiceMirror]:
    if provider is None:
        return None
    return InvoiceMirror(
        provider,
        MirrorSettings(
            timeout_seconds=ApplicationConfig.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
            max_attempts=ApplicationConfig.PAYMENT_PROVIDER_MAX_ATTEMPTS,
            days_until_due=ApplicationConfig.INVOICE_DUE_DAYS,
        ),
    )


def record_usage(uow: UnitOfWork) -> RecordUsageUseCase:
    return RecordUsageUseCase(
        uow,
        thresholds=alert_thresholds(),
        retry_attempts=ApplicationConfig.DB_RETRY_ATTEMPTS,
    )


def generate_invoice(
    uow: UnitOfWork, provider: Optional[IPaymentProvider], actor: str = "admin"
) -> GenerateInvoiceUseCase:
    return GenerateInvoiceUseCase(
        uow,
        mirror=invoice_mirror(provider),
        tax_rate=Decimal(ApplicationConfig.TAX_RATE),
        due_days=ApplicationConfig.INVOICE_DUE_DAYS,
        retry_attempts=ApplicationConfig.DB_RETRY_ATTEMPTS,
        actor=actor,
    )


def generate_cycle_invoices(
    uow: UnitOfWork, provider: Optional[IPaymentProvider]
) -> GenerateCycleInvoicesUseCase:
    return GenerateCycleInvoicesUseCase(uow, generate_invoice(uow, provider, actor="system"))


def record_payment(uow: UnitOfWork, actor: str = "admin") -> RecordPaymentUseCase:
    return RecordPaymentUseCase(
        uow, retry_attempts=ApplicationConfig.DB_RETRY_ATTEMPTS, actor=actor
    )


def sweep_overdue(uow: UnitOfWork) -> SweepOverdueInvoicesUseCase:
    return SweepOverdueInvoicesUseCase(
        uow,
        suspend_after=ApplicationConfig.SUSPEND_AFTER_OVERDUE,
        retry_attempts=ApplicationConfig.DB_RETRY_ATTEMPTS,
    )


def create_tenant(uow: UnitOfWork, provider: Optional[IPaymentProvider]) -> CreateTenantUseCase:
    return CreateTenantUseCase(
        uow,
        provider=provider,
        provider_timeout_seconds=ApplicationConfig.PAYMENT_PROVIDER_TIMEOUT_SECONDS,
        retry_attempts=ApplicationConfig.DB_RETRY_ATTEMPTS,
    )
