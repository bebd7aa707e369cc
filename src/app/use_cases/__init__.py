"""
Use Cases - Backward Compatibility Shim

All use cases are organized into domain folders:
- usage/: Usage metering and statistics
- billing/: Invoices, payments and the overdue sweep
- webhooks/: Provider callbacks
- tenants/: Tenant and phone number administration
- activity/: Activity logs

Import from subdirectories for better organization.
"""

from .activity import GetActivityLogsUseCase
from .billing import (
    GenerateCycleInvoicesUseCase,
    GenerateInvoiceUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    RecordPaymentUseCase,
    RunDailyCycleInvoicesUseCase,
    RunDailySweepUseCase,
    SweepOverdueInvoicesUseCase,
)
from .tenants import (
    CreateTenantUseCase,
    GetTenantUseCase,
    RegisterPhoneNumberUseCase,
    ReleasePhoneNumberUseCase,
    RestoreTenantUseCase,
    SuspendTenantUseCase,
)
from .usage import GetPhoneNumberUsageUseCase, GetTenantUsageUseCase, RecordUsageUseCase
from .webhooks import (
    ProcessCallStatusUseCase,
    ProcessMessageStatusUseCase,
    ProcessPaymentEventUseCase,
)

__all__ = [
    # Usage
    "RecordUsageUseCase",
    "GetTenantUsageUseCase",
    "GetPhoneNumberUsageUseCase",
    # Billing
    "GenerateInvoiceUseCase",
    "GenerateCycleInvoicesUseCase",
    "GetInvoiceUseCase",
    "ListInvoicesUseCase",
    "RecordPaymentUseCase",
    "SweepOverdueInvoicesUseCase",
    "RunDailySweepUseCase",
    "RunDailyCycleInvoicesUseCase",
    # Webhooks
    "ProcessCallStatusUseCase",
    "ProcessMessageStatusUseCase",
    "ProcessPaymentEventUseCase",
    # Tenants
    "CreateTenantUseCase",
    "GetTenantUseCase",
    "SuspendTenantUseCase",
    "RestoreTenantUseCase",
    "RegisterPhoneNumberUseCase",
    "ReleasePhoneNumberUseCase",
    # Activity
    "GetActivityLogsUseCase",
]
