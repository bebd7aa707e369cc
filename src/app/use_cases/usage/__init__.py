"""Usage metering use cases."""

from .dtos import (
    PhoneNumberUsageResponse,
    RecordUsageCommand,
    RecordUsageResponse,
    TenantUsageResponse,
    UsageRecordResponse,
)
from .get_phone_number_usage_use_case import GetPhoneNumberUsageUseCase
from .get_tenant_usage_use_case import GetTenantUsageUseCase
from .record_usage_use_case import RecordUsageUseCase

__all__ = [
    "RecordUsageUseCase",
    "RecordUsageCommand",
    "RecordUsageResponse",
    "UsageRecordResponse",
    "GetTenantUsageUseCase",
    "TenantUsageResponse",
    "GetPhoneNumberUsageUseCase",
    "PhoneNumberUsageResponse",
]
