"""
Tenant Management Use Cases

Tenant accounts and the phone numbers billed to them.
"""

from .create_tenant_use_case import CreateTenantUseCase, code_prefix
from .dtos import (
    CreateTenantCommand,
    PhoneNumberResponse,
    RegisterPhoneNumberCommand,
    TenantResponse,
    TenantStatusResponse,
)
from .get_tenant_use_case import GetTenantUseCase
from .phone_number_use_cases import RegisterPhoneNumberUseCase, ReleasePhoneNumberUseCase
from .restore_tenant_use_case import RestoreTenantUseCase
from .suspend_tenant_use_case import SuspendTenantUseCase

__all__ = [
    "CreateTenantUseCase",
    "CreateTenantCommand",
    "code_prefix",
    "GetTenantUseCase",
    "TenantResponse",
    "SuspendTenantUseCase",
    "RestoreTenantUseCase",
    "TenantStatusResponse",
    "RegisterPhoneNumberUseCase",
    "RegisterPhoneNumberCommand",
    "ReleasePhoneNumberUseCase",
    "PhoneNumberResponse",
]
