"""
Tenant Use Case DTOs (Data Transfer Objects)

All Command and Response classes for tenant and phone number
administration.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from src.domain.entities import (
    BillingCycle,
    PhoneNumber,
    PhoneNumberStatus,
    PhoneNumberType,
    Tenant,
    TenantStatus,
)
from src.domain.money import Money


# ============================================================================
# Command DTOs
# ============================================================================


class CreateTenantCommand(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    business_name: str = Field(min_length=1, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    billing_cycle: BillingCycle = BillingCycle.monthly
    credit_limit: Decimal = Field(default=Decimal("0"), ge=0)


class RegisterPhoneNumberCommand(BaseModel):
    """An already-provisioned number to bill to a tenant"""

    number: str = Field(min_length=3, max_length=32)
    type: PhoneNumberType = PhoneNumberType.local
    display_name: Optional[str] = None
    monthly_fee: Decimal = Field(default=Decimal("0"), ge=0)
    capabilities: Optional[Dict[str, bool]] = None
    provider_sid: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class PhoneNumberResponse(BaseModel):
    id: str
    tenant_id: str
    number: str
    type: PhoneNumberType
    status: PhoneNumberStatus
    display_name: Optional[str] = None
    monthly_fee: Money
    capabilities: Dict[str, Any]
    provisioned_at: datetime
    released_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, phone_number: PhoneNumber) -> "PhoneNumberResponse":
        return cls(
            id=str(phone_number.id),
            tenant_id=str(phone_number.tenant_id),
            number=phone_number.number,
            type=phone_number.type,
            status=phone_number.status,
            display_name=phone_number.display_name,
            monthly_fee=Decimal(phone_number.monthly_fee),
            capabilities=phone_number.capabilities or {},
            provisioned_at=phone_number.provisioned_at,
            released_at=phone_number.released_at,
        )


class TenantResponse(BaseModel):
    id: str
    code: str
    name: str
    business_name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: TenantStatus
    billing_cycle: BillingCycle
    credit_limit: Money
    current_balance: Money
    settings: Dict[str, Any]
    external_customer_id: Optional[str] = None
    created_at: datetime
    phone_numbers: List[PhoneNumberResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(
        cls, tenant: Tenant, phone_numbers: List[PhoneNumber] = None
    ) -> "TenantResponse":
        return cls(
            id=str(tenant.id),
            code=tenant.code,
            name=tenant.name,
            business_name=tenant.business_name,
            contact_email=tenant.contact_email,
            contact_phone=tenant.contact_phone,
            status=tenant.status,
            billing_cycle=tenant.billing_cycle,
            credit_limit=Decimal(tenant.credit_limit),
            current_balance=Decimal(tenant.current_balance),
            settings=tenant.settings or {},
            external_customer_id=tenant.external_customer_id,
            created_at=tenant.created_at,
            phone_numbers=[PhoneNumberResponse.from_entity(p) for p in phone_numbers or []],
        )


class TenantStatusResponse(BaseModel):
    """changed is False when the tenant already had the requested status"""

    status: TenantStatus
    changed: bool
