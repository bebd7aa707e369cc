"""
Usage Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the usage domain.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.app.services.usage_aggregator import UsageStats
from src.domain.entities import UsageRecord, UsageType
from src.domain.money import Money


# ============================================================================
# Command DTOs
# ============================================================================


class RecordUsageCommand(BaseModel):
    """Command for recording one billable usage event"""

    phone_number_id: UUID
    type: UsageType
    cost: Decimal
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    duration: int = Field(default=0, ge=0)
    quantity: int = Field(default=1, ge=0)
    provider_reference_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    occurred_at: Optional[datetime] = None


# ============================================================================
# Response DTOs
# ============================================================================


class UsageRecordResponse(BaseModel):
    id: str
    tenant_id: str
    phone_number_id: str
    type: UsageType
    provider_reference_id: Optional[str]
    from_number: Optional[str]
    to_number: Optional[str]
    duration: int
    quantity: int
    cost: Money
    created_at: datetime

    @classmethod
    def from_entity(cls, record: UsageRecord) -> "UsageRecordResponse":
        return cls(
            id=str(record.id),
            tenant_id=str(record.tenant_id),
            phone_number_id=str(record.phone_number_id),
            type=record.type,
            provider_reference_id=record.provider_reference_id,
            from_number=record.from_number,
            to_number=record.to_number,
            duration=record.duration,
            quantity=record.quantity,
            cost=Decimal(record.cost),
            created_at=record.created_at,
        )


class RecordUsageResponse(BaseModel):
    """duplicate is True when the provider reference was already recorded"""

    usage: UsageRecordResponse
    duplicate: bool = False


class TenantUsageResponse(BaseModel):
    tenant_id: str
    period_start: datetime
    period_end: datetime
    stats: UsageStats


class PhoneNumberUsageResponse(BaseModel):
    phone_number_id: str
    records: List[UsageRecordResponse]
    total: int
    limit: int
    offset: int
