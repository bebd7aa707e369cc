"""
Usage Aggregator

Turns raw usage records into statistics grouped by usage type and by phone
number. Read-only: safe to run while new usage is being recorded, each
record is read whole and totals are eventually consistent across records.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import PhoneNumber, UsageRecord, UsageType
from src.domain.money import Money, to_decimal


class UsageTypeStats(BaseModel):
    count: int = 0
    cost: Money = Decimal("0")
    duration: Optional[int] = None  # seconds, calls only


class PhoneNumberUsageStats(BaseModel):
    phone_number_id: str
    phone_number: Optional[str] = None
    display_name: Optional[str] = None
    calls: int = 0
    minutes: int = 0
    sms: int = 0
    mms: int = 0
    cost: Money = Decimal("0")


class UsageStats(BaseModel):
    total_calls: int = 0
    total_minutes: int = 0
    total_sms: int = 0
    total_mms: int = 0
    total_cost: Money = Decimal("0")
    by_type: Dict[str, UsageTypeStats] = Field(default_factory=dict)
    by_phone_number: List[PhoneNumberUsageStats] = Field(default_factory=list)


def billable_minutes(duration_seconds: int) -> int:
    """Calls are billed per started minute"""
    return math.ceil((duration_seconds or 0) / 60)


def summarize_usage(
    records: Iterable[UsageRecord], phone_numbers: Dict[UUID, PhoneNumber]
) -> UsageStats:
    stats = UsageStats(by_type={usage_type.value: UsageTypeStats() for usage_type in UsageType})
    per_number: Dict[UUID, PhoneNumberUsageStats] = {}

    for record in records:
        usage_type = UsageType(record.type)
        cost = to_decimal(record.cost)
        stats.total_cost += cost

        type_stats = stats.by_type[usage_type.value]
        type_stats.count += 1
        type_stats.cost += cost

        number_stats = per_number.get(record.phone_number_id)
        if number_stats is None:
            phone_number = phone_numbers.get(record.phone_number_id)
            number_stats = PhoneNumberUsageStats(
                phone_number_id=str(record.phone_number_id),
                phone_number=phone_number.number if phone_number else None,
                display_name=phone_number.display_name if phone_number else None,
            )
            per_number[record.phone_number_id] = number_stats
        number_stats.cost += cost

        if usage_type.is_call:
            minutes = billable_minutes(record.duration)
            stats.total_calls += 1
            stats.total_minutes += minutes
            type_stats.duration = (type_stats.duration or 0) + (record.duration or 0)
            number_stats.calls += 1
            number_stats.minutes += minutes
        elif usage_type.is_sms:
            stats.total_sms += record.quantity
            number_stats.sms += record.quantity
        elif usage_type.is_mms:
            stats.total_mms += record.quantity
            number_stats.mms += record.quantity

    stats.by_phone_number = list(per_number.values())
    return stats


class UsageAggregator:
    """Aggregates a tenant's usage over [start, end)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def tenant_usage(self, tenant_id: UUID, start: datetime, end: datetime) -> UsageStats:
        records = await self.uow.usage_records.list_by_tenant_in_range(tenant_id, start, end)
        phone_number_ids = {record.phone_number_id for record in records}
        phone_numbers = await self.uow.phone_numbers.get_by_ids(phone_number_ids)
        return summarize_usage(records, {number.id: number for number in phone_numbers})
