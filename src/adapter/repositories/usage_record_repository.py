from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.usage_record_repository import (
    DuplicateUsageRecordError,
    IUsageRecordRepository,
)
from src.domain.entities import UsageRecord, UsageType
from src.domain.money import to_decimal


class UsageRecordRepository(IUsageRecordRepository):
    """UsageRecord repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, usage_record: UsageRecord) -> UsageRecord:
        """Append a usage record (immutable)"""
        self.session.add(usage_record)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if usage_record.provider_reference_id is None:
                raise
            raise DuplicateUsageRecordError(usage_record.provider_reference_id) from exc
        await self.session.refresh(usage_record)
        return usage_record

    async def get_by_provider_reference(
        self, usage_type: UsageType, provider_reference_id: str
    ) -> Optional[UsageRecord]:
        stmt = select(UsageRecord).where(
            UsageRecord.type == usage_type,
            UsageRecord.provider_reference_id == provider_reference_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_tenant_in_range(
        self, tenant_id: UUID, start: datetime, end: datetime
    ) -> List[UsageRecord]:
        stmt = (
            select(UsageRecord)
            .where(
                UsageRecord.tenant_id == tenant_id,
                UsageRecord.created_at >= start,
                UsageRecord.created_at < end,
            )
            .order_by(UsageRecord.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_phone_number(
        self,
        phone_number_id: UUID,
        start: datetime,
        end: datetime,
        usage_type: Optional[UsageType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[UsageRecord], int]:
        conditions = [
            UsageRecord.phone_number_id == phone_number_id,
            UsageRecord.created_at >= start,
            UsageRecord.created_at < end,
        ]
        if usage_type is not None:
            conditions.append(UsageRecord.type == usage_type)

        count_stmt = select(func.count()).select_from(UsageRecord).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(UsageRecord)
            .where(*conditions)
            .order_by(UsageRecord.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def sum_cost_since(self, tenant_id: UUID, since: datetime) -> Decimal:
        stmt = select(func.sum(UsageRecord.cost)).where(
            UsageRecord.tenant_id == tenant_id,
            UsageRecord.created_at > since,
        )
        result = await self.session.execute(stmt)
        return to_decimal(result.scalar_one_or_none())
