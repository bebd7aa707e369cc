from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import UsageRecord, UsageType


class DuplicateUsageRecordError(Exception):
    """Raised when (type, provider_reference_id) already exists"""


class IUsageRecordRepository(ABC):
    """UsageRecord repository interface - application layer"""

    @abstractmethod
    async def create(self, usage_record: UsageRecord) -> UsageRecord:
        """
        Append a usage record (immutable).

        Raises:
            DuplicateUsageRecordError: provider reference already recorded
        """
        pass

    @abstractmethod
    async def get_by_provider_reference(
        self, usage_type: UsageType, provider_reference_id: str
    ) -> Optional[UsageRecord]:
        pass

    @abstractmethod
    async def list_by_tenant_in_range(
        self, tenant_id: UUID, start: datetime, end: datetime
    ) -> List[UsageRecord]:
        """All records of a tenant with start <= created_at < end"""
        pass

    @abstractmethod
    async def list_by_phone_number(
        self,
        phone_number_id: UUID,
        start: datetime,
        end: datetime,
        usage_type: Optional[UsageType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[List[UsageRecord], int]:
        """
        Page of records for one phone number, newest first.

        Returns:
            Tuple of (records, total matching records)
        """
        pass

    @abstractmethod
    async def sum_cost_since(self, tenant_id: UUID, since: datetime) -> Decimal:
        pass
