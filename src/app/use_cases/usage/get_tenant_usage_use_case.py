"""Use Case: Get Tenant Usage"""

from datetime import datetime
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_aggregator import UsageAggregator
from src.domain.base import as_naive_utc

from .dtos import TenantUsageResponse


class GetTenantUsageUseCase:
    """Usage statistics of one tenant over [start, end)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, tenant_id: UUID, start: datetime, end: datetime
    ) -> Result[TenantUsageResponse]:
        start, end = as_naive_utc(start), as_naive_utc(end)
        if end <= start:
            return Return.err(Error("INVALID_PERIOD", "end must be after start"))

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            stats = await UsageAggregator(self.uow).tenant_usage(tenant_id, start, end)

            return Return.ok(
                TenantUsageResponse(
                    tenant_id=str(tenant_id),
                    period_start=start,
                    period_end=end,
                    stats=stats,
                )
            )
