"""
Use Case: Restore Tenant

Reactivates a suspended tenant, typically after overdue invoices are paid.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityLog, ActivityType, TenantStatus

from .dtos import TenantStatusResponse


class RestoreTenantUseCase:
    """
    Restore a suspended tenant.

    Business Logic:
    1. Validate tenant exists
    2. Update tenant status to active
    3. Log client_activated

    Idempotent: restoring an already-active tenant succeeds and logs nothing.
    The overdue sweep suspends the tenant again on its next run if the
    overdue invoices are still unpaid.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID) -> Result[TenantStatusResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            if tenant.status == TenantStatus.active:
                return Return.ok(TenantStatusResponse(status=TenantStatus.active, changed=False))

            previous = TenantStatus(tenant.status)
            tenant.status = TenantStatus.active
            await self.uow.tenants.update(tenant)

            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant_id,
                    type=ActivityType.client_activated,
                    description=f"Client {tenant.business_name} activated",
                    event_metadata={
                        "previous_status": previous.value,
                        "restored_at": utcnow().isoformat(),
                    },
                    actor="admin",
                )
            )

            await self.uow.commit()

            return Return.ok(TenantStatusResponse(status=TenantStatus.active, changed=True))
