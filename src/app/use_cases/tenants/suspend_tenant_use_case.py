"""
Use Case: Suspend Tenant

Manual suspension, e.g. for non-payment outside the automatic sweep.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityLog, ActivityType, TenantStatus

from .dtos import TenantStatusResponse


class SuspendTenantUseCase:
    """
    Suspend a tenant.

    Business Logic:
    1. Validate tenant exists
    2. Update tenant status to suspended
    3. Log client_suspended

    Idempotent: suspending an already-suspended tenant succeeds and logs nothing
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID, reason: str = "manual") -> Result[TenantStatusResponse]:
        """
        Execute suspend tenant use case.

        Args:
            tenant_id: UUID of tenant to suspend
            reason: Free-text reason stored in the activity entry

        Returns:
            Result[TenantStatusResponse] with status and whether it changed
        """
        async with self.uow:
            # 1. Get tenant
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            if tenant.status == TenantStatus.suspended:
                return Return.ok(TenantStatusResponse(status=TenantStatus.suspended, changed=False))

            # 2. Update tenant status to suspended
            tenant.status = TenantStatus.suspended
            await self.uow.tenants.update(tenant)

            # 3. Create activity entry
            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant_id,
                    type=ActivityType.client_suspended,
                    description=f"Client {tenant.business_name} suspended",
                    event_metadata={"reason": reason, "suspended_at": utcnow().isoformat()},
                    actor="admin",
                )
            )

            # 4. Commit transaction
            await self.uow.commit()

            return Return.ok(TenantStatusResponse(status=TenantStatus.suspended, changed=True))
