"""Use Case: Get Tenant"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import TenantResponse


class GetTenantUseCase:
    """Tenant with its current balance and active phone numbers"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID) -> Result[TenantResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
            phone_numbers = await self.uow.phone_numbers.list_active_by_tenant(tenant_id)
            return Return.ok(TenantResponse.from_entity(tenant, phone_numbers))
