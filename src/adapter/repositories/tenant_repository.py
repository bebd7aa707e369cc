from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.tenant_repository import ITenantRepository
from src.domain.base import utcnow
from src.domain.entities import Tenant, TenantStatus


class TenantRepository(ITenantRepository):
    """Tenant repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID"""
        # populate_existing: balance is changed by UPDATEs that bypass the session
        stmt = (
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.code == code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_status(self, status: TenantStatus) -> List[Tenant]:
        stmt = select(Tenant).where(Tenant.status == status).order_by(Tenant.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def update(self, tenant: Tenant) -> Tenant:
        """Update existing tenant"""
        tenant.updated_at = utcnow()
        self.session.add(tenant)
        await self.session.flush()
        await self.session.refresh(tenant)
        return tenant

    async def adjust_balance(self, tenant_id: UUID, delta: Decimal) -> None:
        """Atomic balance increment (negative delta for charges)"""
        stmt = (
            update(Tenant)
            .where(Tenant.id == tenant_id)
            .values(current_balance=Tenant.current_balance + delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def suspend_if_active(self, tenant_id: UUID) -> bool:
        stmt = (
            update(Tenant)
            .where(Tenant.id == tenant_id, Tenant.status == TenantStatus.active)
            .values(status=TenantStatus.suspended, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
