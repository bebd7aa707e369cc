from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Tenant, TenantStatus


class ITenantRepository(ABC):
    """Tenant repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, tenant_id: UUID) -> Optional[Tenant]:
        """Get tenant by ID"""
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Tenant]:
        """Get tenant by its human-readable code"""
        pass

    @abstractmethod
    async def list_by_status(self, status: TenantStatus) -> List[Tenant]:
        pass

    @abstractmethod
    async def create(self, tenant: Tenant) -> Tenant:
        """Create a new tenant"""
        pass

    @abstractmethod
    async def update(self, tenant: Tenant) -> Tenant:
        """Update existing tenant"""
        pass

    @abstractmethod
    async def adjust_balance(self, tenant_id: UUID, delta: Decimal) -> None:
        """
        Atomically add delta to current_balance.

        Must be a single UPDATE ... SET current_balance = current_balance + ?
        so concurrent usage and payment events never lose an update.
        """
        pass

    @abstractmethod
    async def suspend_if_active(self, tenant_id: UUID) -> bool:
        """Suspend an active tenant; True only if this call changed the status"""
        pass
