from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from uuid import UUID

from src.domain.entities import PhoneNumber


class IPhoneNumberRepository(ABC):
    """PhoneNumber repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, phone_number_id: UUID) -> Optional[PhoneNumber]:
        pass

    @abstractmethod
    async def get_by_number(self, number: str) -> Optional[PhoneNumber]:
        """Get phone number by its E.164 value"""
        pass

    @abstractmethod
    async def get_by_ids(self, phone_number_ids: Iterable[UUID]) -> List[PhoneNumber]:
        pass

    @abstractmethod
    async def list_active_by_tenant(self, tenant_id: UUID) -> List[PhoneNumber]:
        """Active (billable) phone numbers of a tenant"""
        pass

    @abstractmethod
    async def create(self, phone_number: PhoneNumber) -> PhoneNumber:
        pass

    @abstractmethod
    async def update(self, phone_number: PhoneNumber) -> PhoneNumber:
        pass
