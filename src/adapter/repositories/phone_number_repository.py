from typing import Iterable, List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.phone_number_repository import IPhoneNumberRepository
from src.domain.base import utcnow
from src.domain.entities import PhoneNumber, PhoneNumberStatus


class PhoneNumberRepository(IPhoneNumberRepository):
    """PhoneNumber repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, phone_number_id: UUID) -> Optional[PhoneNumber]:
        stmt = select(PhoneNumber).where(PhoneNumber.id == phone_number_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_number(self, number: str) -> Optional[PhoneNumber]:
        stmt = select(PhoneNumber).where(PhoneNumber.number == number)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, phone_number_ids: Iterable[UUID]) -> List[PhoneNumber]:
        ids = list(phone_number_ids)
        if not ids:
            return []
        stmt = select(PhoneNumber).where(PhoneNumber.id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_by_tenant(self, tenant_id: UUID) -> List[PhoneNumber]:
        stmt = (
            select(PhoneNumber)
            .where(
                PhoneNumber.tenant_id == tenant_id,
                PhoneNumber.status == PhoneNumberStatus.active,
            )
            .order_by(PhoneNumber.provisioned_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, phone_number: PhoneNumber) -> PhoneNumber:
        self.session.add(phone_number)
        await self.session.flush()
        await self.session.refresh(phone_number)
        return phone_number

    async def update(self, phone_number: PhoneNumber) -> PhoneNumber:
        phone_number.updated_at = utcnow()
        self.session.add(phone_number)
        await self.session.flush()
        await self.session.refresh(phone_number)
        return phone_number
