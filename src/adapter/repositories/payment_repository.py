from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.payment_repository import DuplicatePaymentError, IPaymentRepository
from src.domain.entities import Payment


class PaymentRepository(IPaymentRepository):
    """Payment repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, payment_id: UUID) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_payment_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.external_payment_id == external_payment_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if payment.external_payment_id is None:
                raise
            raise DuplicatePaymentError(payment.external_payment_id) from exc
        await self.session.refresh(payment)
        return payment
