from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Payment


class DuplicatePaymentError(Exception):
    """Raised when external_payment_id was already recorded"""


class IPaymentRepository(ABC):
    """Payment repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, payment_id: UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def get_by_external_id(self, external_payment_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Raises:
            DuplicatePaymentError: external_payment_id already recorded
        """
        pass
