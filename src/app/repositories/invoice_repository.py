from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Invoice, InvoiceStatus


class IInvoiceRepository(ABC):
    """Invoice repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invoice_id: UUID) -> Optional[Invoice]:
        pass

    @abstractmethod
    async def get_by_external_id(self, external_invoice_id: str) -> Optional[Invoice]:
        pass

    @abstractmethod
    async def exists_for_period(
        self, tenant_id: UUID, period_start: datetime, period_end: datetime
    ) -> bool:
        """True if a non-cancelled invoice already covers this period"""
        pass

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    async def search(
        self,
        tenant_id: Optional[UUID] = None,
        status: Optional[InvoiceStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Invoice], int]:
        """Filtered page of invoices created in [start, end), newest first, plus the total count"""
        pass

    @abstractmethod
    async def list_pending_due_before(self, now: datetime) -> List[Invoice]:
        """Pending invoices with an amount owed whose due date has passed"""
        pass

    @abstractmethod
    async def mark_overdue(self, invoice_id: UUID, now: datetime) -> bool:
        """Conditionally move pending -> overdue; True if this call changed it"""
        pass

    @abstractmethod
    async def apply_payment(
        self, invoice_id: UUID, amount: Decimal, now: datetime
    ) -> Tuple[Invoice, Decimal]:
        """
        Atomically add amount to paid_amount, capped at total_amount, and
        move the invoice to paid once fully settled.

        Returns:
            Tuple of (refreshed invoice, portion of amount applied)
        """
        pass

    @abstractmethod
    async def count_overdue_by_tenant(self, min_count: int) -> List[Tuple[UUID, int]]:
        """(tenant_id, count of overdue invoices with an amount owed), at least min_count"""
        pass
