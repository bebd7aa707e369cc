from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invoice_repository import IInvoiceRepository
from src.domain.base import utcnow
from src.domain.entities import Invoice, InvoiceStatus
from src.domain.entities.invoice import PAYABLE_STATUSES
from src.domain.money import ZERO, to_decimal


class InvoiceRepository(IInvoiceRepository):
    """Invoice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invoice_id: UUID) -> Optional[Invoice]:
        stmt = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_invoice_id: str) -> Optional[Invoice]:
        stmt = select(Invoice).where(Invoice.external_invoice_id == external_invoice_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists_for_period(
        self, tenant_id: UUID, period_start: datetime, period_end: datetime
    ) -> bool:
        stmt = select(func.count()).select_from(Invoice).where(
            Invoice.tenant_id == tenant_id,
            Invoice.billing_period_start == period_start,
            Invoice.billing_period_end == period_end,
            Invoice.status != InvoiceStatus.cancelled,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def update(self, invoice: Invoice) -> Invoice:
        invoice.updated_at = utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def search(
        self,
        tenant_id: Optional[UUID] = None,
        status: Optional[InvoiceStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Invoice], int]:
        conditions = []
        if tenant_id is not None:
            conditions.append(Invoice.tenant_id == tenant_id)
        if status is not None:
            conditions.append(Invoice.status == status)
        if start is not None:
            conditions.append(Invoice.created_at >= start)
        if end is not None:
            conditions.append(Invoice.created_at < end)

        count_stmt = select(func.count()).select_from(Invoice).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Invoice)
            .where(*conditions)
            .order_by(Invoice.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_pending_due_before(self, now: datetime) -> List[Invoice]:
        stmt = (
            select(Invoice)
            .where(
                Invoice.status == InvoiceStatus.pending,
                Invoice.due_date < now,
                Invoice.total_amount > 0,
            )
            .order_by(Invoice.due_date)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_overdue(self, invoice_id: UUID, now: datetime) -> bool:
        # A payment may have settled the invoice since it was selected
        stmt = (
            update(Invoice)
            .where(Invoice.id == invoice_id, Invoice.status == InvoiceStatus.pending)
            .values(status=InvoiceStatus.overdue, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def apply_payment(
        self, invoice_id: UUID, amount: Decimal, now: datetime
    ) -> Tuple[Invoice, Decimal]:
        # Row lock on PostgreSQL; SQLite already serializes writers
        current = (
            await self.session.execute(
                select(Invoice.paid_amount, Invoice.total_amount)
                .where(Invoice.id == invoice_id)
                .with_for_update()
            )
        ).one()
        outstanding = max(to_decimal(current[1]) - to_decimal(current[0]), ZERO)
        applied = min(amount, outstanding)

        new_paid = Invoice.paid_amount + amount
        stmt = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(
                paid_amount=case(
                    (new_paid > Invoice.total_amount, Invoice.total_amount),
                    else_=new_paid,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

        invoice = await self.get_by_id(invoice_id)

        # Decided on the refreshed Decimal values; Numeric columns may be
        # floating point on some backends
        if invoice.paid_amount >= invoice.total_amount:
            settle = (
                update(Invoice)
                .where(Invoice.id == invoice_id, Invoice.status.in_(PAYABLE_STATUSES))
                .values(status=InvoiceStatus.paid, paid_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(settle)
            await self.session.flush()
            invoice = await self.get_by_id(invoice_id)
        return invoice, applied

    async def count_overdue_by_tenant(self, min_count: int) -> List[Tuple[UUID, int]]:
        overdue_count = func.count(Invoice.id)
        stmt = (
            select(Invoice.tenant_id, overdue_count)
            .where(Invoice.status == InvoiceStatus.overdue, Invoice.total_amount > 0)
            .group_by(Invoice.tenant_id)
            .having(overdue_count >= min_count)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
