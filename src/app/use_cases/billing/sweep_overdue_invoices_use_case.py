"""
Use Case: Sweep Overdue Invoices

Daily job: marks pending invoices past their due date as overdue and
suspends active tenants that accumulated too many overdue invoices.
"""

import logging
from datetime import datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_naive_utc, utcnow
from src.domain.entities import ActivityLog, ActivityType

from .dtos import SweepResponse

logger = logging.getLogger(__name__)


class SweepOverdueInvoicesUseCase:
    """
    Mark overdue invoices and suspend delinquent tenants.

    Business Logic:
    1. pending and due_date < now -> overdue (conditional update, so a
       payment landing concurrently wins)
    2. Recount overdue invoices per tenant from current state
    3. Active tenants with >= suspend_after overdue invoices are suspended;
       suspended and inactive tenants are left as they are

    Zero-total invoices owe nothing and are never counted.

    Idempotent: only rows this run actually changed produce activity
    entries; a second run changes and logs nothing.
    """

    def __init__(self, uow: UnitOfWork, suspend_after: int = 2, retry_attempts: int = 3):
        self.uow = uow
        self.suspend_after = suspend_after
        self.retry_attempts = retry_attempts

    async def execute(self, now: Optional[datetime] = None) -> Result[SweepResponse]:
        now = as_naive_utc(now) or utcnow()
        return await with_conflict_retry(
            lambda: self._sweep(now),
            attempts=self.retry_attempts,
            label="overdue sweep",
        )

    async def _sweep(self, now: datetime) -> Result[SweepResponse]:
        response = SweepResponse()

        async with self.uow:
            for invoice in await self.uow.invoices.list_pending_due_before(now):
                if not await self.uow.invoices.mark_overdue(invoice.id, now):
                    continue
                await self.uow.activity_logs.create(
                    ActivityLog(
                        tenant_id=invoice.tenant_id,
                        type=ActivityType.invoice_overdue,
                        description=f"Invoice {invoice.invoice_number} is overdue",
                        event_metadata={
                            "invoice_id": str(invoice.id),
                            "invoice_number": invoice.invoice_number,
                            "due_date": invoice.due_date.isoformat(),
                        },
                        actor="system",
                    )
                )
                response.invoices_marked_overdue.append(invoice.invoice_number)

            delinquent = await self.uow.invoices.count_overdue_by_tenant(self.suspend_after)
            for tenant_id, overdue_count in delinquent:
                if not await self.uow.tenants.suspend_if_active(tenant_id):
                    continue
                await self.uow.activity_logs.create(
                    ActivityLog(
                        tenant_id=tenant_id,
                        type=ActivityType.client_suspended,
                        description=f"Suspended due to {overdue_count} overdue invoices",
                        event_metadata={
                            "reason": "overdue_invoices",
                            "overdue_invoices": overdue_count,
                        },
                        actor="system",
                    )
                )
                response.tenants_suspended.append(str(tenant_id))

            await self.uow.commit()

        if response.invoices_marked_overdue or response.tenants_suspended:
            logger.warning(
                f"Overdue sweep: {len(response.invoices_marked_overdue)} invoices overdue, "
                f"{len(response.tenants_suspended)} tenants suspended"
            )
        return Return.ok(response)
