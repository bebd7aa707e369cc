"""Use Case: List Invoices"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_naive_utc
from src.domain.entities import InvoiceStatus

from .dtos import InvoiceListResponse, InvoiceResponse


class ListInvoicesUseCase:
    """
    Filtered page of invoices, newest first.

    start/end filter on the invoice creation time (inclusive).
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        tenant_id: Optional[UUID] = None,
        status: Optional[InvoiceStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Result[InvoiceListResponse]:
        start, end = as_naive_utc(start), as_naive_utc(end)
        if start and end and end < start:
            return Return.err(Error("INVALID_PERIOD", "end must not be before start"))

        async with self.uow:
            invoices, total = await self.uow.invoices.search(
                tenant_id=tenant_id,
                status=status,
                start=start,
                end=end,
                limit=limit,
                offset=offset,
            )
            return Return.ok(
                InvoiceListResponse(
                    invoices=[InvoiceResponse.from_entity(invoice) for invoice in invoices],
                    total=total,
                    limit=limit,
                    offset=offset,
                )
            )
