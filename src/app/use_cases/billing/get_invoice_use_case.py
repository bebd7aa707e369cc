"""Use Case: Get Invoice"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import InvoiceResponse


class GetInvoiceUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, invoice_id: UUID) -> Result[InvoiceResponse]:
        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            if not invoice:
                return Return.err(Error("INVOICE_NOT_FOUND", "Invoice not found"))
            return Return.ok(InvoiceResponse.from_entity(invoice))
