"""
Use Case: Generate Cycle Invoices

Scheduled run that invoices every active tenant whose billing cycle closed
on the run date.
"""

import logging
from datetime import date, datetime
from typing import Optional, Tuple

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import BillingCycle, TenantStatus

from .dtos import CycleInvoicesResponse, GenerateInvoiceCommand
from .generate_invoice_use_case import GenerateInvoiceUseCase

logger = logging.getLogger(__name__)

CYCLE_MONTHS = {
    BillingCycle.monthly: 1,
    BillingCycle.quarterly: 3,
    BillingCycle.annual: 12,
}


def shift_months(day: date, months: int) -> date:
    """First-of-month arithmetic; day must be the 1st"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def closed_period(cycle: BillingCycle, run_date: date) -> Optional[Tuple[datetime, datetime]]:
    """
    The [start, end) period that closes on run_date, or None.

    Cycles close on the 1st: monthly every month, quarterly in Jan/Apr/Jul/Oct,
    annual in January.
    """
    months = CYCLE_MONTHS[BillingCycle(cycle)]
    if run_date.day != 1 or (run_date.month - 1) % months != 0:
        return None
    start = shift_months(run_date, -months)
    return (
        datetime(start.year, start.month, start.day),
        datetime(run_date.year, run_date.month, run_date.day),
    )


class GenerateCycleInvoicesUseCase:
    """
    Invoice all active tenants whose cycle closed on run_date.

    Idempotent: tenants that already have an invoice for the period are
    skipped, so a re-run after a partial failure only fills the gaps. The
    check is repeated inside the transaction that creates the invoice, so
    overlapping runs cannot bill a period twice.
    """

    def __init__(self, uow: UnitOfWork, generator: GenerateInvoiceUseCase):
        self.uow = uow
        self.generator = generator

    async def execute(self, run_date: date) -> Result[CycleInvoicesResponse]:
        response = CycleInvoicesResponse(run_date=run_date)

        async with self.uow:
            tenants = await self.uow.tenants.list_by_status(TenantStatus.active)
            due = []
            for tenant in tenants:
                period = closed_period(tenant.billing_cycle, run_date)
                if period is None:
                    continue
                if await self.uow.invoices.exists_for_period(tenant.id, *period):
                    response.skipped.append(tenant.code)
                    continue
                due.append((tenant.id, tenant.code, period))

        for tenant_id, code, (period_start, period_end) in due:
            result = await self.generator.execute(
                GenerateInvoiceCommand(
                    tenant_id=tenant_id,
                    period_start=period_start,
                    period_end=period_end,
                    skip_if_invoiced=True,
                )
            )
            if result.is_err() and result.error.code == "INVOICE_EXISTS":
                # Billed by an overlapping run since the check above
                response.skipped.append(code)
                continue
            if result.is_err():
                logger.error(f"Cycle invoice for {code} failed: {result.error.code}")
                response.failed.append({"tenant": code, "error": result.error.code})
                continue
            response.generated.append(result.value.invoice_number)

        logger.info(
            f"Cycle invoices for {run_date}: {len(response.generated)} generated, "
            f"{len(response.skipped)} skipped, {len(response.failed)} failed"
        )
        return Return.ok(response)
