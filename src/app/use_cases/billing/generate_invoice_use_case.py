"""
Use Case: Generate Invoice

Bills a tenant for one period: phone number rentals plus metered usage,
with tax. The invoice is committed locally first; mirroring it to the
payment provider happens afterwards and may fail without consequence.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.document_numbers import INVOICE_PREFIX, next_document_number
from src.app.services.invoice_calculator import (
    build_line_items,
    compute_totals,
    serialize_line_items,
    usage_snapshot,
)
from src.app.services.invoice_mirror import InvoiceMirror
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_aggregator import UsageAggregator
from src.domain.base import as_naive_utc, utcnow
from src.domain.entities import ActivityLog, ActivityType, Invoice, InvoiceStatus, Tenant

from .dtos import GenerateInvoiceCommand, InvoiceResponse

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("8.875")


class GenerateInvoiceUseCase:
    """
    Generate an invoice for a tenant and billing period.

    Business Logic:
    1. Validate period and tenant
    2. Aggregate usage over [period_start, period_end)
    3. One rental line per active phone number, one usage line if cost > 0
    4. subtotal, tax (half-up to cents) and total
    5. Allocate INV-<year>-<seq>, persist as pending with an
       invoice_created activity, all in one transaction. A zero total
       has nothing to collect and is stored as paid
    6. After commit, mirror to the payment provider (best effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        mirror: Optional[InvoiceMirror] = None,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        due_days: int = 30,
        retry_attempts: int = 3,
        actor: str = "admin",
    ):
        self.uow = uow
        self.mirror = mirror
        self.tax_rate = Decimal(str(tax_rate))
        self.due_days = due_days
        self.retry_attempts = retry_attempts
        self.actor = actor

    async def execute(self, command: GenerateInvoiceCommand) -> Result[InvoiceResponse]:
        period_start = as_naive_utc(command.period_start)
        period_end = as_naive_utc(command.period_end)
        if period_end <= period_start:
            return Return.err(
                Error("INVALID_BILLING_PERIOD", "period_end must be after period_start")
            )

        result = await with_conflict_retry(
            lambda: self._create(
                command.tenant_id,
                period_start,
                period_end,
                command.notes,
                command.skip_if_invoiced,
            ),
            attempts=self.retry_attempts,
            label=f"generate invoice for tenant {command.tenant_id}",
        )
        if result.is_err():
            return result

        invoice, tenant = result.value
        if self.mirror is not None and invoice.total_amount > 0:
            invoice = await self._mirror(invoice, tenant)

        return Return.ok(InvoiceResponse.from_entity(invoice))

    async def _create(
        self,
        tenant_id: UUID,
        period_start: datetime,
        period_end: datetime,
        notes: Optional[str],
        skip_if_invoiced: bool = False,
    ) -> Result[Tuple[Invoice, Tenant]]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            stats = await UsageAggregator(self.uow).tenant_usage(tenant_id, period_start, period_end)
            phone_numbers = await self.uow.phone_numbers.list_active_by_tenant(tenant_id)

            line_items = build_line_items(phone_numbers, stats)
            totals = compute_totals(line_items, self.tax_rate)

            now = utcnow()
            invoice_number = await next_document_number(self.uow, INVOICE_PREFIX, now)

            # Checked after the counter write: concurrent writers are serialized
            # from there on, so a run that lost the race sees the winner's invoice
            if skip_if_invoiced and await self.uow.invoices.exists_for_period(
                tenant_id, period_start, period_end
            ):
                return Return.err(
                    Error("INVOICE_EXISTS", "An invoice already covers this period")
                )

            settled = totals.total_amount <= 0

            invoice = Invoice(
                tenant_id=tenant_id,
                invoice_number=invoice_number,
                status=InvoiceStatus.paid if settled else InvoiceStatus.pending,
                billing_period_start=period_start,
                billing_period_end=period_end,
                due_date=period_end + timedelta(days=self.due_days),
                subtotal=totals.subtotal,
                tax_rate=totals.tax_rate,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount,
                paid_amount=Decimal("0"),
                line_items=serialize_line_items(line_items),
                usage_summary=usage_snapshot(stats),
                notes=notes,
                paid_at=now if settled else None,
                created_at=now,
                updated_at=now,
            )
            invoice = await self.uow.invoices.create(invoice)

            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant_id,
                    type=ActivityType.invoice_created,
                    description=f"Invoice {invoice_number} created for ${totals.total_amount}",
                    event_metadata={
                        "invoice_id": str(invoice.id),
                        "invoice_number": invoice_number,
                        "total_amount": str(totals.total_amount),
                    },
                    actor=self.actor,
                )
            )

            await self.uow.commit()
            logger.info(f"Invoice {invoice_number} created for tenant {tenant.code}")

            return Return.ok((invoice, tenant))

    async def _mirror(self, invoice: Invoice, tenant: Tenant) -> Invoice:
        external_id = await self.mirror.mirror(invoice, tenant)
        if not external_id:
            return invoice

        try:
            async with self.uow:
                stored = await self.uow.invoices.get_by_id(invoice.id)
                stored.external_invoice_id = external_id
                stored = await self.uow.invoices.update(stored)
                await self.uow.activity_logs.create(
                    ActivityLog(
                        tenant_id=stored.tenant_id,
                        type=ActivityType.invoice_sent,
                        description=f"Invoice {stored.invoice_number} sent to payment provider",
                        event_metadata={
                            "invoice_id": str(stored.id),
                            "external_invoice_id": external_id,
                        },
                        actor="system",
                    )
                )
                await self.uow.commit()
                return stored
        except SQLAlchemyError as exc:
            logger.error(
                f"Invoice {invoice.invoice_number} mirrored as {external_id} "
                f"but the id could not be stored: {exc}"
            )
            return invoice
