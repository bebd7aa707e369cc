"""
Use Case: Record Payment

Credits money received to the tenant balance and, when an invoice is
given, applies it to that invoice.
"""

import logging

from libs.result import Error, Result, Return
from src.app.repositories.payment_repository import DuplicatePaymentError
from src.app.services.document_numbers import PAYMENT_PREFIX, next_document_number
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    ActivityLog,
    ActivityType,
    InvoiceStatus,
    Payment,
    PaymentStatus,
)
from src.domain.money import ZERO, to_cents

from .dtos import PaymentResponse, RecordPaymentCommand

logger = logging.getLogger(__name__)


class RecordPaymentUseCase:
    """
    Record a completed payment.

    Business Logic:
    1. amount > 0; tenant exists; invoice (optional) exists, belongs to the
       tenant and is pending or overdue
    2. A known external_payment_id returns the existing payment unchanged
    3. Allocate PAY-<year>-<seq>
    4. Apply to the invoice: paid_amount = min(total, paid_amount + amount),
       paid once fully settled
    5. Credit the full amount to the tenant balance; any excess over the
       invoice stays as account credit
    6. Log payment_received
    """

    def __init__(self, uow: UnitOfWork, retry_attempts: int = 3, actor: str = "admin"):
        self.uow = uow
        self.retry_attempts = retry_attempts
        self.actor = actor

    async def execute(self, command: RecordPaymentCommand) -> Result[PaymentResponse]:
        if command.amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Payment amount must be positive"))

        return await with_conflict_retry(
            lambda: self._record(command),
            attempts=self.retry_attempts,
            label=f"record payment for tenant {command.tenant_id}",
        )

    async def _record(self, command: RecordPaymentCommand) -> Result[PaymentResponse]:
        async with self.uow:
            if command.external_payment_id:
                existing = await self.uow.payments.get_by_external_id(command.external_payment_id)
                if existing:
                    logger.info(f"Duplicate payment {command.external_payment_id}")
                    return Return.ok(PaymentResponse.from_entity(existing, duplicate=True))

            tenant = await self.uow.tenants.get_by_id(command.tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            invoice = None
            if command.invoice_id:
                invoice = await self.uow.invoices.get_by_id(command.invoice_id)
                if not invoice:
                    return Return.err(Error("INVOICE_NOT_FOUND", "Invoice not found"))
                if invoice.tenant_id != tenant.id:
                    return Return.err(
                        Error("INVOICE_TENANT_MISMATCH", "Invoice does not belong to tenant")
                    )
                if not invoice.is_payable:
                    return Return.err(
                        Error(
                            "INVOICE_NOT_PAYABLE",
                            f"Invoice is {InvoiceStatus(invoice.status).value} and cannot be paid",
                        )
                    )

            now = utcnow()
            amount = to_cents(command.amount)

            # First write of the transaction; later reads are serialized behind it
            payment_number = await next_document_number(self.uow, PAYMENT_PREFIX, now)

            applied = ZERO
            if invoice is not None:
                invoice, applied = await self.uow.invoices.apply_payment(invoice.id, amount, now)

            payment = Payment(
                payment_number=payment_number,
                tenant_id=tenant.id,
                invoice_id=invoice.id if invoice else None,
                status=PaymentStatus.completed,
                method=command.method,
                amount=amount,
                applied_amount=applied,
                external_payment_id=command.external_payment_id,
                reference_number=command.reference_number,
                notes=command.notes,
                payment_metadata=command.metadata,
                created_at=now,
                processed_at=now,
            )
            try:
                payment = await self.uow.payments.create(payment)
            except DuplicatePaymentError:
                await self.uow.rollback()
                existing = await self.uow.payments.get_by_external_id(command.external_payment_id)
                return Return.ok(PaymentResponse.from_entity(existing, duplicate=True))

            await self.uow.tenants.adjust_balance(tenant.id, amount)

            metadata = {
                "payment_id": str(payment.id),
                "payment_number": payment_number,
                "amount": str(amount),
                "method": command.method.value,
            }
            if invoice is not None:
                metadata.update(
                    invoice_id=str(invoice.id),
                    invoice_number=invoice.invoice_number,
                    applied_amount=str(applied),
                    invoice_status=InvoiceStatus(invoice.status).value,
                )
            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant.id,
                    type=ActivityType.payment_received,
                    description=f"Payment {payment_number} received: ${amount}",
                    event_metadata=metadata,
                    actor=self.actor,
                )
            )

            await self.uow.commit()
            logger.info(f"Payment {payment_number} of {amount} recorded for tenant {tenant.code}")

            return Return.ok(PaymentResponse.from_entity(payment, invoice))
