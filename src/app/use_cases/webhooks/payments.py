"""
Payment provider events.

Event payloads follow the Stripe event shape: {"id", "type",
"data": {"object": {...}}}. Amounts are integer minor units.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.billing import RecordPaymentCommand, RecordPaymentUseCase
from src.domain.entities import ActivityLog, ActivityType, PaymentMethod

from .dtos import DUPLICATE, IGNORED, RECORDED, WebhookAck

logger = logging.getLogger(__name__)

INVOICE_PAID_EVENTS = ("invoice.payment_succeeded", "invoice.paid")
PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


def from_minor_units(value: Any) -> Decimal:
    return Decimal(int(value or 0)) / Decimal(100)


def _uuid_or_none(value: Any) -> Optional[UUID]:
    try:
        return UUID(str(value)) if value else None
    except ValueError:
        return None


class ProcessPaymentEventUseCase:
    """
    Apply a payment provider event.

    Business Logic:
    - invoice.payment_succeeded / invoice.paid: record a payment against the
      local invoice (found by external id, then metadata.invoice_id)
    - payment_intent.succeeded with metadata.tenant_id and no invoice:
      record an account payment
    - payment_intent.payment_failed: log payment_failed
    - anything else: acknowledged and ignored

    Idempotent: payments are keyed by the provider payment intent id.
    """

    def __init__(self, uow: UnitOfWork, record_payment: RecordPaymentUseCase):
        self.uow = uow
        self.record_payment = record_payment

    async def execute(self, event: Dict[str, Any]) -> Result[WebhookAck]:
        event_type = event.get("type")
        obj = (event.get("data") or {}).get("object") or {}

        if event_type in INVOICE_PAID_EVENTS:
            return await self._invoice_paid(obj)
        if event_type == PAYMENT_SUCCEEDED:
            return await self._payment_succeeded(obj)
        if event_type == PAYMENT_FAILED:
            return await self._payment_failed(obj)

        logger.info(f"Unhandled payment event {event_type} ({event.get('id')})")
        return Return.ok(WebhookAck(status=IGNORED, detail=f"unhandled event {event_type}"))

    async def _find_invoice(self, obj: Dict[str, Any]) -> Optional[Tuple[UUID, UUID]]:
        """Returns (invoice id, tenant id) of the local invoice"""
        async with self.uow:
            invoice = None
            if obj.get("id"):
                invoice = await self.uow.invoices.get_by_external_id(obj["id"])
            local_id = _uuid_or_none((obj.get("metadata") or {}).get("invoice_id"))
            if invoice is None and local_id:
                invoice = await self.uow.invoices.get_by_id(local_id)
            if invoice is None:
                return None
            return invoice.id, invoice.tenant_id

    async def _invoice_paid(self, obj: Dict[str, Any]) -> Result[WebhookAck]:
        found = await self._find_invoice(obj)
        if found is None:
            logger.warning(f"Paid provider invoice {obj.get('id')} has no local invoice")
            return Return.ok(WebhookAck(status=IGNORED, detail="unknown invoice"))
        invoice_id, tenant_id = found

        amount = from_minor_units(obj.get("amount_paid"))
        if amount <= 0:
            return Return.ok(WebhookAck(status=IGNORED, detail="nothing paid"))

        return await self._record(
            RecordPaymentCommand(
                tenant_id=tenant_id,
                invoice_id=invoice_id,
                amount=amount,
                method=PaymentMethod.credit_card,
                external_payment_id=obj.get("payment_intent") or obj.get("id"),
                reference_number=obj.get("number"),
                metadata={"provider_invoice_id": obj.get("id")},
            )
        )

    async def _payment_succeeded(self, obj: Dict[str, Any]) -> Result[WebhookAck]:
        # Intents created for a provider invoice are settled by the invoice event
        if obj.get("invoice"):
            return Return.ok(WebhookAck(status=IGNORED, detail="handled by invoice event"))

        metadata = obj.get("metadata") or {}
        tenant_id = _uuid_or_none(metadata.get("tenant_id"))
        if tenant_id is None:
            return Return.ok(WebhookAck(status=IGNORED, detail="no tenant metadata"))

        amount = from_minor_units(obj.get("amount_received") or obj.get("amount"))
        return await self._record(
            RecordPaymentCommand(
                tenant_id=tenant_id,
                invoice_id=_uuid_or_none(metadata.get("invoice_id")),
                amount=amount,
                method=PaymentMethod.credit_card,
                external_payment_id=obj.get("id"),
            )
        )

    async def _record(self, command: RecordPaymentCommand) -> Result[WebhookAck]:
        result = await self.record_payment.execute(command)
        if result.is_err():
            if result.error.code in ("INVOICE_NOT_PAYABLE", "TENANT_NOT_FOUND", "INVALID_AMOUNT"):
                logger.warning(
                    f"Payment {command.external_payment_id} not recorded: {result.error.code}"
                )
                return Return.ok(WebhookAck(status=IGNORED, detail=result.error.code))
            return result

        payment = result.value
        return Return.ok(
            WebhookAck(status=DUPLICATE if payment.duplicate else RECORDED, payment_id=payment.id)
        )

    async def _payment_failed(self, obj: Dict[str, Any]) -> Result[WebhookAck]:
        tenant_id = _uuid_or_none((obj.get("metadata") or {}).get("tenant_id"))
        error = (obj.get("last_payment_error") or {}).get("message", "unknown error")

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id) if tenant_id else None
            if tenant is None:
                logger.warning(f"Failed payment {obj.get('id')} for unknown tenant")
                return Return.ok(WebhookAck(status=IGNORED, detail="unknown tenant"))

            amount = from_minor_units(obj.get("amount"))
            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant.id,
                    type=ActivityType.payment_failed,
                    description=f"Payment of ${amount} failed: {error}"[:500],
                    event_metadata={
                        "payment_intent_id": obj.get("id"),
                        "amount": str(amount),
                        "error": error,
                    },
                    actor="webhook",
                )
            )
            await self.uow.commit()

        logger.warning(f"Payment {obj.get('id')} failed for tenant {tenant.code}: {error}")
        return Return.ok(WebhookAck(status=RECORDED))
