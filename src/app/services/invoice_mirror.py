"""
Invoice Mirror

Pushes a committed local invoice to the payment provider. Best effort: the
local invoice is the source of truth and stays pending when the provider is
down. Must be called with no database transaction open.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from src.app.services.payment_provider import IPaymentProvider, PaymentProviderError
from src.domain.entities import Invoice, Tenant
from src.domain.money import to_provider_cents

logger = logging.getLogger(__name__)


@dataclass
class MirrorSettings:
    timeout_seconds: float = 10.0
    max_attempts: int = 3
    backoff_seconds: float = 0.5
    days_until_due: int = 30


class InvoiceMirror:
    def __init__(self, provider: Optional[IPaymentProvider], settings: MirrorSettings = None):
        self.provider = provider
        self.settings = settings or MirrorSettings()

    async def mirror(self, invoice: Invoice, tenant: Tenant) -> Optional[str]:
        """
        Returns the remote invoice id, or None when skipped or failed.

        Retries reuse the same idempotency keys so a timed-out attempt that
        did reach the provider is not duplicated.
        """
        if self.provider is None:
            logger.debug(f"Payment provider not configured, {invoice.invoice_number} not mirrored")
            return None
        if not tenant.external_customer_id:
            logger.info(
                f"Tenant {tenant.code} has no payment provider customer, "
                f"{invoice.invoice_number} not mirrored"
            )
            return None

        for attempt in range(1, self.settings.max_attempts + 1):
            try:
                return await asyncio.wait_for(
                    self._push(invoice, tenant.external_customer_id),
                    timeout=self.settings.timeout_seconds,
                )
            except (PaymentProviderError, asyncio.TimeoutError) as exc:
                if attempt == self.settings.max_attempts:
                    logger.error(
                        f"Mirroring {invoice.invoice_number} failed after {attempt} attempts: {exc!r}"
                    )
                    return None
                logger.warning(
                    f"Mirroring {invoice.invoice_number} failed on attempt {attempt}, retrying: {exc!r}"
                )
                await asyncio.sleep(self.settings.backoff_seconds * 2 ** (attempt - 1))
        return None

    async def _push(self, invoice: Invoice, customer_id: str) -> str:
        key = f"invoice-{invoice.id}"
        remote_id = await self.provider.create_invoice(
            customer_id=customer_id,
            description=f"Invoice {invoice.invoice_number}",
            metadata={"invoice_id": str(invoice.id), "invoice_number": invoice.invoice_number},
            days_until_due=self.settings.days_until_due,
            idempotency_key=key,
        )
        for index, item in enumerate(invoice.line_items or []):
            await self.provider.add_invoice_item(
                customer_id=customer_id,
                invoice_id=remote_id,
                amount_cents=to_provider_cents(item["amount"]),
                description=item["description"],
                idempotency_key=f"{key}-item-{index}",
            )
        tax_cents = to_provider_cents(invoice.tax_amount)
        if tax_cents > 0:
            await self.provider.add_invoice_item(
                customer_id=customer_id,
                invoice_id=remote_id,
                amount_cents=tax_cents,
                description=f"Tax ({invoice.tax_rate}%)",
                idempotency_key=f"{key}-tax",
            )
        await self.provider.finalize_invoice(remote_id)
        return remote_id
