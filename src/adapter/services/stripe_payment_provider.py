"""
Stripe implementation of the payment provider contract.

The stripe library is synchronous; each call runs in a worker thread so
the event loop is never blocked by network I/O.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import stripe

from src.app.services.payment_provider import (
    IPaymentProvider,
    PaymentProviderError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)


class StripePaymentProvider(IPaymentProvider):
    def __init__(self, api_key: str, currency: str = "usd", webhook_secret: str = ""):
        self.api_key = api_key
        self.currency = currency
        self.webhook_secret = webhook_secret

    async def _call(self, func, **params):
        try:
            return await asyncio.to_thread(func, api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            raise PaymentProviderError(str(exc)) from exc

    async def create_customer(self, name, email, metadata, idempotency_key=None) -> str:
        customer = await self._call(
            stripe.Customer.create,
            name=name,
            email=email,
            metadata=metadata,
            idempotency_key=idempotency_key,
        )
        return customer.id

    async def create_invoice(
        self, customer_id, description, metadata, days_until_due, idempotency_key=None
    ) -> str:
        invoice = await self._call(
            stripe.Invoice.create,
            customer=customer_id,
            description=description,
            metadata=metadata,
            collection_method="send_invoice",
            days_until_due=days_until_due,
            auto_advance=False,
            idempotency_key=idempotency_key,
        )
        return invoice.id

    async def add_invoice_item(
        self, customer_id, invoice_id, amount_cents, description, idempotency_key=None
    ) -> None:
        await self._call(
            stripe.InvoiceItem.create,
            customer=customer_id,
            invoice=invoice_id,
            amount=amount_cents,
            currency=self.currency,
            description=description,
            idempotency_key=idempotency_key,
        )

    async def finalize_invoice(self, invoice_id: str) -> None:
        await self._call(stripe.Invoice.finalize_invoice, invoice=invoice_id)

    def parse_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not self.webhook_secret:
            return json.loads(payload)
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header")
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookSignatureError(str(exc)) from exc
        return json.loads(payload)
