"""
Payment provider contract.

Only the calls the billing engine needs. Amounts are integer minor units.
Implementations raise PaymentProviderError for any remote failure.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class PaymentProviderError(Exception):
    """Remote payment provider call failed"""


class WebhookSignatureError(Exception):
    """Payment provider webhook payload failed signature verification"""


class IPaymentProvider(ABC):
    """Payment provider interface - application layer"""

    @abstractmethod
    async def create_customer(
        self,
        name: str,
        email: Optional[str],
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        """Returns the provider customer id"""
        pass

    @abstractmethod
    async def create_invoice(
        self,
        customer_id: str,
        description: str,
        metadata: Dict[str, str],
        days_until_due: int,
        idempotency_key: Optional[str] = None,
    ) -> str:
        """Create a draft remote invoice; returns its id"""
        pass

    @abstractmethod
    async def add_invoice_item(
        self,
        customer_id: str,
        invoice_id: str,
        amount_cents: int,
        description: str,
        idempotency_key: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    async def finalize_invoice(self, invoice_id: str) -> None:
        pass

    @abstractmethod
    def parse_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Decode a webhook payload into {"id", "type", "data": {"object": ...}}.

        Raises:
            WebhookSignatureError: signature missing or invalid while a
                webhook secret is configured
        """
        pass
