"""
Webhook Use Case DTOs

Provider payloads normalized to snake_case, plus the acknowledgement
returned to the provider.
"""

from typing import Optional

from pydantic import BaseModel

RECORDED = "recorded"
DUPLICATE = "duplicate"
IGNORED = "ignored"


class CallStatusEvent(BaseModel):
    call_sid: str
    from_number: str
    to_number: str
    call_status: str
    direction: str
    duration: Optional[str] = None
    price: Optional[str] = None
    price_unit: Optional[str] = None


class MessageStatusEvent(BaseModel):
    message_sid: str
    from_number: str
    to_number: str
    message_status: str
    direction: str
    price: Optional[str] = None
    price_unit: Optional[str] = None
    num_media: Optional[str] = None


class WebhookAck(BaseModel):
    status: str
    detail: Optional[str] = None
    usage_id: Optional[str] = None
    payment_id: Optional[str] = None
