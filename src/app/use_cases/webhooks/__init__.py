"""Provider webhook use cases."""

from .dtos import CallStatusEvent, MessageStatusEvent, WebhookAck
from .payments import ProcessPaymentEventUseCase
from .telephony import ProcessCallStatusUseCase, ProcessMessageStatusUseCase, parse_price

__all__ = [
    "CallStatusEvent",
    "MessageStatusEvent",
    "WebhookAck",
    "ProcessCallStatusUseCase",
    "ProcessMessageStatusUseCase",
    "ProcessPaymentEventUseCase",
    "parse_price",
]
