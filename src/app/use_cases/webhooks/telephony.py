"""
Telephony provider status callbacks.

Only final, billable states are metered: completed calls and delivered
messages. Every other callback is acknowledged so the provider stops
retrying it.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.usage import RecordUsageCommand, RecordUsageUseCase
from src.domain.entities import UsageType

from .dtos import DUPLICATE, IGNORED, RECORDED, CallStatusEvent, MessageStatusEvent, WebhookAck

logger = logging.getLogger(__name__)


def parse_price(price: Optional[str]) -> Decimal:
    """Providers report charges as negative decimal strings"""
    try:
        value = abs(Decimal(price)) if price else Decimal("0")
    except InvalidOperation:
        value = None
    if value is None or not value.is_finite():
        logger.warning(f"Unparseable price {price!r}, recording zero cost")
        return Decimal("0")
    return value


def parse_int(value: Optional[str]) -> int:
    try:
        return max(int(value), 0) if value else 0
    except ValueError:
        return 0


def is_inbound(direction: str) -> bool:
    return (direction or "").lower() == "inbound"


class _TelephonyCallback:
    def __init__(self, uow: UnitOfWork, record_usage: RecordUsageUseCase):
        self.uow = uow
        self.record_usage = record_usage

    async def _owned_number_id(self, direction: str, from_number: str, to_number: str) -> Optional[UUID]:
        number = to_number if is_inbound(direction) else from_number
        # Only the id leaves the block; leaving it rolls back and expires loaded rows
        async with self.uow:
            phone_number = await self.uow.phone_numbers.get_by_number(number)
            return phone_number.id if phone_number else None

    async def _record(self, command: RecordUsageCommand) -> Result[WebhookAck]:
        result = await self.record_usage.execute(command)
        if result.is_err():
            return result
        response = result.value
        return Return.ok(
            WebhookAck(
                status=DUPLICATE if response.duplicate else RECORDED,
                usage_id=response.usage.id,
            )
        )


class ProcessCallStatusUseCase(_TelephonyCallback):
    """
    Meter a completed call.

    The owned number is To for inbound calls and From otherwise. Callbacks
    for numbers we do not manage are acknowledged and ignored.
    """

    async def execute(self, event: CallStatusEvent) -> Result[WebhookAck]:
        if event.call_status != "completed":
            return Return.ok(WebhookAck(status=IGNORED, detail=f"call status {event.call_status}"))

        phone_number_id = await self._owned_number_id(
            event.direction, event.from_number, event.to_number
        )
        if phone_number_id is None:
            logger.warning(f"Call {event.call_sid} for unknown number ignored")
            return Return.ok(WebhookAck(status=IGNORED, detail="unknown phone number"))

        return await self._record(
            RecordUsageCommand(
                phone_number_id=phone_number_id,
                type=UsageType.inbound_call if is_inbound(event.direction) else UsageType.outbound_call,
                from_number=event.from_number,
                to_number=event.to_number,
                duration=parse_int(event.duration),
                cost=parse_price(event.price),
                provider_reference_id=event.call_sid,
                metadata={"status": event.call_status, "price_unit": event.price_unit},
            )
        )


class ProcessMessageStatusUseCase(_TelephonyCallback):
    """Meter a delivered SMS, or MMS when media is attached"""

    async def execute(self, event: MessageStatusEvent) -> Result[WebhookAck]:
        if event.message_status != "delivered":
            return Return.ok(
                WebhookAck(status=IGNORED, detail=f"message status {event.message_status}")
            )

        phone_number_id = await self._owned_number_id(
            event.direction, event.from_number, event.to_number
        )
        if phone_number_id is None:
            logger.warning(f"Message {event.message_sid} for unknown number ignored")
            return Return.ok(WebhookAck(status=IGNORED, detail="unknown phone number"))

        is_mms = parse_int(event.num_media) > 0
        if is_inbound(event.direction):
            usage_type = UsageType.inbound_mms if is_mms else UsageType.inbound_sms
        else:
            usage_type = UsageType.outbound_mms if is_mms else UsageType.outbound_sms

        return await self._record(
            RecordUsageCommand(
                phone_number_id=phone_number_id,
                type=usage_type,
                from_number=event.from_number,
                to_number=event.to_number,
                quantity=1,
                cost=parse_price(event.price),
                provider_reference_id=event.message_sid,
                metadata={
                    "status": event.message_status,
                    "price_unit": event.price_unit,
                    "num_media": event.num_media,
                },
            )
        )
