"""
Webhook API Routes

Status callbacks from the telephony provider (form encoded) and events
from the payment provider (JSON). No admin key: providers cannot send one.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Header, Request, status

from libs.result import Error
from src.api.error import ClientError, RetryableError, ServerError
from src.api.utils import factories
from src.app.services.payment_provider import IPaymentProvider, WebhookSignatureError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.webhooks import (
    CallStatusEvent,
    MessageStatusEvent,
    ProcessCallStatusUseCase,
    ProcessMessageStatusUseCase,
    ProcessPaymentEventUseCase,
    WebhookAck,
)
from src.depends import get_unit_of_work, get_webhook_verifier

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def _raise_for_error(error: Error):
    # Conflicts are retryable: a 5xx makes the provider redeliver the event
    if error.code == "CONCURRENCY_CONFLICT":
        raise RetryableError(error)
    if error.code == "INVALID_COST":
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


@router.post("/telephony/call-status", status_code=status.HTTP_200_OK, response_model=WebhookAck)
async def call_status(
    call_sid: str = Form(..., alias="CallSid"),
    from_number: str = Form(..., alias="From"),
    to_number: str = Form(..., alias="To"),
    call_status: str = Form(..., alias="CallStatus"),
    direction: str = Form(..., alias="Direction"),
    duration: Optional[str] = Form(None, alias="Duration"),
    price: Optional[str] = Form(None, alias="Price"),
    price_unit: Optional[str] = Form(None, alias="PriceUnit"),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Call Status Callback

    Meters completed calls. Redelivered callbacks are acknowledged as
    duplicate and charged once.
    """
    event = CallStatusEvent(
        call_sid=call_sid,
        from_number=from_number,
        to_number=to_number,
        call_status=call_status,
        direction=direction,
        duration=duration,
        price=price,
        price_unit=price_unit,
    )
    result = await ProcessCallStatusUseCase(uow, factories.record_usage(uow)).execute(event)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.post(
    "/telephony/message-status", status_code=status.HTTP_200_OK, response_model=WebhookAck
)
async def message_status(
    message_sid: str = Form(..., alias="MessageSid"),
    from_number: str = Form(..., alias="From"),
    to_number: str = Form(..., alias="To"),
    message_status: str = Form(..., alias="MessageStatus"),
    direction: str = Form(..., alias="Direction"),
    price: Optional[str] = Form(None, alias="Price"),
    price_unit: Optional[str] = Form(None, alias="PriceUnit"),
    num_media: Optional[str] = Form(None, alias="NumMedia"),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Message Status Callback

    Meters delivered SMS and MMS (NumMedia > 0).
    """
    event = MessageStatusEvent(
        message_sid=message_sid,
        from_number=from_number,
        to_number=to_number,
        message_status=message_status,
        direction=direction,
        price=price,
        price_unit=price_unit,
        num_media=num_media,
    )
    result = await ProcessMessageStatusUseCase(uow, factories.record_usage(uow)).execute(event)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.post("/payments", status_code=status.HTTP_200_OK, response_model=WebhookAck)
async def payment_event(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: IPaymentProvider = Depends(get_webhook_verifier),
):
    """
    Payment Provider Event

    Records payments for paid provider invoices and succeeded payment
    intents; logs failed payments. Other events are acknowledged.

    Raises:
        - 400 Bad Request: INVALID_SIGNATURE, INVALID_PAYLOAD
        - 503 Service Unavailable: CONCURRENCY_CONFLICT
    """
    payload = await request.body()
    try:
        event = verifier.parse_event(payload, stripe_signature)
    except WebhookSignatureError as exc:
        raise ClientError(Error("INVALID_SIGNATURE", str(exc)))
    except ValueError:
        raise ClientError(Error("INVALID_PAYLOAD", "Payload is not valid JSON"))
    if not isinstance(event, dict):
        raise ClientError(Error("INVALID_PAYLOAD", "Payload is not an event object"))

    use_case = ProcessPaymentEventUseCase(uow, factories.record_payment(uow, actor="webhook"))
    result = await use_case.execute(event)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value
