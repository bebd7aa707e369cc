"""
Payment API Routes

Manual payment entry (bank transfer, check, cash, card taken by phone).
"""

from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, RetryableError, ServerError
from src.api.utils import factories
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.billing import PaymentResponse, RecordPaymentCommand
from src.depends import get_unit_of_work

router = APIRouter(
    prefix="/payments", tags=["Payments"], dependencies=[Depends(verify_admin_api_key)]
)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PaymentResponse)
async def record_payment(
    command: RecordPaymentCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Record Payment

    Credits the tenant balance and applies the amount to the invoice, if
    given. The invoice becomes paid once fully settled; any excess stays as
    account credit.

    Raises:
        - 400 Bad Request: INVALID_AMOUNT, INVOICE_TENANT_MISMATCH
        - 404 Not Found: TENANT_NOT_FOUND, INVOICE_NOT_FOUND
        - 409 Conflict: INVOICE_NOT_PAYABLE
        - 503 Service Unavailable: CONCURRENCY_CONFLICT
    """
    result = await factories.record_payment(uow).execute(command)

    if result.is_err():
        error = result.error
        if error.code in ("TENANT_NOT_FOUND", "INVOICE_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code in ("INVALID_AMOUNT", "INVOICE_TENANT_MISMATCH"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        if error.code == "INVOICE_NOT_PAYABLE":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        if error.code == "CONCURRENCY_CONFLICT":
            raise RetryableError(error)
        raise ServerError(error)

    return result.value
