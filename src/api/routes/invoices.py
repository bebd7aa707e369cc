"""
Invoice API Routes

Invoice generation and lookup.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import ClientError, RetryableError, ServerError
from src.api.utils import factories
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.payment_provider import IPaymentProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.billing import (
    GenerateInvoiceCommand,
    GetInvoiceUseCase,
    InvoiceListResponse,
    InvoiceResponse,
    ListInvoicesUseCase,
)
from src.depends import get_payment_provider, get_unit_of_work
from src.domain.entities import InvoiceStatus

router = APIRouter(
    prefix="/invoices", tags=["Invoices"], dependencies=[Depends(verify_admin_api_key)]
)


@router.post(
    "/generate",
    status_code=status.HTTP_201_CREATED,
    response_model=InvoiceResponse,
)
async def generate_invoice(
    command: GenerateInvoiceCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: Optional[IPaymentProvider] = Depends(get_payment_provider),
):
    """
    Generate Invoice

    Bills phone number rentals and metered usage for the period, with tax.
    The invoice is created as pending (paid when the total is zero);
    mirroring it to the payment provider is best effort and never fails
    this request. With skip_if_invoiced, a period that is already billed is
    rejected instead of invoiced again.

    Raises:
        - 400 Bad Request: INVALID_BILLING_PERIOD
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: INVOICE_EXISTS
        - 503 Service Unavailable: CONCURRENCY_CONFLICT
    """
    result = await factories.generate_invoice(uow, provider).execute(command)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code == "INVALID_BILLING_PERIOD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        if error.code == "INVOICE_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        if error.code == "CONCURRENCY_CONFLICT":
            raise RetryableError(error)
        raise ServerError(error)

    return result.value


@router.get("", status_code=status.HTTP_200_OK, response_model=InvoiceListResponse)
async def list_invoices(
    tenant_id: Optional[UUID] = None,
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Invoices

    Newest first; start/end filter on creation time over [start, end).

    Raises:
        - 400 Bad Request: INVALID_PERIOD
    """
    result = await ListInvoicesUseCase(uow).execute(
        tenant_id=tenant_id,
        status=status_filter,
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )

    if result.is_err():
        error = result.error
        if error.code == "INVALID_PERIOD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.get("/{invoice_id}", status_code=status.HTTP_200_OK, response_model=InvoiceResponse)
async def get_invoice(invoice_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Get Invoice

    Raises:
        - 404 Not Found: INVOICE_NOT_FOUND
    """
    result = await GetInvoiceUseCase(uow).execute(invoice_id)

    if result.is_err():
        error = result.error
        if error.code == "INVOICE_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
