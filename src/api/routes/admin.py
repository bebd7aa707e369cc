"""
Admin API Routes - Scheduled Job Triggers

Manual triggers for the daily jobs, e.g. to catch up after an outage.
Authentication is via Admin API Key.
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from src.api.error import RetryableError, ServerError
from src.api.utils import factories
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.payment_provider import IPaymentProvider
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.billing import CycleInvoicesResponse, SweepResponse
from src.depends import get_payment_provider, get_unit_of_work
from src.domain.base import utcnow

router = APIRouter(
    prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_api_key)]
)


class OverdueSweepRequest(BaseModel):
    now: Optional[datetime] = None


class CycleInvoicesRequest(BaseModel):
    run_date: Optional[date] = None


@router.post(
    "/jobs/overdue-sweep",
    status_code=status.HTTP_200_OK,
    response_model=SweepResponse,
)
async def run_overdue_sweep(
    request: Optional[OverdueSweepRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Run Overdue Sweep

    Marks pending invoices past due as overdue and suspends tenants with
    too many overdue invoices. Safe to run repeatedly.

    Raises:
        - 503 Service Unavailable: CONCURRENCY_CONFLICT
    """
    now = request.now if request else None
    result = await factories.sweep_overdue(uow).execute(now)

    if result.is_err():
        error = result.error
        if error.code == "CONCURRENCY_CONFLICT":
            raise RetryableError(error)
        raise ServerError(error)

    return result.value


@router.post(
    "/jobs/cycle-invoices",
    status_code=status.HTTP_200_OK,
    response_model=CycleInvoicesResponse,
)
async def run_cycle_invoices(
    request: Optional[CycleInvoicesRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: Optional[IPaymentProvider] = Depends(get_payment_provider),
):
    """
    Run Cycle Invoices

    Invoices every active tenant whose billing cycle closed on run_date
    (default today). Tenants already invoiced for the period are skipped.
    """
    run_date = (request.run_date if request else None) or utcnow().date()
    result = await factories.generate_cycle_invoices(uow, provider).execute(run_date)

    if result.is_err():
        raise ServerError(result.error)

    return result.value
