"""
Usage API Routes

Usage statistics per tenant and usage history per phone number.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.usage import (
    GetPhoneNumberUsageUseCase,
    GetTenantUsageUseCase,
    PhoneNumberUsageResponse,
    TenantUsageResponse,
)
from src.depends import get_unit_of_work
from src.domain.entities import UsageType

router = APIRouter(
    prefix="/usage", tags=["Usage"], dependencies=[Depends(verify_admin_api_key)]
)


@router.get("/stats", status_code=status.HTTP_200_OK, response_model=TenantUsageResponse)
async def get_usage_stats(
    tenant_id: UUID,
    start: datetime,
    end: datetime,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Usage Statistics

    Calls, minutes (per started minute), messages and cost over [start, end),
    broken down by usage type and by phone number.

    Raises:
        - 400 Bad Request: INVALID_PERIOD
        - 404 Not Found: TENANT_NOT_FOUND
    """
    result = await GetTenantUsageUseCase(uow).execute(tenant_id, start, end)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code == "INVALID_PERIOD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value


@router.get(
    "/resource/{phone_number_id}",
    status_code=status.HTTP_200_OK,
    response_model=PhoneNumberUsageResponse,
)
async def get_phone_number_usage(
    phone_number_id: UUID,
    start: datetime,
    end: datetime,
    type: Optional[UsageType] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Phone Number Usage

    Usage records of one phone number, newest first.

    Raises:
        - 400 Bad Request: INVALID_PERIOD
        - 404 Not Found: PHONE_NUMBER_NOT_FOUND
    """
    result = await GetPhoneNumberUsageUseCase(uow).execute(
        phone_number_id, start, end, usage_type=type, limit=limit, offset=offset
    )

    if result.is_err():
        error = result.error
        if error.code == "PHONE_NUMBER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code == "INVALID_PERIOD":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
