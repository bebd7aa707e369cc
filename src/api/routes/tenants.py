"""
Tenant API Routes

Tenant accounts, their phone numbers and their activity trail.
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
from src.app.use_cases.activity import ActivityLogPage, GetActivityLogsUseCase
from src.app.use_cases.tenants import (
    CreateTenantCommand,
    GetTenantUseCase,
    PhoneNumberResponse,
    RegisterPhoneNumberCommand,
    RegisterPhoneNumberUseCase,
    ReleasePhoneNumberUseCase,
    RestoreTenantUseCase,
    SuspendTenantUseCase,
    TenantResponse,
    TenantStatusResponse,
)
from src.depends import get_payment_provider, get_unit_of_work
from src.domain.entities import ActivityType

router = APIRouter(tags=["Tenants"], dependencies=[Depends(verify_admin_api_key)])


@router.post("/tenants", status_code=status.HTTP_201_CREATED, response_model=TenantResponse)
async def create_tenant(
    command: CreateTenantCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
    provider: Optional[IPaymentProvider] = Depends(get_payment_provider),
):
    """
    Create Tenant

    Generates the tenant code (e.g. ACMEDE001) and, when a payment provider
    is configured, its provider customer.

    Raises:
        - 409 Conflict: TENANT_CODE_UNAVAILABLE
        - 503 Service Unavailable: CONCURRENCY_CONFLICT
    """
    result = await factories.create_tenant(uow, provider).execute(command)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_CODE_UNAVAILABLE":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        if error.code == "CONCURRENCY_CONFLICT":
            raise RetryableError(error)
        raise ServerError(error)

    return result.value


@router.get("/tenants/{tenant_id}", status_code=status.HTTP_200_OK, response_model=TenantResponse)
async def get_tenant(tenant_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Get Tenant

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
    """
    result = await GetTenantUseCase(uow).execute(tenant_id)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/suspend",
    status_code=status.HTTP_200_OK,
    response_model=TenantStatusResponse,
)
async def suspend_tenant(tenant_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Suspend Tenant

    Idempotent: suspending an already-suspended tenant returns changed=false.

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
    """
    result = await SuspendTenantUseCase(uow).execute(tenant_id)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/restore",
    status_code=status.HTTP_200_OK,
    response_model=TenantStatusResponse,
)
async def restore_tenant(tenant_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Restore Tenant

    Idempotent: restoring an active tenant returns changed=false.

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
    """
    result = await RestoreTenantUseCase(uow).execute(tenant_id)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/tenants/{tenant_id}/phone-numbers",
    status_code=status.HTTP_201_CREATED,
    response_model=PhoneNumberResponse,
)
async def register_phone_number(
    tenant_id: UUID,
    command: RegisterPhoneNumberCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Register Phone Number

    Bills an already-provisioned number to the tenant.

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
        - 409 Conflict: PHONE_NUMBER_EXISTS, TENANT_NOT_ACTIVE
    """
    result = await RegisterPhoneNumberUseCase(uow).execute(tenant_id, command)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        if error.code in ("PHONE_NUMBER_EXISTS", "TENANT_NOT_ACTIVE"):
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


@router.post(
    "/phone-numbers/{phone_number_id}/release",
    status_code=status.HTTP_200_OK,
    response_model=PhoneNumberResponse,
)
async def release_phone_number(
    phone_number_id: UUID, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Release Phone Number

    Stops billing the number; its usage history is kept.

    Raises:
        - 404 Not Found: PHONE_NUMBER_NOT_FOUND
    """
    result = await ReleasePhoneNumberUseCase(uow).execute(phone_number_id)

    if result.is_err():
        error = result.error
        if error.code == "PHONE_NUMBER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.get(
    "/tenants/{tenant_id}/activity",
    status_code=status.HTTP_200_OK,
    response_model=ActivityLogPage,
)
async def get_activity(
    tenant_id: UUID,
    type: Optional[ActivityType] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = Query(50, ge=1, le=100, description="Maximum number of entries to return"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Tenant Activity

    Returns:
        - entries: newest first
        - next_cursor: Cursor for next page (null if no more entries)

    Raises:
        - 404 Not Found: TENANT_NOT_FOUND
    """
    result = await GetActivityLogsUseCase(uow).execute(
        tenant_id, activity_type=type, start=start, end=end, limit=limit, cursor=cursor
    )

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
