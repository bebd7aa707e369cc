"""
Use Case: Create Tenant

Opens a billed customer account with a generated human-readable code.
"""

import asyncio
import logging
import re
from typing import Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.payment_provider import IPaymentProvider, PaymentProviderError
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ActivityLog, ActivityType, Tenant, TenantStatus
from src.domain.entities.tenant import default_settings

from .dtos import CreateTenantCommand, TenantResponse

logger = logging.getLogger(__name__)

MAX_CODE_COUNTER = 999


def code_prefix(business_name: str) -> str:
    """Up to 6 upper-case letters of the business name, padded with X to 3"""
    letters = re.sub(r"[^A-Z]", "", business_name.upper())[:6]
    return letters.ljust(3, "X")


class CreateTenantUseCase:
    """
    Create a tenant.

    Business Logic:
    1. Generate code <PREFIX><NNN> (e.g. ACMEDE001), first free counter wins
    2. Persist as active with zero balance and default notification settings
    3. Log client_created
    4. After commit, create the payment provider customer (best effort)

    A code collision with a concurrent create is retried with the next free
    counter.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        provider: Optional[IPaymentProvider] = None,
        provider_timeout_seconds: float = 10.0,
        retry_attempts: int = 3,
    ):
        self.uow = uow
        self.provider = provider
        self.provider_timeout_seconds = provider_timeout_seconds
        self.retry_attempts = retry_attempts

    async def execute(self, command: CreateTenantCommand) -> Result[TenantResponse]:
        result = await with_conflict_retry(
            lambda: self._create(command),
            attempts=self.retry_attempts,
            retry_on=(IntegrityError, OperationalError),
            label=f"create tenant {command.business_name}",
        )
        if result.is_err() or self.provider is None:
            return result

        tenant = await self._create_customer(result.value)
        return Return.ok(tenant)

    async def _create(self, command: CreateTenantCommand) -> Result[TenantResponse]:
        async with self.uow:
            code = await self._free_code(command.business_name)
            if code is None:
                return Return.err(
                    Error("TENANT_CODE_UNAVAILABLE", "No free tenant code for this business name")
                )

            tenant = Tenant(
                code=code,
                name=command.name,
                business_name=command.business_name,
                contact_email=command.contact_email,
                contact_phone=command.contact_phone,
                status=TenantStatus.active,
                billing_cycle=command.billing_cycle,
                credit_limit=command.credit_limit,
                settings=default_settings(),
            )
            tenant = await self.uow.tenants.create(tenant)

            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant.id,
                    type=ActivityType.client_created,
                    description=f"Client {tenant.business_name} created",
                    event_metadata={"code": code},
                    actor="admin",
                )
            )

            await self.uow.commit()
            logger.info(f"Tenant {code} created")

            return Return.ok(TenantResponse.from_entity(tenant))

    async def _free_code(self, business_name: str) -> Optional[str]:
        prefix = code_prefix(business_name)
        for counter in range(1, MAX_CODE_COUNTER + 1):
            code = f"{prefix}{counter:03d}"
            if await self.uow.tenants.get_by_code(code) is None:
                return code
        return None

    async def _create_customer(self, tenant: TenantResponse) -> TenantResponse:
        try:
            customer_id = await asyncio.wait_for(
                self.provider.create_customer(
                    name=tenant.business_name,
                    email=tenant.contact_email,
                    metadata={"tenant_id": tenant.id, "code": tenant.code},
                    idempotency_key=f"tenant-{tenant.id}",
                ),
                timeout=self.provider_timeout_seconds,
            )
        except (PaymentProviderError, asyncio.TimeoutError) as exc:
            logger.warning(f"Payment provider customer for {tenant.code} not created: {exc!r}")
            return tenant

        try:
            async with self.uow:
                stored = await self.uow.tenants.get_by_code(tenant.code)
                stored.external_customer_id = customer_id
                stored = await self.uow.tenants.update(stored)
                await self.uow.commit()
                return TenantResponse.from_entity(stored)
        except SQLAlchemyError as exc:
            logger.error(f"Customer {customer_id} for {tenant.code} could not be stored: {exc}")
            return tenant
