"""
Use Cases: Register / Release Phone Number

Number search and purchase happen at the telephony provider; these only
track which tenant a number is billed to.
"""

from decimal import Decimal
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    ActivityLog,
    ActivityType,
    PhoneNumber,
    PhoneNumberStatus,
    TenantStatus,
)

from .dtos import PhoneNumberResponse, RegisterPhoneNumberCommand


class RegisterPhoneNumberUseCase:
    """
    Attach a provisioned number to an active tenant.

    Errors: TENANT_NOT_FOUND, TENANT_NOT_ACTIVE, PHONE_NUMBER_EXISTS
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, tenant_id: UUID, command: RegisterPhoneNumberCommand
    ) -> Result[PhoneNumberResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if not tenant:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
            if tenant.status != TenantStatus.active:
                return Return.err(Error("TENANT_NOT_ACTIVE", "Tenant is not active"))

            if await self.uow.phone_numbers.get_by_number(command.number):
                return Return.err(
                    Error("PHONE_NUMBER_EXISTS", f"{command.number} is already registered")
                )

            phone_number = PhoneNumber(
                tenant_id=tenant_id,
                number=command.number,
                type=command.type,
                status=PhoneNumberStatus.active,
                display_name=command.display_name,
                monthly_fee=Decimal(command.monthly_fee),
                provider_sid=command.provider_sid,
            )
            if command.capabilities is not None:
                phone_number.capabilities = command.capabilities
            phone_number = await self.uow.phone_numbers.create(phone_number)

            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant_id,
                    type=ActivityType.phone_provisioned,
                    description=f"Phone number {command.number} provisioned",
                    event_metadata={
                        "phone_number_id": str(phone_number.id),
                        "number": command.number,
                        "monthly_fee": str(command.monthly_fee),
                    },
                    actor="admin",
                )
            )

            await self.uow.commit()

            return Return.ok(PhoneNumberResponse.from_entity(phone_number))


class ReleasePhoneNumberUseCase:
    """
    Stop billing a number. Its usage history is kept.

    Idempotent: releasing a released number succeeds and logs nothing.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, phone_number_id: UUID) -> Result[PhoneNumberResponse]:
        async with self.uow:
            phone_number = await self.uow.phone_numbers.get_by_id(phone_number_id)
            if not phone_number:
                return Return.err(Error("PHONE_NUMBER_NOT_FOUND", "Phone number not found"))

            if phone_number.status == PhoneNumberStatus.released:
                return Return.ok(PhoneNumberResponse.from_entity(phone_number))

            phone_number.status = PhoneNumberStatus.released
            phone_number.released_at = utcnow()
            phone_number = await self.uow.phone_numbers.update(phone_number)

            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=phone_number.tenant_id,
                    type=ActivityType.phone_released,
                    description=f"Phone number {phone_number.number} released",
                    event_metadata={"phone_number_id": str(phone_number.id)},
                    actor="admin",
                )
            )

            await self.uow.commit()

            return Return.ok(PhoneNumberResponse.from_entity(phone_number))
