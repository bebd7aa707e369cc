"""
Use Case: Record Usage

Meters one call or message reported by the telephony provider and charges
its cost to the owning tenant.
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.repositories.usage_record_repository import DuplicateUsageRecordError
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.usage_alerts import AlertThresholds, UsageAlertService
from src.domain.base import as_naive_utc, utcnow
from src.domain.entities import UsageRecord

from .dtos import RecordUsageCommand, RecordUsageResponse, UsageRecordResponse

logger = logging.getLogger(__name__)


class RecordUsageUseCase:
    """
    Record a usage event and debit the tenant balance.

    Business Logic:
    1. Reject negative cost
    2. Resolve the phone number (and through it the tenant)
    3. Return the existing record if (type, provider_reference_id) was seen
    4. Insert the record and debit the balance in one transaction
    5. After commit, run usage alerts (never undoes the usage)

    Idempotent: provider redelivery of the same event charges once.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        thresholds: AlertThresholds = None,
        retry_attempts: int = 3,
    ):
        self.uow = uow
        self.thresholds = thresholds
        self.retry_attempts = retry_attempts

    async def execute(self, command: RecordUsageCommand) -> Result[RecordUsageResponse]:
        if command.cost < 0:
            return Return.err(Error("INVALID_COST", "Usage cost must not be negative"))

        result = await with_conflict_retry(
            lambda: self._record(command),
            attempts=self.retry_attempts,
            label=f"record usage {command.provider_reference_id or command.phone_number_id}",
        )

        if result.is_ok() and not result.value.duplicate:
            await self._check_alerts(UUID(result.value.usage.tenant_id))

        return result

    async def _record(self, command: RecordUsageCommand) -> Result[RecordUsageResponse]:
        async with self.uow:
            phone_number = await self.uow.phone_numbers.get_by_id(command.phone_number_id)
            if not phone_number:
                return Return.err(Error("PHONE_NUMBER_NOT_FOUND", "Phone number not found"))

            if command.provider_reference_id:
                existing = await self.uow.usage_records.get_by_provider_reference(
                    command.type, command.provider_reference_id
                )
                if existing:
                    logger.info(
                        f"Duplicate usage event {command.type.value}/{command.provider_reference_id}"
                    )
                    return Return.ok(self._duplicate(existing))

            cost = Decimal(command.cost)
            record = UsageRecord(
                tenant_id=phone_number.tenant_id,
                phone_number_id=phone_number.id,
                type=command.type,
                provider_reference_id=command.provider_reference_id,
                from_number=command.from_number,
                to_number=command.to_number,
                duration=command.duration if command.type.is_call else 0,
                quantity=1 if command.type.is_call else command.quantity,
                cost=cost,
                usage_metadata=command.metadata,
                created_at=as_naive_utc(command.occurred_at) or utcnow(),
            )

            try:
                record = await self.uow.usage_records.create(record)
            except DuplicateUsageRecordError:
                # Lost the insert race to a concurrent delivery of the same event
                await self.uow.rollback()
                existing = await self.uow.usage_records.get_by_provider_reference(
                    command.type, command.provider_reference_id
                )
                return Return.ok(self._duplicate(existing))

            await self.uow.tenants.adjust_balance(phone_number.tenant_id, -cost)
            await self.uow.commit()

            return Return.ok(
                RecordUsageResponse(usage=UsageRecordResponse.from_entity(record), duplicate=False)
            )

    @staticmethod
    def _duplicate(record: UsageRecord) -> RecordUsageResponse:
        return RecordUsageResponse(usage=UsageRecordResponse.from_entity(record), duplicate=True)

    async def _check_alerts(self, tenant_id: UUID) -> None:
        try:
            async with self.uow:
                await UsageAlertService(self.uow, self.thresholds).check(tenant_id)
                await self.uow.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Usage alert check failed for tenant {tenant_id}: {exc}")
