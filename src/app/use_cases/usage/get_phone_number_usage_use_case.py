"""Use Case: Get Phone Number Usage"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_naive_utc
from src.domain.entities import UsageType

from .dtos import PhoneNumberUsageResponse, UsageRecordResponse


class GetPhoneNumberUsageUseCase:
    """
    Page through the usage records of one phone number, newest first.

    Released numbers are still queryable; their history is kept.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        phone_number_id: UUID,
        start: datetime,
        end: datetime,
        usage_type: Optional[UsageType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[PhoneNumberUsageResponse]:
        start, end = as_naive_utc(start), as_naive_utc(end)
        if end <= start:
            return Return.err(Error("INVALID_PERIOD", "end must be after start"))

        async with self.uow:
            phone_number = await self.uow.phone_numbers.get_by_id(phone_number_id)
            if not phone_number:
                return Return.err(Error("PHONE_NUMBER_NOT_FOUND", "Phone number not found"))

            records, total = await self.uow.usage_records.list_by_phone_number(
                phone_number_id, start, end, usage_type=usage_type, limit=limit, offset=offset
            )

            return Return.ok(
                PhoneNumberUsageResponse(
                    phone_number_id=str(phone_number_id),
                    records=[UsageRecordResponse.from_entity(r) for r in records],
                    total=total,
                    limit=limit,
                    offset=offset,
                )
            )
