"""
Unit tests for Record Usage Use Case
Tests metering and idempotency with mocked dependencies.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from unittest.mock import AsyncMock

from src.app.repositories.usage_record_repository import DuplicateUsageRecordError
from src.app.use_cases.usage import RecordUsageCommand, RecordUsageUseCase
from src.domain.entities import UsageRecord, UsageType


@pytest.fixture
def usage_uow(mock_uow, tenant, phone_number):
    mock_uow.phone_numbers.get_by_id = AsyncMock(return_value=phone_number)
    mock_uow.usage_records.get_by_provider_reference = AsyncMock(return_value=None)
    mock_uow.usage_records.create = AsyncMock(side_effect=lambda record: record)
    mock_uow.usage_records.sum_cost_since = AsyncMock(return_value=Decimal("0"))
    mock_uow.tenants.adjust_balance = AsyncMock()
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    return mock_uow


def _command(phone_number, **overrides):
    data = dict(
        phone_number_id=phone_number.id,
        type=UsageType.outbound_call,
        cost=Decimal("0.02"),
        from_number=phone_number.number,
        to_number="+15557770000",
        duration=125,
        provider_reference_id="CA001",
    )
    data.update(overrides)
    return RecordUsageCommand(**data)


@pytest.mark.asyncio
async def test_record_usage_success(usage_uow, tenant, phone_number):
    """Usage is stored and its cost debited from the tenant balance"""
    result = await RecordUsageUseCase(usage_uow).execute(_command(phone_number))

    assert result.is_ok()
    response = result.value
    assert response.duplicate is False
    assert response.usage.tenant_id == str(tenant.id)
    assert response.usage.duration == 125
    assert response.usage.quantity == 1

    usage_uow.tenants.adjust_balance.assert_called_once_with(tenant.id, Decimal("-0.02"))
    # usage commit, then the alert check commit
    assert usage_uow.commit.call_count == 2


@pytest.mark.asyncio
async def test_messages_carry_no_duration(usage_uow, phone_number):
    command = _command(phone_number, type=UsageType.outbound_sms, duration=30, quantity=3)

    result = await RecordUsageUseCase(usage_uow).execute(command)

    assert result.value.usage.duration == 0
    assert result.value.usage.quantity == 3


@pytest.mark.asyncio
async def test_duplicate_reference_is_not_charged_again(usage_uow, phone_number):
    existing = UsageRecord(
        tenant_id=phone_number.tenant_id,
        phone_number_id=phone_number.id,
        type=UsageType.outbound_call,
        provider_reference_id="CA001",
        cost=Decimal("0.02"),
    )
    usage_uow.usage_records.get_by_provider_reference = AsyncMock(return_value=existing)

    result = await RecordUsageUseCase(usage_uow).execute(_command(phone_number))

    assert result.is_ok()
    assert result.value.duplicate is True
    assert result.value.usage.id == str(existing.id)
    usage_uow.usage_records.create.assert_not_called()
    usage_uow.tenants.adjust_balance.assert_not_called()
    usage_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_lost_insert_race_returns_winner(usage_uow, phone_number):
    winner = UsageRecord(
        tenant_id=phone_number.tenant_id,
        phone_number_id=phone_number.id,
        type=UsageType.outbound_call,
        provider_reference_id="CA001",
        cost=Decimal("0.02"),
    )
    usage_uow.usage_records.get_by_provider_reference = AsyncMock(side_effect=[None, winner])
    usage_uow.usage_records.create = AsyncMock(side_effect=DuplicateUsageRecordError("CA001"))

    result = await RecordUsageUseCase(usage_uow).execute(_command(phone_number))

    assert result.value.duplicate is True
    assert result.value.usage.id == str(winner.id)
    usage_uow.rollback.assert_called_once()
    usage_uow.tenants.adjust_balance.assert_not_called()


@pytest.mark.asyncio
async def test_negative_cost_rejected(usage_uow, phone_number):
    result = await RecordUsageUseCase(usage_uow).execute(
        _command(phone_number, cost=Decimal("-0.01"))
    )

    assert result.is_err()
    assert result.error.code == "INVALID_COST"
    usage_uow.phone_numbers.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_zero_cost_is_recorded(usage_uow, phone_number):
    result = await RecordUsageUseCase(usage_uow).execute(_command(phone_number, cost=Decimal("0")))

    assert result.is_ok()
    assert result.value.usage.cost == Decimal("0")


@pytest.mark.asyncio
async def test_unknown_phone_number(usage_uow):
    usage_uow.phone_numbers.get_by_id = AsyncMock(return_value=None)
    command = RecordUsageCommand(phone_number_id=uuid4(), type=UsageType.inbound_sms, cost=Decimal("0.01"))

    result = await RecordUsageUseCase(usage_uow).execute(command)

    assert result.is_err()
    assert result.error.code == "PHONE_NUMBER_NOT_FOUND"


@pytest.mark.asyncio
async def test_persistent_lock_conflict_is_reported(usage_uow, phone_number):
    usage_uow.tenants.adjust_balance = AsyncMock(
        side_effect=OperationalError("UPDATE tenants", {}, Exception("database is locked"))
    )

    result = await RecordUsageUseCase(usage_uow, retry_attempts=2).execute(_command(phone_number))

    assert result.is_err()
    assert result.error.code == "CONCURRENCY_CONFLICT"
    assert usage_uow.tenants.adjust_balance.call_count == 2
    usage_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_low_balance_alert_after_usage(usage_uow, tenant, phone_number):
    tenant.current_balance = Decimal("10")

    result = await RecordUsageUseCase(usage_uow).execute(_command(phone_number))

    assert result.is_ok()
    entry = usage_uow.activity_logs.create.call_args[0][0]
    assert entry.event_metadata["alert_type"] == "low_balance"
