"""
Unit tests for tenant and phone number administration
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.payment_provider import PaymentProviderError
from src.app.use_cases.tenants import (
    CreateTenantCommand,
    CreateTenantUseCase,
    RegisterPhoneNumberCommand,
    RegisterPhoneNumberUseCase,
    ReleasePhoneNumberUseCase,
    RestoreTenantUseCase,
    SuspendTenantUseCase,
)
from src.app.use_cases.tenants.create_tenant_use_case import code_prefix
from src.domain.entities import ActivityType, PhoneNumberStatus, TenantStatus


@pytest.mark.parametrize(
    "business_name,prefix",
    [("Acme Telecom", "ACMETE"), ("AB", "ABX"), ("3M", "MXX"), ("Zoë & Co", "ZOCO")],
)
def test_code_prefix(business_name, prefix):
    assert code_prefix(business_name) == prefix


@pytest.fixture
def create_uow(mock_uow):
    mock_uow.tenants.get_by_code = AsyncMock(return_value=None)
    mock_uow.tenants.create = AsyncMock(side_effect=lambda tenant: tenant)
    mock_uow.tenants.update = AsyncMock(side_effect=lambda tenant: tenant)
    return mock_uow


@pytest.mark.asyncio
async def test_create_tenant(create_uow):
    command = CreateTenantCommand(name="Jane Doe", business_name="Acme Telecom")

    result = await CreateTenantUseCase(create_uow).execute(command)

    assert result.is_ok()
    tenant = result.value
    assert tenant.code == "ACMETE001"
    assert tenant.status == TenantStatus.active
    assert tenant.current_balance == Decimal("0")
    assert tenant.settings["notifications"]["low_balance"] is True

    entry = create_uow.activity_logs.create.call_args[0][0]
    assert entry.type == ActivityType.client_created
    create_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_create_tenant_takes_next_free_code(create_uow, tenant):
    taken = {"ACMETE001", "ACMETE002"}
    create_uow.tenants.get_by_code = AsyncMock(
        side_effect=lambda code: tenant if code in taken else None
    )

    result = await CreateTenantUseCase(create_uow).execute(
        CreateTenantCommand(name="Jane Doe", business_name="Acme Telecom")
    )

    assert result.value.code == "ACMETE003"


@pytest.mark.asyncio
async def test_create_tenant_with_provider_customer(create_uow):
    provider = MagicMock()
    provider.create_customer = AsyncMock(return_value="cus_42")
    created = []

    async def create(new_tenant):
        created.append(new_tenant)
        return new_tenant

    async def get_by_code(code):
        return created[0] if created else None

    create_uow.tenants.create = AsyncMock(side_effect=create)
    create_uow.tenants.get_by_code = AsyncMock(side_effect=get_by_code)

    result = await CreateTenantUseCase(create_uow, provider=provider).execute(
        CreateTenantCommand(name="Jane Doe", business_name="Acme Telecom")
    )

    assert result.value.external_customer_id == "cus_42"
    kwargs = provider.create_customer.call_args.kwargs
    assert kwargs["idempotency_key"] == f"tenant-{result.value.id}"


@pytest.mark.asyncio
async def test_provider_failure_does_not_fail_create(create_uow):
    provider = MagicMock()
    provider.create_customer = AsyncMock(side_effect=PaymentProviderError("down"))

    result = await CreateTenantUseCase(create_uow, provider=provider).execute(
        CreateTenantCommand(name="Jane Doe", business_name="Acme Telecom")
    )

    assert result.is_ok()
    assert result.value.external_customer_id is None


@pytest.mark.asyncio
async def test_suspend_and_restore_are_idempotent(mock_uow, tenant):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.tenants.update = AsyncMock(side_effect=lambda t: t)

    first = await SuspendTenantUseCase(mock_uow).execute(tenant.id)
    again = await SuspendTenantUseCase(mock_uow).execute(tenant.id)

    assert first.value.changed is True
    assert again.value.changed is False
    assert tenant.status == TenantStatus.suspended

    restored = await RestoreTenantUseCase(mock_uow).execute(tenant.id)
    restored_again = await RestoreTenantUseCase(mock_uow).execute(tenant.id)

    assert restored.value.changed is True
    assert restored.value.status == TenantStatus.active
    assert restored_again.value.changed is False

    logged = [call[0][0].type for call in mock_uow.activity_logs.create.call_args_list]
    assert logged == [ActivityType.client_suspended, ActivityType.client_activated]


@pytest.mark.asyncio
async def test_suspend_unknown_tenant(mock_uow):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=None)

    result = await SuspendTenantUseCase(mock_uow).execute(uuid4())

    assert result.error.code == "TENANT_NOT_FOUND"


@pytest.mark.asyncio
async def test_register_phone_number(mock_uow, tenant):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.phone_numbers.get_by_number = AsyncMock(return_value=None)
    mock_uow.phone_numbers.create = AsyncMock(side_effect=lambda number: number)
    command = RegisterPhoneNumberCommand(number="+15550100009", monthly_fee=Decimal("1.50"))

    result = await RegisterPhoneNumberUseCase(mock_uow).execute(tenant.id, command)

    assert result.is_ok()
    assert result.value.status == PhoneNumberStatus.active
    assert result.value.monthly_fee == Decimal("1.50")
    assert result.value.capabilities["voice"] is True
    entry = mock_uow.activity_logs.create.call_args[0][0]
    assert entry.type == ActivityType.phone_provisioned


@pytest.mark.asyncio
async def test_register_phone_number_errors(mock_uow, tenant, phone_number):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.phone_numbers.get_by_number = AsyncMock(return_value=phone_number)
    command = RegisterPhoneNumberCommand(number=phone_number.number)

    result = await RegisterPhoneNumberUseCase(mock_uow).execute(tenant.id, command)
    assert result.error.code == "PHONE_NUMBER_EXISTS"

    tenant.status = TenantStatus.suspended
    result = await RegisterPhoneNumberUseCase(mock_uow).execute(tenant.id, command)
    assert result.error.code == "TENANT_NOT_ACTIVE"


@pytest.mark.asyncio
async def test_release_phone_number_once(mock_uow, phone_number):
    mock_uow.phone_numbers.get_by_id = AsyncMock(return_value=phone_number)
    mock_uow.phone_numbers.update = AsyncMock(side_effect=lambda number: number)

    first = await ReleasePhoneNumberUseCase(mock_uow).execute(phone_number.id)
    second = await ReleasePhoneNumberUseCase(mock_uow).execute(phone_number.id)

    assert first.value.status == PhoneNumberStatus.released
    assert first.value.released_at is not None
    assert second.value.status == PhoneNumberStatus.released
    mock_uow.activity_logs.create.assert_called_once()
