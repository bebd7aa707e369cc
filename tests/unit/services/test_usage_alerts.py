"""
Unit tests for usage alerts
"""

from decimal import Decimal

import pytest
from unittest.mock import AsyncMock

from src.app.services.usage_alerts import HIGH_USAGE, LOW_BALANCE, AlertThresholds, UsageAlertService
from src.domain.entities import ActivityType


@pytest.mark.asyncio
async def test_no_alert_for_healthy_tenant(mock_uow, tenant):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.usage_records.sum_cost_since = AsyncMock(return_value=Decimal("3.50"))

    raised = await UsageAlertService(mock_uow).check(tenant.id)

    assert raised == []
    mock_uow.activity_logs.create.assert_not_called()


@pytest.mark.asyncio
async def test_low_balance_alert(mock_uow, tenant):
    tenant.current_balance = Decimal("49.99")
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.usage_records.sum_cost_since = AsyncMock(return_value=Decimal("0"))

    raised = await UsageAlertService(mock_uow).check(tenant.id)

    assert raised == [LOW_BALANCE]
    entry = mock_uow.activity_logs.create.call_args[0][0]
    assert entry.type == ActivityType.usage_alert
    assert entry.event_metadata["alert_type"] == LOW_BALANCE
    assert entry.description == "Low balance alert: $49.99"


@pytest.mark.asyncio
async def test_high_usage_alert_uses_window(mock_uow, tenant):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.usage_records.sum_cost_since = AsyncMock(return_value=Decimal("12.00"))
    thresholds = AlertThresholds(high_usage=Decimal("10"), high_usage_window_hours=6)

    raised = await UsageAlertService(mock_uow, thresholds).check(tenant.id)

    assert raised == [HIGH_USAGE]
    entry = mock_uow.activity_logs.create.call_args[0][0]
    assert entry.event_metadata == {"alert_type": HIGH_USAGE, "amount": "12.00", "period": "6_hours"}


@pytest.mark.asyncio
async def test_alerts_respect_notification_settings(mock_uow, tenant):
    tenant.current_balance = Decimal("-5")
    tenant.settings = {"notifications": {"low_balance": False, "high_usage": False}}
    mock_uow.tenants.get_by_id = AsyncMock(return_value=tenant)
    mock_uow.usage_records.sum_cost_since = AsyncMock(return_value=Decimal("500"))

    raised = await UsageAlertService(mock_uow).check(tenant.id)

    assert raised == []
    mock_uow.usage_records.sum_cost_since.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_tenant_raises_nothing(mock_uow, tenant):
    mock_uow.tenants.get_by_id = AsyncMock(return_value=None)

    assert await UsageAlertService(mock_uow).check(tenant.id) == []
