"""
Unit tests for Sweep Overdue Invoices Use Case
"""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return
from src.app.use_cases.billing import (
    RunDailySweepUseCase,
    SweepOverdueInvoicesUseCase,
    SweepResponse,
)
from src.domain.entities import ActivityType, Invoice, InvoiceStatus

NOW = datetime(2026, 10, 18, 2, 0)


def _invoice(tenant_id, number):
    return Invoice(
        id=uuid4(),
        tenant_id=tenant_id,
        invoice_number=number,
        status=InvoiceStatus.pending,
        billing_period_start=datetime(2026, 8, 1),
        billing_period_end=datetime(2026, 9, 1),
        due_date=datetime(2026, 10, 1),
        total_amount=Decimal("10.00"),
    )


@pytest.mark.asyncio
async def test_sweep_marks_overdue_and_suspends(mock_uow, tenant):
    invoices = [_invoice(tenant.id, "INV-2026-0001"), _invoice(tenant.id, "INV-2026-0002")]
    mock_uow.invoices.list_pending_due_before = AsyncMock(return_value=invoices)
    mock_uow.invoices.mark_overdue = AsyncMock(return_value=True)
    mock_uow.invoices.count_overdue_by_tenant = AsyncMock(return_value=[(tenant.id, 2)])
    mock_uow.tenants.suspend_if_active = AsyncMock(return_value=True)

    result = await SweepOverdueInvoicesUseCase(mock_uow, suspend_after=2).execute(NOW)

    assert result.is_ok()
    assert result.value.invoices_marked_overdue == ["INV-2026-0001", "INV-2026-0002"]
    assert result.value.tenants_suspended == [str(tenant.id)]
    mock_uow.invoices.list_pending_due_before.assert_called_once_with(NOW)
    mock_uow.invoices.count_overdue_by_tenant.assert_called_once_with(2)

    entries = [call[0][0] for call in mock_uow.activity_logs.create.call_args_list]
    assert [entry.type for entry in entries] == [
        ActivityType.invoice_overdue,
        ActivityType.invoice_overdue,
        ActivityType.client_suspended,
    ]
    assert entries[2].event_metadata == {"reason": "overdue_invoices", "overdue_invoices": 2}
    assert entries[2].actor == "system"
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_second_sweep_changes_nothing(mock_uow, tenant):
    """Rows already moved by an earlier run produce no new activity"""
    mock_uow.invoices.list_pending_due_before = AsyncMock(
        return_value=[_invoice(tenant.id, "INV-2026-0001")]
    )
    mock_uow.invoices.mark_overdue = AsyncMock(return_value=False)
    mock_uow.invoices.count_overdue_by_tenant = AsyncMock(return_value=[(tenant.id, 2)])
    mock_uow.tenants.suspend_if_active = AsyncMock(return_value=False)

    result = await SweepOverdueInvoicesUseCase(mock_uow).execute(NOW)

    assert result.value == SweepResponse()
    mock_uow.activity_logs.create.assert_not_called()


@pytest.mark.asyncio
async def test_single_overdue_invoice_does_not_suspend(mock_uow, tenant):
    mock_uow.invoices.list_pending_due_before = AsyncMock(
        return_value=[_invoice(tenant.id, "INV-2026-0003")]
    )
    mock_uow.invoices.mark_overdue = AsyncMock(return_value=True)
    mock_uow.invoices.count_overdue_by_tenant = AsyncMock(return_value=[])
    mock_uow.tenants.suspend_if_active = AsyncMock()

    result = await SweepOverdueInvoicesUseCase(mock_uow).execute(NOW)

    assert result.value.invoices_marked_overdue == ["INV-2026-0003"]
    assert result.value.tenants_suspended == []
    mock_uow.tenants.suspend_if_active.assert_not_called()


@pytest.mark.asyncio
async def test_daily_sweep_runs_once(mock_uow):
    sweep = MagicMock()
    sweep.execute = AsyncMock(return_value=Return.ok(SweepResponse(invoices_marked_overdue=["X"])))
    mock_uow.job_locks.acquire = AsyncMock(side_effect=[True, False])
    mock_uow.job_locks.release = AsyncMock()
    use_case = RunDailySweepUseCase(mock_uow, sweep, holder="worker-1")

    first = await use_case.execute(NOW)
    second = await use_case.execute(NOW)

    assert first.value.ran is True
    assert first.value.sweep.invoices_marked_overdue == ["X"]
    assert second.value.ran is False
    assert second.value.sweep is None
    sweep.execute.assert_called_once_with(NOW)
