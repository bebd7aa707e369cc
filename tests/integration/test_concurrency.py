"""
Concurrent writers against one database: each worker gets its own session,
the way separate requests do in production.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest
from sqlmodel import select

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.scheduler import BillingScheduler
from src.api.utils import factories
from src.app.use_cases.billing import GenerateInvoiceCommand, RecordPaymentCommand
from src.app.use_cases.usage import RecordUsageCommand
from src.domain.base import utcnow
from src.domain.entities import (
    Invoice,
    InvoiceStatus,
    JobLock,
    PhoneNumber,
    Tenant,
    UsageRecord,
    UsageType,
)


async def _seed_tenant(session, code: str, balance: str = "0") -> UUID:
    tenant = Tenant(
        code=code,
        name="Jane Doe",
        business_name=f"{code} Ltd",
        current_balance=Decimal(balance),
    )
    session.add(tenant)
    await session.commit()
    return tenant.id


async def _seed_number(session, tenant_id: UUID, number: str) -> UUID:
    phone_number = PhoneNumber(tenant_id=tenant_id, number=number, monthly_fee=Decimal("1.00"))
    session.add(phone_number)
    await session.commit()
    return phone_number.id


async def _balance(session_factory, tenant_id: UUID) -> Decimal:
    async with session_factory() as session:
        tenant = await session.get(Tenant, tenant_id)
        return Decimal(tenant.current_balance)


@pytest.mark.asyncio
async def test_concurrent_usage_debits_are_not_lost(session_factory, db_session):
    tenant_id = await _seed_tenant(db_session, "ACMETE001", balance="10.00")
    number_id = await _seed_number(db_session, tenant_id, "+15550100001")

    async def record(index: int):
        async with session_factory() as session:
            use_case = factories.record_usage(SqlAlchemyUnitOfWork(session))
            return await use_case.execute(
                RecordUsageCommand(
                    phone_number_id=number_id,
                    type=UsageType.outbound_sms,
                    cost=Decimal("0.25"),
                    provider_reference_id=f"SM{index:04d}",
                )
            )

    results = await asyncio.gather(*(record(i) for i in range(10)))

    assert all(result.is_ok() for result in results)
    assert await _balance(session_factory, tenant_id) == Decimal("7.50")


@pytest.mark.asyncio
async def test_concurrent_redeliveries_charge_once(session_factory, db_session):
    tenant_id = await _seed_tenant(db_session, "ACMETE001", balance="10.00")
    number_id = await _seed_number(db_session, tenant_id, "+15550100001")

    async def deliver():
        async with session_factory() as session:
            use_case = factories.record_usage(SqlAlchemyUnitOfWork(session))
            return await use_case.execute(
                RecordUsageCommand(
                    phone_number_id=number_id,
                    type=UsageType.outbound_call,
                    cost=Decimal("0.02"),
                    duration=30,
                    provider_reference_id="CA0001",
                )
            )

    results = await asyncio.gather(*(deliver() for _ in range(5)))

    assert all(result.is_ok() for result in results)
    assert [result.value.duplicate for result in results].count(False) == 1
    assert len({result.value.usage.id for result in results}) == 1
    assert await _balance(session_factory, tenant_id) == Decimal("9.98")

    async with session_factory() as session:
        rows = (await session.exec(select(UsageRecord))).all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_concurrent_invoices_get_distinct_numbers(session_factory, db_session):
    tenant_ids = [await _seed_tenant(db_session, f"TENANT{i:03d}") for i in range(1, 6)]
    period_start = datetime(2026, 9, 1)
    period_end = datetime(2026, 10, 1)

    async def generate(tenant_id: UUID):
        async with session_factory() as session:
            use_case = factories.generate_invoice(SqlAlchemyUnitOfWork(session), None)
            return await use_case.execute(
                GenerateInvoiceCommand(
                    tenant_id=tenant_id, period_start=period_start, period_end=period_end
                )
            )

    results = await asyncio.gather(*(generate(tenant_id) for tenant_id in tenant_ids))

    assert all(result.is_ok() for result in results)
    year = utcnow().year
    assert sorted(result.value.invoice_number for result in results) == [
        f"INV-{year}-{n:04d}" for n in range(1, 6)
    ]


@pytest.mark.asyncio
async def test_overlapping_cycle_runs_bill_period_once(session_factory, db_session):
    tenant_id = await _seed_tenant(db_session, "ACMETE001")
    await _seed_number(db_session, tenant_id, "+15550100001")

    async def run_cycle():
        async with session_factory() as session:
            use_case = factories.generate_cycle_invoices(SqlAlchemyUnitOfWork(session), None)
            return await use_case.execute(date(2026, 10, 1))

    results = await asyncio.gather(run_cycle(), run_cycle())

    assert all(result.is_ok() for result in results)
    runs = [result.value for result in results]
    assert sum(len(run.generated) for run in runs) == 1
    assert sorted(code for run in runs for code in run.skipped) == ["ACMETE001"]
    assert all(run.failed == [] for run in runs)

    async with session_factory() as session:
        invoices = (await session.exec(select(Invoice))).all()
    assert len(invoices) == 1
    assert invoices[0].status == InvoiceStatus.pending


@pytest.mark.asyncio
async def test_concurrent_payments_cap_invoice(session_factory, db_session):
    tenant_id = await _seed_tenant(db_session, "ACMETE001")
    invoice = Invoice(
        tenant_id=tenant_id,
        invoice_number="INV-SEED-0001",
        status=InvoiceStatus.pending,
        billing_period_start=datetime(2026, 8, 1),
        billing_period_end=datetime(2026, 9, 1),
        due_date=datetime(2026, 10, 1),
        subtotal=Decimal("100.00"),
        total_amount=Decimal("100.00"),
    )
    db_session.add(invoice)
    await db_session.commit()
    invoice_id = invoice.id

    async def pay():
        async with session_factory() as session:
            use_case = factories.record_payment(SqlAlchemyUnitOfWork(session))
            return await use_case.execute(
                RecordPaymentCommand(tenant_id=tenant_id, invoice_id=invoice_id, amount=Decimal("30"))
            )

    results = await asyncio.gather(*(pay() for _ in range(4)))

    assert all(result.is_ok() for result in results)
    assert sum(result.value.applied_amount for result in results) == Decimal("100.00")
    assert len({result.value.payment_number for result in results}) == 4
    assert await _balance(session_factory, tenant_id) == Decimal("120.00")

    async with session_factory() as session:
        stored = await session.get(Invoice, invoice_id)
        assert stored.status == InvoiceStatus.paid
        assert Decimal(stored.paid_amount) == Decimal("100.00")


@pytest.mark.asyncio
async def test_scheduler_runs_each_job_once_per_day(session_factory, db_session):
    await _seed_tenant(db_session, "ACMETE001")
    run_at = datetime(2026, 10, 1, 3, 30)

    first = BillingScheduler(session_factory, holder="replica-a")
    second = BillingScheduler(session_factory, holder="replica-b")
    await asyncio.gather(first.tick(run_at), second.tick(run_at))
    await first.tick(run_at.replace(hour=9))

    async with session_factory() as session:
        invoices = (await session.exec(select(Invoice))).all()
        locks = (await session.exec(select(JobLock))).all()

    assert len(invoices) == 1
    assert invoices[0].billing_period_start == datetime(2026, 9, 1)
    assert len(locks) == 2
    assert all(lock.last_completed_at == run_at for lock in locks)
    assert all(lock.holder is None for lock in locks)
