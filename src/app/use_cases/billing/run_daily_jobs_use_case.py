"""
Use Cases: Run Daily Sweep / Run Daily Cycle Invoices

Leader-locked wrappers so each job runs once per day no matter how many
replicas tick.
"""

from datetime import datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.daily_job import run_once_per_day
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_naive_utc, utcnow

from .dtos import DailyJobResponse
from .generate_cycle_invoices_use_case import GenerateCycleInvoicesUseCase
from .sweep_overdue_invoices_use_case import SweepOverdueInvoicesUseCase

OVERDUE_SWEEP_JOB = "overdue_sweep"
CYCLE_INVOICES_JOB = "cycle_invoices"


class RunDailySweepUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        sweep: SweepOverdueInvoicesUseCase,
        holder: str,
        lease_seconds: int = 900,
    ):
        self.uow = uow
        self.sweep = sweep
        self.holder = holder
        self.lease_seconds = lease_seconds

    async def execute(self, now: Optional[datetime] = None) -> Result[DailyJobResponse]:
        now = as_naive_utc(now) or utcnow()
        result = await run_once_per_day(
            self.uow,
            OVERDUE_SWEEP_JOB,
            self.holder,
            now,
            lambda: self.sweep.execute(now),
            lease_seconds=self.lease_seconds,
        )
        if result.is_err():
            return result
        outcome = result.value
        return Return.ok(DailyJobResponse(job=outcome.job, ran=outcome.ran, sweep=outcome.result))


class RunDailyCycleInvoicesUseCase:
    def __init__(
        self,
        uow: UnitOfWork,
        cycle_invoices: GenerateCycleInvoicesUseCase,
        holder: str,
        lease_seconds: int = 900,
    ):
        self.uow = uow
        self.cycle_invoices = cycle_invoices
        self.holder = holder
        self.lease_seconds = lease_seconds

    async def execute(self, now: Optional[datetime] = None) -> Result[DailyJobResponse]:
        now = as_naive_utc(now) or utcnow()
        result = await run_once_per_day(
            self.uow,
            CYCLE_INVOICES_JOB,
            self.holder,
            now,
            lambda: self.cycle_invoices.execute(now.date()),
            lease_seconds=self.lease_seconds,
        )
        if result.is_err():
            return result
        outcome = result.value
        return Return.ok(
            DailyJobResponse(job=outcome.job, ran=outcome.ran, cycle_invoices=outcome.result)
        )
