"""
In-process scheduler for the daily billing jobs.

Every replica runs this loop; the job leases in job_locks make sure each
job runs once per day overall.
"""

import asyncio
import logging
import socket
import uuid
from datetime import datetime
from typing import Callable, Optional

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils import factories
from src.app.use_cases.billing import RunDailyCycleInvoicesUseCase, RunDailySweepUseCase
from src.depends import get_payment_provider
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class BillingScheduler:
    def __init__(
        self, session_factory: Callable, config=ApplicationConfig, holder: Optional[str] = None
    ):
        self.session_factory = session_factory
        self.config = config
        self.holder = holder or f"{socket.gethostname()}-{uuid.uuid4().hex[:8]}"

    async def tick(self, now: Optional[datetime] = None) -> None:
        now = now or utcnow()

        if now.hour >= self.config.SWEEP_HOUR_UTC:
            async with self.session_factory() as session:
                uow = SqlAlchemyUnitOfWork(session)
                await RunDailySweepUseCase(
                    uow,
                    factories.sweep_overdue(uow),
                    holder=self.holder,
                    lease_seconds=self.config.JOB_LOCK_TTL_SECONDS,
                ).execute(now)

        if now.hour >= self.config.INVOICE_RUN_HOUR_UTC:
            async with self.session_factory() as session:
                uow = SqlAlchemyUnitOfWork(session)
                await RunDailyCycleInvoicesUseCase(
                    uow,
                    factories.generate_cycle_invoices(uow, get_payment_provider()),
                    holder=self.holder,
                    lease_seconds=self.config.JOB_LOCK_TTL_SECONDS,
                ).execute(now)

    async def run_forever(self) -> None:
        logger.info(f"Billing scheduler started as {self.holder}")
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                # One bad tick must not stop future runs
                logger.exception("Billing scheduler tick failed")
            await asyncio.sleep(self.config.SCHEDULER_POLL_SECONDS)
