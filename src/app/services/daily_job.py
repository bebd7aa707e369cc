"""
Once-per-day execution of scheduled jobs across replicas.

A replica runs the job only after taking its lease in job_locks. The lease
is refused while another holder's lease is live or when the job already
completed today, so concurrent ticks and restarts do not repeat the work.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, TypeVar

from libs.result import Result, Return
from src.app.services.retry import with_conflict_retry
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DailyJobOutcome:
    job: str
    ran: bool
    result: Optional[object] = None


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def run_once_per_day(
    uow: UnitOfWork,
    name: str,
    holder: str,
    now: datetime,
    job: Callable[[], Awaitable[Result[T]]],
    lease_seconds: int = 900,
) -> Result[DailyJobOutcome]:
    async def take_lease() -> Result[bool]:
        async with uow:
            acquired = await uow.job_locks.acquire(
                name,
                holder,
                now=now,
                expires_at=now + timedelta(seconds=lease_seconds),
                not_completed_since=start_of_day(now),
            )
            await uow.commit()
            return Return.ok(acquired)

    lease = await with_conflict_retry(take_lease, label=f"lease for job {name}")
    if lease.is_err():
        return lease

    if not lease.value:
        logger.info(f"Job {name} skipped: already done today or held by another replica")
        return Return.ok(DailyJobOutcome(job=name, ran=False))

    logger.info(f"Job {name} started by {holder}")
    result = await job()

    async def release_lease() -> Result[None]:
        # A failed run releases the lease without completing, so the next tick retries
        async with uow:
            await uow.job_locks.release(
                name, holder, completed_at=now if result.is_ok() else None
            )
            await uow.commit()
            return Return.ok(None)

    released = await with_conflict_retry(release_lease, label=f"release of job {name}")
    if released.is_err():
        # The lease expires on its own after lease_seconds
        logger.error(f"Job {name} finished but its lease could not be released")

    if result.is_err():
        logger.error(f"Job {name} failed: {result.error.code} {result.error.message}")
        return result

    logger.info(f"Job {name} completed")
    return Return.ok(DailyJobOutcome(job=name, ran=True, result=result.value))
