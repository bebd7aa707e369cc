"""
Bounded retry for transient database conflicts.

Lock timeouts and serialization failures surface as OperationalError; the
whole unit of work is replayed from the start after a rollback.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from sqlalchemy.exc import OperationalError

from libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[Exception], ...] = (OperationalError,)


async def with_conflict_retry(
    operation: Callable[[], Awaitable[Result[T]]],
    *,
    attempts: int = 3,
    backoff_seconds: float = 0.05,
    retry_on: Tuple[Type[Exception], ...] = TRANSIENT_ERRORS,
    label: str = "operation",
) -> Result[T]:
    """
    Run operation, replaying it on transient conflicts.

    Returns Error(CONCURRENCY_CONFLICT) once attempts are exhausted so the
    caller can answer with a retryable status instead of dropping the event.
    """
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            if attempt == attempts:
                logger.error(f"{label} failed after {attempts} attempts: {exc}")
                break
            logger.warning(f"{label} conflict on attempt {attempt}/{attempts}, retrying: {exc}")
            await asyncio.sleep(backoff_seconds * attempt)

    return Return.err(
        Error("CONCURRENCY_CONFLICT", f"Could not complete {label}, please retry")
    )
