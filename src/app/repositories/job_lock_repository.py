from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities import JobLock


class IJobLockRepository(ABC):
    """Lease locks for scheduled jobs - application layer"""

    @abstractmethod
    async def get(self, name: str) -> Optional[JobLock]:
        pass

    @abstractmethod
    async def acquire(
        self,
        name: str,
        holder: str,
        now: datetime,
        expires_at: datetime,
        not_completed_since: Optional[datetime] = None,
    ) -> bool:
        """
        Take the lease if it is free, expired or already ours.

        When not_completed_since is given, the lease is refused if the job
        already completed at or after that instant.
        """
        pass

    @abstractmethod
    async def release(self, name: str, holder: str, completed_at: Optional[datetime] = None) -> None:
        pass
