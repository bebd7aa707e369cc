from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.job_lock_repository import IJobLockRepository
from src.domain.entities import JobLock


class JobLockRepository(IJobLockRepository):
    """JobLock repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, name: str) -> Optional[JobLock]:
        stmt = select(JobLock).where(JobLock.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def acquire(
        self,
        name: str,
        holder: str,
        now: datetime,
        expires_at: datetime,
        not_completed_since: Optional[datetime] = None,
    ) -> bool:
        if await self.get(name) is None:
            try:
                self.session.add(JobLock(name=name, holder=holder, expires_at=expires_at))
                await self.session.flush()
                return True
            except IntegrityError:
                # Another replica created it first; compete through the UPDATE below
                await self.session.rollback()

        conditions = [
            JobLock.name == name,
            or_(JobLock.holder.is_(None), JobLock.holder == holder, JobLock.expires_at < now),
        ]
        if not_completed_since is not None:
            conditions.append(
                or_(
                    JobLock.last_completed_at.is_(None),
                    JobLock.last_completed_at < not_completed_since,
                )
            )

        stmt = (
            update(JobLock)
            .where(*conditions)
            .values(holder=holder, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def release(self, name: str, holder: str, completed_at: Optional[datetime] = None) -> None:
        values = {"holder": None, "expires_at": None}
        if completed_at is not None:
            values["last_completed_at"] = completed_at
        stmt = (
            update(JobLock)
            .where(JobLock.name == name, JobLock.holder == holder)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
