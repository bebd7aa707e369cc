from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.sequence_repository import ISequenceRepository
from src.domain.entities import SequenceCounter

_UPSERT_DIALECTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


class SequenceRepository(ISequenceRepository):
    """
    Counter allocation with row-level atomic increments.

    The UPDATE takes the row (or database) write lock until the surrounding
    transaction ends, so the value read back belongs to this transaction only.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_value(self, name: str) -> int:
        await self._ensure_row(name)

        stmt = (
            update(SequenceCounter)
            .where(SequenceCounter.name == name)
            .values(value=SequenceCounter.value + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(SequenceCounter.value).where(SequenceCounter.name == name)
        )
        return result.scalar_one()

    async def _ensure_row(self, name: str) -> None:
        dialect = self.session.bind.dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is not None:
            stmt = insert(SequenceCounter).values(name=name, value=0).on_conflict_do_nothing()
            await self.session.execute(stmt)
            return

        # Other backends: insert under a savepoint so losing the race to a
        # concurrent creator leaves the outer transaction usable
        existing = await self.session.execute(
            select(SequenceCounter.name).where(SequenceCounter.name == name)
        )
        if existing.scalar_one_or_none() is not None:
            return
        try:
            async with self.session.begin_nested():
                self.session.add(SequenceCounter(name=name, value=0))
                await self.session.flush()
        except IntegrityError:
            # Row exists now; the increment below uses it
            return
