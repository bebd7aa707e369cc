"""
SequenceCounter Entity

Named monotonically increasing counter used for document numbers.
"""

from sqlmodel import Field, SQLModel


class SequenceCounter(SQLModel, table=True):
    """
    One row per sequence (e.g. "invoice:2026").

    Values are only advanced with UPDATE ... SET value = value + 1, so two
    transactions can never be handed the same number.
    """

    __tablename__ = "sequence_counters"

    name: str = Field(primary_key=True, max_length=64)
    value: int = Field(default=0)
