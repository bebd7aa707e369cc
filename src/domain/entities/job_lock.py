"""
JobLock Entity

Lease lock for scheduled jobs running on several replicas.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, SQLModel


class JobLock(SQLModel, table=True):
    """
    Business Rules:
    - A holder owns the lock until expires_at; an expired lease can be taken over
    - last_completed_at lets a daily job run exactly once per day
    """

    __tablename__ = "job_locks"

    name: str = Field(primary_key=True, max_length=64)
    holder: Optional[str] = Field(default=None, max_length=255)
    expires_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    last_completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
