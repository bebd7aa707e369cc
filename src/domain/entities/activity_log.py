"""
ActivityLog Entity

Append-only audit trail of state-changing billing events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import ActivityType


class ActivityLog(SQLModel, table=True):
    """
    ActivityLog entity - immutable log of billing events.

    Business Rules:
    - Immutable (never updated or deleted)
    - tenant_id nullable for system-wide events
    - Metadata stores event context (invoice number, amounts, counts)
    """

    __tablename__ = "activity_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: Optional[UUID] = Field(default=None)
    type: ActivityType
    description: str = Field(max_length=500)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    actor: Optional[str] = Field(default=None, max_length=100)  # "system", "webhook", "admin"

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_activity_tenant_created_at", "tenant_id", "created_at"),
        Index("idx_activity_type_created_at", "type", "created_at"),
    )
