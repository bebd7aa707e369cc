"""
Get Activity Logs Use Case

Retrieves the billing activity trail of a tenant with pagination.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_naive_utc
from src.domain.entities import ActivityType


class ActivityLogEntry(BaseModel):
    id: str
    type: ActivityType
    description: str
    actor: Optional[str] = None
    timestamp: str
    metadata: Dict[str, Any]


class ActivityLogPage(BaseModel):
    entries: List[ActivityLogEntry]
    next_cursor: Optional[str] = None


class GetActivityLogsUseCase:
    """
    Use case for retrieving activity entries for a tenant.

    Business Rules:
    - Results are tenant-scoped
    - Optional filters: activity type, [start, end) time range
    - Results ordered by newest first
    - Supports cursor-based pagination
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        tenant_id: UUID,
        activity_type: Optional[ActivityType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Result[ActivityLogPage]:
        """
        Execute get activity logs use case.

        Args:
            tenant_id: Tenant UUID
            activity_type: Only entries of this type (optional)
            start: Inclusive lower bound on created_at (optional)
            end: Exclusive upper bound on created_at (optional)
            limit: Maximum number of entries to return
            cursor: Pagination cursor (optional)

        Returns:
            Result with entries list and next_cursor, or Error
        """
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            entries, next_cursor = await self.uow.activity_logs.get_by_tenant_paginated(
                tenant_id,
                activity_type=activity_type,
                start=as_naive_utc(start),
                end=as_naive_utc(end),
                limit=limit,
                cursor=cursor,
            )

            return Return.ok(
                ActivityLogPage(
                    entries=[
                        ActivityLogEntry(
                            id=str(entry.id),
                            type=entry.type,
                            description=entry.description,
                            actor=entry.actor,
                            timestamp=entry.created_at.isoformat() + "Z",
                            metadata=entry.event_metadata or {},
                        )
                        for entry in entries
                    ],
                    next_cursor=next_cursor,
                )
            )
