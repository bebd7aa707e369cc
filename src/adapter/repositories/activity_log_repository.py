import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.activity_log_repository import IActivityLogRepository
from src.domain.entities import ActivityLog, ActivityType


class ActivityLogRepository(IActivityLogRepository):
    """ActivityLog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, activity_log: ActivityLog) -> ActivityLog:
        """Create a new activity log entry (immutable)"""
        self.session.add(activity_log)
        await self.session.flush()
        await self.session.refresh(activity_log)
        return activity_log

    async def get_by_tenant_paginated(
        self,
        tenant_id: UUID,
        activity_type: Optional[ActivityType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
        cursor: Optional[str] = None,
    ) -> Tuple[List[ActivityLog], Optional[str]]:
        """
        Get activity for a tenant with cursor-based pagination.

        Cursor format: base64-encoded ISO timestamp of created_at
        """
        # Build query
        stmt = select(ActivityLog).where(ActivityLog.tenant_id == tenant_id)
        if activity_type is not None:
            stmt = stmt.where(ActivityLog.type == activity_type)
        if start is not None:
            stmt = stmt.where(ActivityLog.created_at >= start)
        if end is not None:
            stmt = stmt.where(ActivityLog.created_at < end)

        # Apply cursor if provided
        if cursor:
            try:
                cursor_timestamp_str = base64.b64decode(cursor).decode("utf-8")
                cursor_timestamp = datetime.fromisoformat(cursor_timestamp_str)
                stmt = stmt.where(ActivityLog.created_at < cursor_timestamp)
            except (ValueError, TypeError):
                # Invalid cursor, ignore and return from beginning
                pass

        # Newest first, one extra row to detect another page
        stmt = stmt.order_by(ActivityLog.created_at.desc()).limit(limit + 1)

        result = await self.session.exec(stmt)
        entries = list(result.all())

        has_more = len(entries) > limit
        if has_more:
            entries = entries[:limit]

        next_cursor = None
        if has_more and entries:
            cursor_timestamp_str = entries[-1].created_at.isoformat()
            next_cursor = base64.b64encode(cursor_timestamp_str.encode("utf-8")).decode("utf-8")

        return entries, next_cursor
