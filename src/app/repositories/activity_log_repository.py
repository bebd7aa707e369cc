from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import ActivityLog, ActivityType


class IActivityLogRepository(ABC):
    """ActivityLog repository interface - application layer"""

    @abstractmethod
    async def create(self, activity_log: ActivityLog) -> ActivityLog:
        """Create a new activity log entry (immutable)"""
        pass

    @abstractmethod
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

        Returns:
            Tuple of (entries list, next_cursor)
            - entries: ordered by created_at DESC
            - next_cursor: Cursor for next page, None if no more entries
        """
        pass
