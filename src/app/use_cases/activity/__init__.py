"""Activity log use cases."""

from .get_activity_logs_use_case import ActivityLogEntry, ActivityLogPage, GetActivityLogsUseCase

__all__ = ["GetActivityLogsUseCase", "ActivityLogEntry", "ActivityLogPage"]
