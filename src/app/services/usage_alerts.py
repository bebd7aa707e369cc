"""
Usage Alerts

Advisory checks run after each usage event. They only write log lines and
activity entries; they never block or undo the usage that triggered them.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import List
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityLog, ActivityType

logger = logging.getLogger(__name__)

LOW_BALANCE = "low_balance"
HIGH_USAGE = "high_usage"


@dataclass
class AlertThresholds:
    low_balance: Decimal = Decimal("50")
    high_usage: Decimal = Decimal("100")
    high_usage_window_hours: int = 24


class UsageAlertService:
    """
    Business Rules:
    - low_balance: tenant opted in and current_balance < low_balance threshold
    - high_usage: tenant opted in and usage cost over the trailing window
      exceeds the high_usage threshold

    The caller owns the transaction; check() only stages activity entries.
    """

    def __init__(self, uow: UnitOfWork, thresholds: AlertThresholds = None):
        self.uow = uow
        self.thresholds = thresholds or AlertThresholds()

    async def check(self, tenant_id: UUID) -> List[str]:
        """Returns the alert types raised"""
        tenant = await self.uow.tenants.get_by_id(tenant_id)
        if tenant is None:
            return []

        raised = []
        balance = Decimal(tenant.current_balance)

        if tenant.notification_enabled(LOW_BALANCE) and balance < self.thresholds.low_balance:
            logger.warning(f"Low balance for tenant {tenant.code}: {balance:.2f}")
            await self.uow.activity_logs.create(
                ActivityLog(
                    tenant_id=tenant_id,
                    type=ActivityType.usage_alert,
                    description=f"Low balance alert: ${balance:.2f}",
                    event_metadata={"alert_type": LOW_BALANCE, "balance": str(balance)},
                    actor="system",
                )
            )
            raised.append(LOW_BALANCE)

        if tenant.notification_enabled(HIGH_USAGE):
            window = self.thresholds.high_usage_window_hours
            since = utcnow() - timedelta(hours=window)
            recent_cost = await self.uow.usage_records.sum_cost_since(tenant_id, since)
            if recent_cost > self.thresholds.high_usage:
                logger.warning(
                    f"High usage for tenant {tenant.code}: {recent_cost:.2f} in {window}h"
                )
                await self.uow.activity_logs.create(
                    ActivityLog(
                        tenant_id=tenant_id,
                        type=ActivityType.usage_alert,
                        description=f"High usage alert: ${recent_cost:.2f} in last {window} hours",
                        event_metadata={
                            "alert_type": HIGH_USAGE,
                            "amount": str(recent_cost),
                            "period": f"{window}_hours",
                        },
                        actor="system",
                    )
                )
                raised.append(HIGH_USAGE)

        return raised
