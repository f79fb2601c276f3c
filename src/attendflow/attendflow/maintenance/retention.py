from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..policies.repository import PolicyRepository

logger = logging.getLogger(__name__)


class RetentionService:
    """Deletes attendance records older than the configured retention window."""

    def __init__(self, attendance: AttendanceRepository, policies: PolicyRepository):
        self._attendance = attendance
        self._policies = policies

    def cutoff(self, now: datetime) -> Optional[datetime]:
        days = self._policies.get_global_policy().data_retention_days
        if days <= 0:
            return None
        return now - timedelta(days=days)

    def purge(self, now: datetime) -> int:
        cutoff = self.cutoff(now)
        if cutoff is None:
            return 0

        deleted = self._attendance.delete_older_than(cutoff)
        if deleted:
            logger.info("Deleted %s attendance records checked in before %s", deleted, cutoff.date())
        return deleted
