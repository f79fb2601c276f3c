from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...policies.model import DaySchedule
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, schedule: Optional[DaySchedule], grace_minutes: int) -> StatusDecision:
        minutes_late = int((now - datetime.combine(now.date(), schedule.start_time)).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes_late} min")
