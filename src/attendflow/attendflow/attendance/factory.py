from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..policies.model import DaySchedule
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, schedule: Optional[DaySchedule], grace_minutes: int) -> AttendanceStrategy:
        if schedule is None or not schedule.enabled:
            return PresentStrategy()

        scheduled_start = datetime.combine(now.date(), schedule.start_time)
        minutes_after_start = (now - scheduled_start).total_seconds() / 60
        if minutes_after_start > grace_minutes:
            return LateStrategy()
        return PresentStrategy()

    def for_checkout(self) -> AttendanceStrategy:
        return PresentStrategy()
