from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..policies.model import DaySchedule
from .factory import AttendanceStrategyFactory
from .strategies.base import StatusDecision

_factory = AttendanceStrategyFactory()


def decide(now: datetime, schedule: Optional[DaySchedule], grace_minutes: int) -> StatusDecision:
    strategy = _factory.for_checkin(now=now, schedule=schedule, grace_minutes=grace_minutes)
    return strategy.decide_checkin(now=now, schedule=schedule, grace_minutes=grace_minutes)


def classify(now: datetime, schedule: Optional[DaySchedule], grace_minutes: int) -> AttendanceStatus:
    """PRESENT or LATE for a check-in at ``now``.

    LATE iff more than ``grace_minutes`` have passed since today's scheduled
    start. Arriving early is never penalized. Pure; touches no store.
    """

    return decide(now, schedule, grace_minutes).status


def decide_checkout(now: datetime, current: AttendanceStatus) -> StatusDecision:
    """Status to store when a record is closed. Never changes the check-in classification."""

    return _factory.for_checkout().decide_checkout(now=now, current=current)
