from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..core.enums import Role
from ..policies.model import DaySchedule


@dataclass(frozen=True)
class User:
    """Directory entry as the engine sees it: identity, role, memberships, personal schedule."""

    user_id: int
    logical_id: str
    full_name: str
    role: Role
    departments: tuple = ()
    # weekday name -> DaySchedule
    custom_schedule: Mapping[str, DaySchedule] = field(default_factory=dict)
