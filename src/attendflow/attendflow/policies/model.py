from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Generic, Mapping, Optional, TypeVar

from ..core.constants import (
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_TOKEN_LENGTH,
    DEFAULT_TOKEN_TTL_SECONDS,
    WEEKDAYS,
)

T = TypeVar("T")


@dataclass(frozen=True)
class DaySchedule:
    """Expected work window for one day. ``enabled=False`` means no constraint (e.g. holiday)."""

    enabled: bool
    start_time: time
    end_time: time

    @classmethod
    def holiday(cls) -> "DaySchedule":
        return cls(enabled=False, start_time=time(0, 0), end_time=time(0, 0))

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }


@dataclass(frozen=True)
class ScheduleConfig:
    weekly: Mapping[str, DaySchedule] = field(default_factory=dict)
    # keyed by YYYY-MM-DD, takes precedence over weekly
    exceptions: Mapping[str, DaySchedule] = field(default_factory=dict)


def default_weekly_schedule() -> dict[str, DaySchedule]:
    return {
        day: DaySchedule(enabled=day not in ("Saturday", "Sunday"), start_time=time(9, 0), end_time=time(17, 0))
        for day in WEEKDAYS
    }


@dataclass(frozen=True)
class OfficeLocation:
    name: str
    lat: float
    lng: float
    radius_meters: float

    def to_dict(self) -> dict:
        return {"name": self.name, "lat": self.lat, "lng": self.lng, "radius_meters": self.radius_meters}


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


@dataclass(frozen=True)
class TokenGenerationConfig:
    length: int = DEFAULT_TOKEN_LENGTH
    prefix: str = ""
    include_digits: bool = True
    include_letters: bool = True


@dataclass(frozen=True)
class Override(Generic[T]):
    """A team-level value that only applies while its flag is on.

    A flag that is off defers to the parent even when a stale value is stored.
    """

    enabled: bool = False
    value: Optional[T] = None

    def resolve(self, parent: T) -> T:
        if self.enabled and self.value:
            return self.value
        return parent


@dataclass(frozen=True)
class TeamSchedule:
    weekly: Mapping[str, DaySchedule] = field(default_factory=dict)
    grace_period_minutes: Optional[int] = None

    def __bool__(self) -> bool:
        return bool(self.weekly) or self.grace_period_minutes is not None


@dataclass(frozen=True)
class TeamPolicyOverride:
    team: str
    network: Override[frozenset] = field(default_factory=Override)
    geofence: Override[tuple] = field(default_factory=Override)
    schedule: Override[TeamSchedule] = field(default_factory=Override)
    use_custom_token: bool = False

    @property
    def use_custom_network(self) -> bool:
        return self.network.enabled

    @property
    def use_custom_geofence(self) -> bool:
        return self.geofence.enabled

    @property
    def use_custom_schedule(self) -> bool:
        return self.schedule.enabled


@dataclass(frozen=True)
class GlobalPolicy:
    """Singleton organization-wide policy document."""

    require_network: bool = False
    require_geofence: bool = True
    require_token: bool = False
    allowed_ips: frozenset = frozenset()
    office_locations: tuple = ()
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    token_generation: TokenGenerationConfig = field(default_factory=TokenGenerationConfig)
    schedule: ScheduleConfig = field(default_factory=lambda: ScheduleConfig(weekly=default_weekly_schedule()))
    data_retention_days: int = DEFAULT_RETENTION_DAYS


@dataclass(frozen=True)
class PolicyBundle:
    """Effective policy for one department on one day. Computed, never persisted."""

    require_network: bool
    require_geofence: bool
    require_token: bool
    allowed_ips: frozenset
    office_locations: tuple
    grace_period_minutes: int
    schedule_for_today: Optional[DaySchedule] = None
