"""Conversion between stored/submitted policy documents (plain dicts) and domain objects.

Accepts two legacy shapes still found in older documents:
- a single ``office_location`` object instead of the ``office_locations`` list
- ``allowed_ips`` as a comma-separated string
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import require_coordinate, require_non_negative_int
from ..core.constants import (
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_OFFICE_NAME,
    DEFAULT_RADIUS_METERS,
    DEFAULT_RETENTION_DAYS,
    DEFAULT_TOKEN_LENGTH,
    DEFAULT_TOKEN_TTL_SECONDS,
    LEGACY_OFFICE_NAME,
    WEEKDAYS,
)
from ..core.exceptions import ValidationError
from .model import (
    DaySchedule,
    GlobalPolicy,
    OfficeLocation,
    Override,
    ScheduleConfig,
    TeamPolicyOverride,
    TeamSchedule,
    TokenGenerationConfig,
    default_weekly_schedule,
)


def parse_day_schedule(raw: Mapping[str, Any]) -> DaySchedule:
    if raw.get("holiday"):
        return DaySchedule.holiday()

    enabled = bool(raw.get("enabled", False))
    if not enabled and not (raw.get("start_time") and raw.get("end_time")):
        return DaySchedule.holiday()

    start = parse_hhmm(raw.get("start_time", ""))
    end = parse_hhmm(raw.get("end_time", ""))
    if enabled and not start < end:
        raise ValidationError(f"Start time must be before end time ({start:%H:%M} >= {end:%H:%M})")
    return DaySchedule(enabled=enabled, start_time=start, end_time=end)


def parse_weekly_schedule(raw: Optional[Mapping[str, Any]]) -> dict[str, DaySchedule]:
    out: dict[str, DaySchedule] = {}
    for day, entry in (raw or {}).items():
        if day not in WEEKDAYS:
            raise ValidationError(f"Unknown weekday: {day!r}")
        if entry:
            out[day] = parse_day_schedule(entry)
    return out


def parse_schedule_exceptions(raw: Optional[Mapping[str, Any]]) -> dict[str, DaySchedule]:
    out: dict[str, DaySchedule] = {}
    for key, entry in (raw or {}).items():
        day = parse_iso_date(key)
        out[day.isoformat()] = parse_day_schedule(entry or {"holiday": True})
    return out


def schedule_map_to_dict(schedule: Mapping[str, DaySchedule]) -> dict:
    return {key: day.to_dict() for key, day in schedule.items()}


def parse_office_location(raw: Mapping[str, Any]) -> OfficeLocation:
    radius = raw.get("radius_meters")
    try:
        radius = float(radius) if radius is not None else 0.0
    except (TypeError, ValueError):
        raise ValidationError("radius_meters must be a number")

    return OfficeLocation(
        name=str(raw.get("name") or DEFAULT_OFFICE_NAME),
        lat=require_coordinate(raw.get("lat"), "lat", 90),
        lng=require_coordinate(raw.get("lng"), "lng", 180),
        radius_meters=radius if radius > 0 else DEFAULT_RADIUS_METERS,
    )


def parse_office_locations(
    raw: Optional[Iterable[Mapping[str, Any]]],
    *,
    legacy_single: Optional[Mapping[str, Any]] = None,
) -> tuple:
    locations = tuple(parse_office_location(item) for item in (raw or []))
    if not locations and legacy_single and legacy_single.get("lat"):
        locations = (parse_office_location({**legacy_single, "name": LEGACY_OFFICE_NAME}),)
    return locations


def parse_allowed_ips(raw: Any) -> frozenset:
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        raw = raw.split(",")
    return frozenset(str(ip).strip() for ip in raw if str(ip).strip())


def parse_token_generation(raw: Optional[Mapping[str, Any]]) -> TokenGenerationConfig:
    raw = raw or {}
    length = require_non_negative_int(raw.get("length", DEFAULT_TOKEN_LENGTH), "Token length")
    if length < 1:
        raise ValidationError("Token length must be at least 1")
    return TokenGenerationConfig(
        length=length,
        prefix=str(raw.get("prefix") or "").strip().upper(),
        include_digits=raw.get("include_digits") is not False,
        include_letters=raw.get("include_letters") is not False,
    )


def parse_global_policy(raw: Optional[Mapping[str, Any]]) -> GlobalPolicy:
    raw = raw or {}
    weekly = parse_weekly_schedule(raw["schedule"]) if "schedule" in raw else default_weekly_schedule()
    ttl = require_non_negative_int(raw.get("token_ttl_seconds", DEFAULT_TOKEN_TTL_SECONDS), "Token TTL")
    if ttl < 1:
        raise ValidationError("Token TTL must be at least 1 second")

    return GlobalPolicy(
        require_network=bool(raw.get("require_network", False)),
        require_geofence=bool(raw.get("require_geofence", True)),
        require_token=bool(raw.get("require_token", False)),
        allowed_ips=parse_allowed_ips(raw.get("allowed_ips")),
        office_locations=parse_office_locations(
            raw.get("office_locations"), legacy_single=raw.get("office_location")
        ),
        grace_period_minutes=require_non_negative_int(
            raw.get("grace_period_minutes", DEFAULT_GRACE_PERIOD_MINUTES), "Grace period"
        ),
        token_ttl_seconds=ttl,
        token_generation=parse_token_generation(raw.get("token_generation")),
        schedule=ScheduleConfig(weekly=weekly, exceptions=parse_schedule_exceptions(raw.get("exceptions"))),
        data_retention_days=require_non_negative_int(
            raw.get("data_retention_days", DEFAULT_RETENTION_DAYS), "Data retention days"
        ),
    )


def global_policy_to_dict(policy: GlobalPolicy) -> dict:
    gen = policy.token_generation
    return {
        "require_network": policy.require_network,
        "require_geofence": policy.require_geofence,
        "require_token": policy.require_token,
        "allowed_ips": sorted(policy.allowed_ips),
        "office_locations": [o.to_dict() for o in policy.office_locations],
        "grace_period_minutes": policy.grace_period_minutes,
        "token_ttl_seconds": policy.token_ttl_seconds,
        "token_generation": {
            "length": gen.length,
            "prefix": gen.prefix,
            "include_digits": gen.include_digits,
            "include_letters": gen.include_letters,
        },
        "schedule": schedule_map_to_dict(policy.schedule.weekly),
        "exceptions": schedule_map_to_dict(policy.schedule.exceptions),
        "data_retention_days": policy.data_retention_days,
    }


def parse_team_override(team: str, raw: Optional[Mapping[str, Any]]) -> TeamPolicyOverride:
    raw = raw or {}
    grace = raw.get("grace_period_minutes")
    schedule = TeamSchedule(
        weekly=parse_weekly_schedule(raw.get("schedule")),
        grace_period_minutes=require_non_negative_int(grace, "Grace period") if grace is not None else None,
    )
    return TeamPolicyOverride(
        team=team,
        network=Override(bool(raw.get("use_custom_network")), parse_allowed_ips(raw.get("allowed_ips"))),
        geofence=Override(bool(raw.get("use_custom_geofence")), parse_office_locations(raw.get("office_locations"))),
        schedule=Override(bool(raw.get("use_custom_schedule")), schedule),
        use_custom_token=bool(raw.get("use_custom_token")),
    )


def team_override_to_dict(override: TeamPolicyOverride) -> dict:
    schedule = override.schedule.value or TeamSchedule()
    return {
        "use_custom_network": override.network.enabled,
        "allowed_ips": sorted(override.network.value or ()),
        "use_custom_geofence": override.geofence.enabled,
        "office_locations": [o.to_dict() for o in override.geofence.value or ()],
        "use_custom_token": override.use_custom_token,
        "use_custom_schedule": override.schedule.enabled,
        "schedule": schedule_map_to_dict(schedule.weekly),
        "grace_period_minutes": schedule.grace_period_minutes,
    }
