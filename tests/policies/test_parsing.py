import pytest

from attendflow.core.constants import DEFAULT_RADIUS_METERS, LEGACY_OFFICE_NAME
from attendflow.core.exceptions import ValidationError
from attendflow.policies.parsing import (
    global_policy_to_dict,
    parse_day_schedule,
    parse_global_policy,
    parse_team_override,
    team_override_to_dict,
)


def test_defaults_for_empty_document():
    policy = parse_global_policy({})

    assert policy.require_geofence is True
    assert policy.require_network is False
    assert policy.grace_period_minutes == 15
    assert policy.token_ttl_seconds == 10
    assert policy.data_retention_days == 365
    assert policy.schedule.weekly["Monday"].enabled is True
    assert policy.schedule.weekly["Sunday"].enabled is False


def test_legacy_single_office_location():
    policy = parse_global_policy({"office_location": {"lat": 21.0285, "lng": 105.8542, "radius_meters": 0}})

    assert len(policy.office_locations) == 1
    office = policy.office_locations[0]
    assert office.name == LEGACY_OFFICE_NAME
    assert office.radius_meters == DEFAULT_RADIUS_METERS


def test_list_wins_over_legacy_single_office():
    policy = parse_global_policy(
        {
            "office_locations": [{"name": "HQ", "lat": 10, "lng": 106, "radius_meters": 200}],
            "office_location": {"lat": 21, "lng": 105},
        }
    )

    assert [o.name for o in policy.office_locations] == ["HQ"]


def test_comma_separated_allowed_ips():
    policy = parse_global_policy({"allowed_ips": " 10.0.0.1, 10.0.0.2 ,,"})

    assert policy.allowed_ips == frozenset({"10.0.0.1", "10.0.0.2"})


def test_token_prefix_is_uppercased():
    policy = parse_global_policy({"token_generation": {"prefix": " hq ", "length": 4}})

    assert policy.token_generation.prefix == "HQ"
    assert policy.token_generation.length == 4


def test_day_schedule_validation():
    assert parse_day_schedule({"holiday": True}).enabled is False
    with pytest.raises(ValidationError):
        parse_day_schedule({"enabled": True, "start_time": "17:00", "end_time": "09:00"})
    with pytest.raises(ValidationError):
        parse_day_schedule({"enabled": True, "start_time": "9am", "end_time": "17:00"})


def test_unknown_weekday_rejected():
    with pytest.raises(ValidationError):
        parse_global_policy({"schedule": {"Funday": {"enabled": True, "start_time": "09:00", "end_time": "17:00"}}})


def test_bad_exception_date_rejected():
    with pytest.raises(ValidationError):
        parse_global_policy({"exceptions": {"02/03/2026": {"holiday": True}}})


def test_global_policy_document_survives_storage():
    raw = {
        "require_network": True,
        "allowed_ips": ["10.0.0.1"],
        "office_locations": [{"name": "HQ", "lat": 10.5, "lng": 106.5, "radius_meters": 250}],
        "exceptions": {"2026-01-01": {"holiday": True}},
    }

    policy = parse_global_policy(raw)

    assert parse_global_policy(global_policy_to_dict(policy)) == policy


def test_team_override_keeps_payload_when_flag_off():
    override = parse_team_override(
        "Ops",
        {"use_custom_network": False, "allowed_ips": ["192.168.1.1"], "use_custom_token": True, "grace_period_minutes": 10},
    )

    assert override.use_custom_network is False
    assert override.network.value == frozenset({"192.168.1.1"})
    assert override.use_custom_token is True
    assert team_override_to_dict(override)["grace_period_minutes"] == 10


def test_explicit_zero_token_settings_are_rejected_not_defaulted():
    with pytest.raises(ValidationError):
        parse_global_policy({"token_generation": {"length": 0}})
    with pytest.raises(ValidationError):
        parse_global_policy({"token_ttl_seconds": 0})
