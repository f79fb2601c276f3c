from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..common.validators import require_role, require_team_name
from ..core.constants import TOPIC_SETTINGS_UPDATED
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..notifications.channel import NotificationChannel
from ..tokens.service import VerificationTokenManager
from .model import GlobalPolicy, TeamPolicyOverride
from .parsing import global_policy_to_dict, parse_global_policy, parse_team_override, team_override_to_dict
from .repository import PolicyRepository

logger = logging.getLogger(__name__)

_GLOBAL_KEYS = {
    "require_network",
    "require_geofence",
    "require_token",
    "allowed_ips",
    "office_locations",
    "office_location",
    "grace_period_minutes",
    "token_ttl_seconds",
    "token_generation",
    "schedule",
    "exceptions",
    "data_retention_days",
}
_TEAM_KEYS = {
    "use_custom_network",
    "allowed_ips",
    "use_custom_geofence",
    "office_locations",
    "use_custom_token",
    "use_custom_schedule",
    "schedule",
    "grace_period_minutes",
}


def _reject_unknown(changes: Mapping[str, Any], allowed: set) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")


class SettingsService:
    """Use case: read and administer the global policy and team overrides."""

    def __init__(
        self,
        policies: PolicyRepository,
        tokens: VerificationTokenManager,
        notifier: NotificationChannel,
    ):
        self._policies = policies
        self._tokens = tokens
        self._notifier = notifier

    def get_settings(self, *, now_ms: Optional[int] = None) -> GlobalPolicy:
        """Current global policy. Expired codes are cleared on the way out."""

        self._tokens.sweep(now_ms=now_ms)
        return self._policies.get_global_policy()

    def update_global_policy(self, *, current_role: Role, changes: Mapping[str, Any]) -> GlobalPolicy:
        require_role(current_role, Role.ADMIN)
        _reject_unknown(changes, _GLOBAL_KEYS)

        document = global_policy_to_dict(self._policies.get_global_policy())
        if "office_location" in changes and "office_locations" not in changes:
            document["office_locations"] = []
        document.update(changes)
        policy = parse_global_policy(document)

        self._policies.save_global_policy(policy)
        logger.info("Global policy updated: %s", ", ".join(sorted(changes)))
        self._notifier.publish(TOPIC_SETTINGS_UPDATED, global_policy_to_dict(policy))
        return policy

    def get_team_override(self, team: str) -> Optional[TeamPolicyOverride]:
        return self._policies.get_team_override(team)

    def set_team_override(self, *, current_role: Role, team: str, changes: Mapping[str, Any]) -> TeamPolicyOverride:
        require_role(current_role, Role.ADMIN)
        team = require_team_name(team)
        _reject_unknown(changes, _TEAM_KEYS)

        existing = self._policies.get_team_override(team)
        document = team_override_to_dict(existing) if existing else {}
        document.update(changes)
        override = parse_team_override(team, document)

        self._policies.save_team_override(override)
        logger.info("Team override updated for %s: %s", team, ", ".join(sorted(changes)))
        self._notifier.publish(TOPIC_SETTINGS_UPDATED, {"team": team, "override": team_override_to_dict(override)})
        return override

    def clear_team_override(self, *, current_role: Role, team: str) -> bool:
        require_role(current_role, Role.ADMIN)
        removed = self._policies.delete_team_override(require_team_name(team))
        if removed:
            self._notifier.publish(TOPIC_SETTINGS_UPDATED, {"team": team, "override": None})
        return removed
