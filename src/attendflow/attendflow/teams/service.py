from __future__ import annotations

import logging

from ..common.validators import require_non_empty, require_role, require_team_name
from ..core.constants import TOPIC_REFRESH_DATA
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..notifications.channel import NotificationChannel
from ..policies.repository import PolicyRepository
from .repository import TeamRepository

logger = logging.getLogger(__name__)


class TeamService:
    """Use case: rename or delete a team as an explicit migration."""

    def __init__(self, teams: TeamRepository, policies: PolicyRepository, notifier: NotificationChannel):
        self._teams = teams
        self._policies = policies
        self._notifier = notifier

    def rename_team(self, *, current_role: Role, old_name: str, new_name: str) -> None:
        require_role(current_role, Role.ADMIN)
        old_name = require_non_empty(old_name, "Old team name")
        new_name = require_team_name(new_name, "New team name")

        if old_name == new_name:
            raise ValidationError("New team name must differ from the old one")
        if self._policies.get_team_override(new_name) is not None:
            raise ValidationError(f"Team {new_name!r} already has its own settings")

        self._teams.rename_team(old_name, new_name)
        logger.info("Renamed team %s -> %s", old_name, new_name)
        self._notifier.publish(TOPIC_REFRESH_DATA, {"renamed": {"from": old_name, "to": new_name}})

    def delete_team(self, *, current_role: Role, name: str) -> None:
        require_role(current_role, Role.ADMIN)
        name = require_team_name(name, "Team name")

        self._teams.delete_team(name)
        logger.info("Deleted team %s", name)
        self._notifier.publish(TOPIC_REFRESH_DATA, {"deleted_team": name})
