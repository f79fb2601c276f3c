from __future__ import annotations

from typing import Protocol


class TeamRepository(Protocol):
    """Team identifiers key data in several stores; these migrations move all of it at once."""

    def rename_team(self, old_name: str, new_name: str) -> None:
        """In one transaction, move the team's override, token, memberships and records."""

        raise NotImplementedError

    def delete_team(self, name: str) -> None:
        """Drop memberships, override and token of a team. Records are kept."""

        raise NotImplementedError
