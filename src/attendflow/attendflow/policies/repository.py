from __future__ import annotations

from typing import Mapping, Optional, Protocol

from ..tokens.model import TokenScope, VerificationToken
from .model import GlobalPolicy, TeamPolicyOverride


class PolicyRepository(Protocol):
    """Policy Store: global policy, per-team overrides and rotating tokens.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_global_policy(self) -> GlobalPolicy:
        """Return the singleton policy, creating the default document if missing."""

        raise NotImplementedError

    def save_global_policy(self, policy: GlobalPolicy) -> None:
        raise NotImplementedError

    def get_team_override(self, team: str) -> Optional[TeamPolicyOverride]:
        raise NotImplementedError

    def save_team_override(self, override: TeamPolicyOverride) -> None:
        raise NotImplementedError

    def delete_team_override(self, team: str) -> bool:
        raise NotImplementedError

    def get_token(self, scope: TokenScope) -> Optional[VerificationToken]:
        raise NotImplementedError

    def list_tokens(self) -> Mapping[TokenScope, VerificationToken]:
        raise NotImplementedError

    def set_token(self, scope: TokenScope, token: VerificationToken) -> None:
        """Store ``token`` at ``scope``, replacing any previous one."""

        raise NotImplementedError

    def clear_token(self, scope: TokenScope, *, code: Optional[str] = None) -> bool:
        """Remove the token at ``scope``.

        With ``code`` the delete only happens while that code is still current,
        so a concurrent rotation is never undone by a stale cleanup.
        """

        raise NotImplementedError
