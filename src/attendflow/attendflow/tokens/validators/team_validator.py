from __future__ import annotations

from ..model import TokenScope
from .base import NOT_APPLICABLE, TokenCheckContext, TokenDecision, TokenValidator


class TeamTokenValidator(TokenValidator):
    """The targeted department's own code, if that team issues custom codes."""

    name = "team"

    def check(self, ctx: TokenCheckContext, tokens) -> TokenDecision:
        if not ctx.department or not tokens.team_uses_custom_token(ctx.department):
            return NOT_APPLICABLE
        return self._against(TokenScope.for_team(ctx.department), ctx, tokens)
