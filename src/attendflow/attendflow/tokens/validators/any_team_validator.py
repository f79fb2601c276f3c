from __future__ import annotations

from ...core.enums import TokenVerdict
from ..model import TokenScope
from .base import NOT_APPLICABLE, TokenCheckContext, TokenDecision, TokenValidator


class AnyTeamTokenValidator(TokenValidator):
    """No department targeted: accept a live code of any team the user belongs to."""

    name = "any_team"

    def check(self, ctx: TokenCheckContext, tokens) -> TokenDecision:
        if ctx.department:
            return NOT_APPLICABLE

        teams = [team for team in ctx.user_departments if tokens.team_uses_custom_token(team)]
        if not teams:
            return NOT_APPLICABLE

        for team in teams:
            decision = self._against(TokenScope.for_team(team), ctx, tokens)
            if decision.verdict == TokenVerdict.ACCEPT:
                return decision
        return TokenDecision(TokenVerdict.REJECT)
