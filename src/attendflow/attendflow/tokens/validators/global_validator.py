from __future__ import annotations

from ..model import GLOBAL
from .base import TokenCheckContext, TokenDecision, TokenValidator


class GlobalTokenValidator(TokenValidator):
    """The organization-wide code. Always applicable: it works for everyone."""

    name = "global"

    def check(self, ctx: TokenCheckContext, tokens) -> TokenDecision:
        return self._against(GLOBAL, ctx, tokens)
