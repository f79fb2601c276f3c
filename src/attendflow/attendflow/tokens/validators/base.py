from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ...core.enums import TokenVerdict
from ..model import TokenScope

if TYPE_CHECKING:
    from ..service import VerificationTokenManager


@dataclass(frozen=True)
class TokenCheckContext:
    candidate: str
    department: Optional[str]
    user_departments: tuple
    now_ms: int


@dataclass(frozen=True)
class TokenDecision:
    verdict: TokenVerdict
    scope: Optional[TokenScope] = None


NOT_APPLICABLE = TokenDecision(TokenVerdict.NOT_APPLICABLE)


class TokenValidator(ABC):
    """Strategy Pattern: one rule of the additive token cascade."""

    name: str = ""

    @abstractmethod
    def check(self, ctx: TokenCheckContext, tokens: "VerificationTokenManager") -> TokenDecision:
        raise NotImplementedError

    def _against(self, scope: TokenScope, ctx: TokenCheckContext, tokens: "VerificationTokenManager") -> TokenDecision:
        if tokens.validate(scope, ctx.candidate, now_ms=ctx.now_ms):
            return TokenDecision(TokenVerdict.ACCEPT, scope)
        return TokenDecision(TokenVerdict.REJECT, scope)
