from __future__ import annotations

import hmac
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, to_epoch_millis
from ..common.validators import require_team_name
from ..core.constants import TOPIC_TOKEN_ROTATED
from ..core.enums import TokenVerdict
from ..notifications.channel import NotificationChannel
from ..policies.repository import PolicyRepository
from .generator import generate_code
from .model import TokenMatch, TokenScope, VerificationToken
from .validators.any_team_validator import AnyTeamTokenValidator
from .validators.base import TokenCheckContext, TokenValidator
from .validators.global_validator import GlobalTokenValidator
from .validators.team_validator import TeamTokenValidator

logger = logging.getLogger(__name__)


def default_validators() -> list[TokenValidator]:
    """Evaluation order of the additive cascade. First ACCEPT wins."""

    return [TeamTokenValidator(), GlobalTokenValidator(), AnyTeamTokenValidator()]


class VerificationTokenManager:
    """Issues, checks and expires the rotating check-in codes (global and per team)."""

    def __init__(
        self,
        policies: PolicyRepository,
        notifier: NotificationChannel,
        *,
        clock: Callable[[], datetime] = now_local,
        validators: Optional[Sequence[TokenValidator]] = None,
    ):
        self._policies = policies
        self._notifier = notifier
        self._clock = clock
        self._validators = list(validators) if validators is not None else default_validators()

    def _now_ms(self, now_ms: Optional[int]) -> int:
        return to_epoch_millis(self._clock()) if now_ms is None else int(now_ms)

    def rotate(self, scope: TokenScope, *, now_ms: Optional[int] = None) -> VerificationToken:
        if not scope.is_global:
            scope = TokenScope.for_team(require_team_name(scope.team))

        policy = self._policies.get_global_policy()
        token = VerificationToken(
            code=generate_code(policy.token_generation),
            issued_at_ms=self._now_ms(now_ms),
            ttl_ms=int(policy.token_ttl_seconds) * 1000,
        )
        self._policies.set_token(scope, token)
        logger.info("Rotated verification code for %s (ttl=%sms)", scope, token.ttl_ms)

        self._notifier.publish(TOPIC_TOKEN_ROTATED, {"department": scope.team, "token": token.to_dict()})
        return token

    def validate(self, scope: TokenScope, candidate: str, *, now_ms: Optional[int] = None) -> bool:
        token = self._policies.get_token(scope)
        if token is None:
            return False

        now_ms = self._now_ms(now_ms)
        if not token.is_valid_at(now_ms):
            # Lazy eviction; the periodic sweep is only a backstop.
            if self._policies.clear_token(scope, code=token.code):
                logger.info("Cleared expired verification code for %s", scope)
            return False

        return hmac.compare_digest(token.code.encode(), (candidate or "").strip().encode())

    def team_uses_custom_token(self, team: str) -> bool:
        override = self._policies.get_team_override(team)
        return bool(override and override.use_custom_token)

    def check_additive(
        self,
        candidate: str,
        *,
        department: Optional[str],
        user_departments: Iterable[str] = (),
        now_ms: Optional[int] = None,
    ) -> TokenMatch:
        """Accept the code if any rule in the cascade accepts it.

        Team and global codes are additive: a team code is a convenience,
        the global code always remains a universal fallback.
        """

        ctx = TokenCheckContext(
            candidate=(candidate or "").strip(),
            department=department,
            user_departments=tuple(user_departments),
            now_ms=self._now_ms(now_ms),
        )
        if not ctx.candidate:
            return TokenMatch(accepted=False)

        for validator in self._validators:
            decision = validator.check(ctx, self)
            if decision.verdict == TokenVerdict.ACCEPT:
                return TokenMatch(accepted=True, matched_by=validator.name, scope=decision.scope)
        return TokenMatch(accepted=False)

    def sweep(self, *, now_ms: Optional[int] = None) -> int:
        """Drop every expired token. Best effort; validate() re-checks expiry anyway."""

        now_ms = self._now_ms(now_ms)
        removed = 0
        for scope, token in self._policies.list_tokens().items():
            if token.is_expired_at(now_ms) and self._policies.clear_token(scope, code=token.code):
                logger.info("Cleared expired verification code for %s", scope)
                removed += 1
        return removed
