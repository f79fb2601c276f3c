from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import GLOBAL_SCOPE_KEY


@dataclass(frozen=True)
class TokenScope:
    """Where a token lives: organization-wide (``team=None``) or one team."""

    team: Optional[str] = None

    @classmethod
    def for_team(cls, team: str) -> "TokenScope":
        return cls(team=team)

    @classmethod
    def from_key(cls, key: str) -> "TokenScope":
        return cls() if key == GLOBAL_SCOPE_KEY else cls(team=key)

    @property
    def is_global(self) -> bool:
        return self.team is None

    @property
    def key(self) -> str:
        return GLOBAL_SCOPE_KEY if self.team is None else self.team

    def __str__(self) -> str:
        return "global" if self.team is None else f"team:{self.team}"


GLOBAL = TokenScope()


@dataclass(frozen=True)
class VerificationToken:
    code: str
    issued_at_ms: int
    ttl_ms: int

    @property
    def expires_at_ms(self) -> int:
        return self.issued_at_ms + self.ttl_ms

    def is_valid_at(self, now_ms: int) -> bool:
        return now_ms < self.expires_at_ms

    def is_expired_at(self, now_ms: int) -> bool:
        """Sweep criterion. Strictly past expiry; validity is re-checked at use time anyway."""
        return now_ms > self.expires_at_ms

    def to_dict(self) -> dict:
        return {"code": self.code, "issued_at_ms": self.issued_at_ms, "ttl_ms": self.ttl_ms}


@dataclass(frozen=True)
class TokenMatch:
    accepted: bool
    matched_by: Optional[str] = None
    scope: Optional[TokenScope] = None
