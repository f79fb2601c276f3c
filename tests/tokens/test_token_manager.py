from __future__ import annotations

from dataclasses import replace

import pytest

from attendflow.core.constants import DIGITS, TOPIC_TOKEN_ROTATED
from attendflow.core.exceptions import ValidationError
from attendflow.policies.model import TeamPolicyOverride, TokenGenerationConfig
from attendflow.tokens.generator import build_alphabet, generate_code
from attendflow.tokens.model import GLOBAL, TokenScope, VerificationToken
from attendflow.tokens.service import VerificationTokenManager

ISSUED = 1_000_000


@pytest.fixture
def manager(policies, notifier) -> VerificationTokenManager:
    return VerificationTokenManager(policies, notifier, clock=lambda: None)


def _opt_in(policies, team: str) -> None:
    policies.save_team_override(TeamPolicyOverride(team=team, use_custom_token=True))


def test_global_code_accepted_without_team_code(manager, policies):
    policies.set_token(GLOBAL, VerificationToken(code="ABC123", issued_at_ms=ISSUED, ttl_ms=10_000))

    match = manager.check_additive("ABC123", department="Ops", user_departments=("Ops",), now_ms=ISSUED + 1)

    assert match.accepted is True
    assert match.matched_by == "global"


def test_global_code_still_works_when_team_has_its_own(manager, policies):
    _opt_in(policies, "Ops")
    policies.set_token(TokenScope.for_team("Ops"), VerificationToken("TEAM01", ISSUED, 10_000))
    policies.set_token(GLOBAL, VerificationToken("GLOB01", ISSUED, 10_000))

    assert manager.check_additive("TEAM01", department="Ops", now_ms=ISSUED).matched_by == "team"
    assert manager.check_additive("GLOB01", department="Ops", now_ms=ISSUED).matched_by == "global"


def test_team_code_ignored_when_team_not_opted_in(manager, policies):
    policies.set_token(TokenScope.for_team("Ops"), VerificationToken("TEAM01", ISSUED, 10_000))

    assert manager.check_additive("TEAM01", department="Ops", now_ms=ISSUED).accepted is False


def test_any_team_code_accepted_when_no_department_targeted(manager, policies):
    _opt_in(policies, "Sales")
    policies.set_token(TokenScope.for_team("Sales"), VerificationToken("SALES1", ISSUED, 10_000))

    match = manager.check_additive("SALES1", department=None, user_departments=("Ops", "Sales"), now_ms=ISSUED)
    assert match.accepted is True
    assert match.matched_by == "any_team"
    assert match.scope == TokenScope.for_team("Sales")

    other_user = manager.check_additive("SALES1", department=None, user_departments=("Ops",), now_ms=ISSUED)
    assert other_user.accepted is False


def test_empty_candidate_rejected(manager, policies):
    policies.set_token(GLOBAL, VerificationToken("ABC123", ISSUED, 10_000))

    assert manager.check_additive("  ", department=None, now_ms=ISSUED).accepted is False


def test_expiry_boundary(manager, policies):
    token = VerificationToken(code="ABC123", issued_at_ms=ISSUED, ttl_ms=1000)

    policies.set_token(GLOBAL, token)
    assert manager.validate(GLOBAL, "ABC123", now_ms=ISSUED + 999) is True

    assert manager.validate(GLOBAL, "ABC123", now_ms=ISSUED + 1001) is False


def test_expired_code_is_evicted_on_validation(manager, policies):
    policies.set_token(GLOBAL, VerificationToken("ABC123", ISSUED, 1000))

    assert manager.validate(GLOBAL, "WRONG", now_ms=ISSUED + 5000) is False
    assert policies.get_token(GLOBAL) is None


def test_eviction_does_not_clobber_a_newer_code(policies):
    policies.set_token(GLOBAL, VerificationToken("NEW999", ISSUED + 5000, 1000))

    assert policies.clear_token(GLOBAL, code="OLD111") is False
    assert policies.get_token(GLOBAL).code == "NEW999"


def test_sweep_removes_only_expired(manager, policies):
    policies.set_token(GLOBAL, VerificationToken("LIVE01", ISSUED, 60_000))
    policies.set_token(TokenScope.for_team("Ops"), VerificationToken("DEAD01", ISSUED, 1000))
    policies.set_token(TokenScope.for_team("Sales"), VerificationToken("EDGE01", ISSUED, 2000))

    removed = manager.sweep(now_ms=ISSUED + 2000)

    assert removed == 1
    assert set(policies.tokens) == {GLOBAL, TokenScope.for_team("Sales")}


def test_rotate_persists_and_notifies(manager, policies, notifier):
    policies.save_global_policy(
        replace(
            policies.get_global_policy(),
            token_ttl_seconds=30,
            token_generation=TokenGenerationConfig(length=6, prefix="HQ", include_letters=False),
        )
    )

    token = manager.rotate(TokenScope.for_team("Ops"), now_ms=ISSUED)

    assert token.code.startswith("HQ")
    assert len(token.code) == 8
    assert all(ch in DIGITS for ch in token.code[2:])
    assert token.ttl_ms == 30_000
    assert policies.get_token(TokenScope.for_team("Ops")) == token
    assert notifier.events == [(TOPIC_TOKEN_ROTATED, {"department": "Ops", "token": token.to_dict()})]


def test_rotate_supersedes_previous_code(manager, policies):
    first = manager.rotate(GLOBAL, now_ms=ISSUED)
    second = manager.rotate(GLOBAL, now_ms=ISSUED + 1)

    assert policies.get_token(GLOBAL) == second
    assert second.issued_at_ms > first.issued_at_ms


def test_alphabet_falls_back_when_both_sets_disabled():
    config = TokenGenerationConfig(length=12, include_digits=False, include_letters=False)

    assert build_alphabet(config)
    code = generate_code(config)
    assert len(code) == 12
    assert code.isalnum()


def test_rotate_refuses_team_named_like_global_scope(manager, policies, notifier):
    current = VerificationToken("GLOB01", ISSUED, 10_000)
    policies.set_token(GLOBAL, current)

    with pytest.raises(ValidationError):
        manager.rotate(TokenScope.for_team("*"), now_ms=ISSUED)

    assert policies.get_token(GLOBAL) == current
    assert notifier.events == []
