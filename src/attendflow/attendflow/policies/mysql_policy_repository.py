from __future__ import annotations

from typing import Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from ..tokens.model import TokenScope, VerificationToken
from .model import GlobalPolicy, TeamPolicyOverride
from .parsing import global_policy_to_dict, parse_global_policy, parse_team_override, team_override_to_dict
from .repository import PolicyRepository

GLOBAL_POLICY_ID = 1


class MySQLPolicyRepository(PolicyRepository):
    """Policy documents are stored as JSON; tokens get their own table so that
    expiry cleanup can be a conditional single-row delete.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_global_policy(self) -> GlobalPolicy:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT document FROM global_policy WHERE policy_id=%s", (GLOBAL_POLICY_ID,))
            r = fetchone(cur)
            if r:
                return parse_global_policy(load_json(r["document"], {}))

            policy = GlobalPolicy()
            cur.execute(
                "INSERT IGNORE INTO global_policy(policy_id, document) VALUES(%s,%s)",
                (GLOBAL_POLICY_ID, dump_json(global_policy_to_dict(policy))),
            )
            return policy

    def save_global_policy(self, policy: GlobalPolicy) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO global_policy(policy_id, document) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE document=VALUES(document)
                """,
                (GLOBAL_POLICY_ID, dump_json(global_policy_to_dict(policy))),
            )

    def get_team_override(self, team: str) -> Optional[TeamPolicyOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT team_name, document FROM team_policies WHERE team_name=%s", (team,))
            r = fetchone(cur)
            if not r:
                return None
            return parse_team_override(r["team_name"], load_json(r["document"], {}))

    def save_team_override(self, override: TeamPolicyOverride) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO team_policies(team_name, document) VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE document=VALUES(document)
                """,
                (override.team, dump_json(team_override_to_dict(override))),
            )

    def delete_team_override(self, team: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM team_policies WHERE team_name=%s", (team,))
            return cur.rowcount > 0

    def get_token(self, scope: TokenScope) -> Optional[VerificationToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT code, issued_at_ms, ttl_ms FROM verification_tokens WHERE scope_key=%s",
                (scope.key,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return VerificationToken(code=r["code"], issued_at_ms=int(r["issued_at_ms"]), ttl_ms=int(r["ttl_ms"]))

    def list_tokens(self) -> Mapping[TokenScope, VerificationToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT scope_key, code, issued_at_ms, ttl_ms FROM verification_tokens")
            return {
                TokenScope.from_key(r["scope_key"]): VerificationToken(
                    code=r["code"], issued_at_ms=int(r["issued_at_ms"]), ttl_ms=int(r["ttl_ms"])
                )
                for r in fetchall(cur)
            }

    def set_token(self, scope: TokenScope, token: VerificationToken) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO verification_tokens(scope_key, code, issued_at_ms, ttl_ms)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    code=VALUES(code), issued_at_ms=VALUES(issued_at_ms), ttl_ms=VALUES(ttl_ms)
                """,
                (scope.key, token.code, int(token.issued_at_ms), int(token.ttl_ms)),
            )

    def clear_token(self, scope: TokenScope, *, code: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if code is None:
                cur.execute("DELETE FROM verification_tokens WHERE scope_key=%s", (scope.key,))
            else:
                cur.execute(
                    "DELETE FROM verification_tokens WHERE scope_key=%s AND code=%s",
                    (scope.key, code),
                )
            return cur.rowcount > 0
