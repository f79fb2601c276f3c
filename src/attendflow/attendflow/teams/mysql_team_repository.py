from __future__ import annotations

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, is_duplicate_key
from .repository import TeamRepository


class MySQLTeamRepository(TeamRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def rename_team(self, old_name: str, new_name: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE team_policies SET team_name=%s WHERE team_name=%s", (new_name, old_name))
            cur.execute("DELETE FROM verification_tokens WHERE scope_key=%s", (new_name,))
            cur.execute("UPDATE verification_tokens SET scope_key=%s WHERE scope_key=%s", (new_name, old_name))

            # Users already in both teams keep a single membership.
            cur.execute("UPDATE IGNORE user_departments SET department=%s WHERE department=%s", (new_name, old_name))
            cur.execute("DELETE FROM user_departments WHERE department=%s", (old_name,))

            try:
                cur.execute("UPDATE attendance_records SET department=%s WHERE department=%s", (new_name, old_name))
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise ValidationError("Both teams have open records for the same user and day") from exc
                raise

    def delete_team(self, name: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM user_departments WHERE department=%s", (name,))
            cur.execute("DELETE FROM team_policies WHERE team_name=%s", (name,))
            cur.execute("DELETE FROM verification_tokens WHERE scope_key=%s", (name,))
