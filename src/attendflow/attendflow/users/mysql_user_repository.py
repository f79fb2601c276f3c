from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from ..policies.parsing import parse_weekly_schedule
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, row: Optional[Dict[str, Any]]) -> Optional[User]:
        if not row:
            return None
        cur.execute(
            "SELECT department FROM user_departments WHERE user_id=%s ORDER BY position, department",
            (int(row["user_id"]),),
        )
        departments = tuple(r["department"] for r in fetchall(cur))
        return User(
            user_id=int(row["user_id"]),
            logical_id=row["logical_id"],
            full_name=row["full_name"],
            role=Role(row["role"]),
            departments=departments,
            custom_schedule=parse_weekly_schedule(load_json(row.get("custom_schedule"), {})),
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, logical_id, full_name, role, custom_schedule
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            return self._load(cur, fetchone(cur))

    def find_by_logical_id(self, logical_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, logical_id, full_name, role, custom_schedule
                FROM users
                WHERE logical_id=%s
                """,
                (logical_id,),
            )
            return self._load(cur, fetchone(cur))
