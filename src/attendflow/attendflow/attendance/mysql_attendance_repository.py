from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceMethod, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..policies.model import GeoPoint
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, department, work_date, check_in_time, check_out_time,
    status, method, note, location_lat, location_lng
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    location = None
    if r.get("location_lat") is not None and r.get("location_lng") is not None:
        location = GeoPoint(lat=float(r["location_lat"]), lng=float(r["location_lng"]))
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        department=r["department"],
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        method=AttendanceMethod(r["method"]),
        note=r.get("note"),
        location=location,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Open-record uniqueness is enforced by the schema: the generated column
    ``open_slot`` is 1 while ``check_out_time`` is NULL and NULL otherwise, and
    UNIQUE(user_id, department, work_date, open_slot) ignores NULLs.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_by_id(self, cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _to_record(r) if r else None

    def find_open(self, user_id: int, department: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND department=%s AND work_date=%s AND check_out_time IS NULL
                """,
                (int(user_id), department, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_open(
        self,
        *,
        user_id: int,
        department: str,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        note: Optional[str] = None,
        location: Optional[GeoPoint] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, department, work_date, check_in_time, status, method, note,
                        location_lat, location_lng
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        department,
                        work_date,
                        check_in_time,
                        status.value,
                        method.value,
                        note,
                        location.lat if location else None,
                        location.lng if location else None,
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    return None
                raise
            return self._select_by_id(cur, int(cur.lastrowid))

    def set_checkout(
        self, *, attendance_id: int, check_out_time: datetime, status: AttendanceStatus
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, status.value, int(attendance_id)),
            )
            if cur.rowcount == 0:
                return None
            return self._select_by_id(cur, attendance_id)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, attendance_id)

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                ORDER BY check_in_time DESC, attendance_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_record(
        self,
        *,
        user_id: int,
        department: str,
        work_date: date,
        check_in_time: datetime,
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        method: AttendanceMethod,
        note: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, department, work_date, check_in_time, check_out_time, status, method, note
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        department,
                        work_date,
                        check_in_time,
                        check_out_time,
                        status.value,
                        method.value,
                        note,
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    return None
                raise
            return self._select_by_id(cur, int(cur.lastrowid))

    def update_record(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET department=%s, work_date=%s, check_in_time=%s, check_out_time=%s,
                        status=%s, method=%s, note=%s
                    WHERE attendance_id=%s
                    """,
                    (
                        record.department,
                        record.work_date,
                        record.check_in_time,
                        record.check_out_time,
                        record.status.value,
                        record.method.value,
                        record.note,
                        int(record.attendance_id),
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if is_duplicate_key(exc):
                    return False
                raise
            # rowcount is 0 for a no-op update too; existence decides.
            return cur.rowcount > 0 or self._select_by_id(cur, record.attendance_id) is not None

    def delete_record(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def delete_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records")
            return int(cur.rowcount)

    def delete_older_than(self, cutoff: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE check_in_time < %s", (cutoff,))
            return int(cur.rowcount)
