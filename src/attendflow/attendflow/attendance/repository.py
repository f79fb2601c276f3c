from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMethod, AttendanceStatus
from ..policies.model import GeoPoint
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Event Log Store.

    Records may disappear at any time (retention purge); callers treat a
    missing record as a normal outcome.
    """

    def find_open(self, user_id: int, department: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Atomic check-then-create of an open record.

        Returns None when another open record already exists for
        (user_id, department, work_date), including when it was created
        concurrently between the caller's read and this write.
        """

        raise NotImplementedError

    def set_checkout(
        self, *, attendance_id: int, check_out_time: datetime, status: AttendanceStatus
    ) -> Optional[AttendanceRecord]:
        """Close an open record. None if it is gone or was already closed."""

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        """Admin-only insert. None if it would create a second open record."""

        raise NotImplementedError

    def update_record(self, record: AttendanceRecord) -> bool:
        """Admin-only overwrite. False if the record is gone or the change would open a second record."""

        raise NotImplementedError

    def delete_record(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError

    def delete_older_than(self, cutoff: datetime) -> int:
        """Retention: remove records checked in before ``cutoff``."""

        raise NotImplementedError
