from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceMethod, AttendanceStatus, CheckType, OutcomeKind, RejectionReason
from ..policies.model import GeoPoint


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record for (user, department, day)."""

    attendance_id: int
    user_id: int
    department: str
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    method: AttendanceMethod
    note: Optional[str] = None
    location: Optional[GeoPoint] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "department": self.department,
            "date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat(),
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "status": self.status.value,
            "method": self.method.value,
            "note": self.note,
            "location": {"lat": self.location.lat, "lng": self.location.lng} if self.location else None,
        }


@dataclass(frozen=True)
class AttendanceRequest:
    """Evidence supplied by the caller. Nothing here is fetched by the engine."""

    user_ref: str
    check_type: CheckType
    department: Optional[str] = None
    method: Optional[AttendanceMethod] = None
    client_ip: str = ""
    location: Optional[GeoPoint] = None
    token: Optional[str] = None


@dataclass(frozen=True)
class DepartmentOutcome:
    department: str
    kind: OutcomeKind
    record: Optional[AttendanceRecord] = None
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class MarkResult:
    check_type: CheckType
    outcomes: tuple = field(default_factory=tuple)

    @property
    def records(self) -> list[AttendanceRecord]:
        return [o.record for o in self.outcomes if o.kind in (OutcomeKind.CREATED, OutcomeKind.CLOSED)]

    @property
    def success(self) -> bool:
        return bool(self.records)

    @property
    def rejections(self) -> list[DepartmentOutcome]:
        return [o for o in self.outcomes if o.kind == OutcomeKind.REJECTED]

    def for_department(self, department: str) -> Optional[DepartmentOutcome]:
        return next((o for o in self.outcomes if o.department == department), None)
