from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization of administrative operations."""

    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"
    EMPLOYEE = "EMPLOYEE"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record. Set at check-in, never downgraded."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    CHECKED_OUT = "CHECKED_OUT"


class AttendanceMethod(str, Enum):
    NETWORK = "NETWORK"
    GEOFENCE = "GEOFENCE"
    TOKEN = "TOKEN"
    MANUAL = "MANUAL"


class CheckType(str, Enum):
    IN = "IN"
    OUT = "OUT"


class OutcomeKind(str, Enum):
    """Per-department result of a check-in/check-out attempt."""

    CREATED = "CREATED"
    CLOSED = "CLOSED"
    ALREADY_OPEN = "ALREADY_OPEN"
    NOTHING_OPEN = "NOTHING_OPEN"
    REJECTED = "REJECTED"


class RejectionReason(str, Enum):
    LOCATION_REQUIRED = "LOCATION_REQUIRED"
    TOKEN_REQUIRED = "TOKEN_REQUIRED"
    UNAUTHORIZED_NETWORK = "UNAUTHORIZED_NETWORK"
    TOO_FAR = "TOO_FAR"
    INVALID_TOKEN = "INVALID_TOKEN"


class TokenVerdict(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    NOT_APPLICABLE = "NOT_APPLICABLE"
