from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date, to_epoch_millis
from ..common.validators import require_non_empty, require_role
from ..core.constants import DEFAULT_HISTORY_LIMIT, TOPIC_RECORDS_UPDATED, TOPIC_REFRESH_DATA
from ..core.enums import (
    AttendanceMethod,
    AttendanceStatus,
    CheckType,
    OutcomeKind,
    RejectionReason,
    Role,
)
from ..core.exceptions import (
    EligibilityError,
    EvidenceMissingError,
    EvidenceRejectedError,
    NotFoundError,
    ValidationError,
)
from ..eligibility.geofence import within_any_office
from ..eligibility.network import client_ip, is_authorized
from ..notifications.channel import NotificationChannel
from ..policies.model import PolicyBundle
from ..policies.resolver import ScopeResolver
from ..tokens.service import VerificationTokenManager
from ..users.model import User
from ..users.repository import UserRepository
from .classifier import decide, decide_checkout
from .model import AttendanceRecord, AttendanceRequest, DepartmentOutcome, MarkResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

UNASSIGNED_DEPARTMENT = "Unassigned"
RECORD_ADMINS = (Role.ADMIN, Role.SUPERVISOR)
_EDITABLE_FIELDS = {"department", "work_date", "check_in_time", "check_out_time", "status", "method", "note"}


class AttendanceService:
    """Session manager for attendance records: NoRecord -> Open -> Closed per (user, department, day).

    Check-in: reject if already open, resolve the department's policy bundle,
    run network / geofence / token checks (first failure wins), classify
    PRESENT/LATE, then conditionally insert. Check-out closes the open record
    and keeps its status.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        resolver: ScopeResolver,
        tokens: VerificationTokenManager,
        notifier: NotificationChannel,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._users = users
        self._resolver = resolver
        self._tokens = tokens
        self._notifier = notifier
        self._clock = clock

    def resolve_user(self, user_ref: Any) -> User:
        """Look up by numeric id first, then by logical id."""

        ref = str(user_ref or "").strip()
        user = self._users.get_by_id(int(ref)) if ref.isdigit() else None
        if user is None and ref:
            user = self._users.find_by_logical_id(ref)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------
    def _evaluate(
        self,
        request: AttendanceRequest,
        user: User,
        department: str,
        bundle: PolicyBundle,
        *,
        now: datetime,
        include_token: bool,
    ) -> AttendanceMethod:
        passed: list[AttendanceMethod] = []

        if bundle.require_network:
            if not bundle.allowed_ips:
                logger.warning(
                    "Configuration gap: network check required but no allowed IPs configured (department=%s); check skipped",
                    department,
                )
            elif not is_authorized(request.client_ip, bundle.allowed_ips):
                raise EvidenceRejectedError(
                    RejectionReason.UNAUTHORIZED_NETWORK,
                    f"Unauthorized network. Your IP: {client_ip(request.client_ip) or 'unknown'}",
                )
            else:
                passed.append(AttendanceMethod.NETWORK)

        if bundle.require_geofence:
            if not bundle.office_locations:
                logger.warning(
                    "Configuration gap: location check required but no office locations configured (department=%s); check skipped",
                    department,
                )
            elif request.location is None:
                raise EvidenceMissingError(RejectionReason.LOCATION_REQUIRED, "Location required")
            elif not within_any_office(request.location, bundle.office_locations):
                raise EvidenceRejectedError(RejectionReason.TOO_FAR, "Too far from any office location")
            else:
                passed.append(AttendanceMethod.GEOFENCE)

        if include_token and bundle.require_token:
            if not (request.token or "").strip():
                raise EvidenceMissingError(RejectionReason.TOKEN_REQUIRED, "Verification code required")
            match = self._tokens.check_additive(
                request.token,
                department=request.department,
                user_departments=user.departments,
                now_ms=to_epoch_millis(now),
            )
            if not match.accepted:
                raise EvidenceRejectedError(RejectionReason.INVALID_TOKEN, "Invalid or expired verification code")
            logger.debug("Verification code accepted by %s rule", match.matched_by)
            passed.append(AttendanceMethod.TOKEN)

        if request.method is not None:
            return request.method
        for method in (AttendanceMethod.TOKEN, AttendanceMethod.GEOFENCE, AttendanceMethod.NETWORK):
            if method in passed:
                return method
        return AttendanceMethod.NETWORK

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def _check_in(self, request: AttendanceRequest, user: User, department: str, now: datetime) -> DepartmentOutcome:
        today = now.date()

        existing = self._attendance.find_open(user.user_id, department, today)
        if existing is not None:
            return DepartmentOutcome(department, OutcomeKind.ALREADY_OPEN, record=existing, message="Already checked in")

        bundle = self._resolver.resolve_policy_bundle(department, user=user, work_date=today)
        method = self._evaluate(request, user, department, bundle, now=now, include_token=True)
        decision = decide(now, bundle.schedule_for_today, bundle.grace_period_minutes)

        record = self._attendance.insert_open(
            user_id=user.user_id,
            department=department,
            work_date=today,
            check_in_time=now,
            status=decision.status,
            method=method,
            note=decision.note,
            location=request.location,
        )
        if record is None:
            # Lost a concurrent check-in race; the other request's record stands.
            logger.info("Concurrent check-in for user=%s department=%s; keeping existing record", user.user_id, department)
            return DepartmentOutcome(department, OutcomeKind.ALREADY_OPEN, message="Already checked in")

        logger.info(
            "Check-in user=%s department=%s status=%s method=%s",
            user.user_id, department, record.status.value, record.method.value,
        )
        return DepartmentOutcome(department, OutcomeKind.CREATED, record=record)

    def _check_out(self, request: AttendanceRequest, user: User, department: str, now: datetime) -> DepartmentOutcome:
        today = now.date()

        existing = self._attendance.find_open(user.user_id, department, today)
        if existing is None:
            return DepartmentOutcome(department, OutcomeKind.NOTHING_OPEN, message="Nothing to check out")

        bundle = self._resolver.resolve_policy_bundle(department, user=user, work_date=today)
        self._evaluate(request, user, department, bundle, now=now, include_token=False)

        decision = decide_checkout(now, existing.status)
        record = self._attendance.set_checkout(
            attendance_id=existing.attendance_id, check_out_time=now, status=decision.status
        )
        if record is None:
            # Closed or purged between our read and write.
            return DepartmentOutcome(department, OutcomeKind.NOTHING_OPEN, message="Nothing to check out")

        logger.info("Check-out user=%s department=%s", user.user_id, department)
        return DepartmentOutcome(department, OutcomeKind.CLOSED, record=record)

    def _publish_records(self, records: Sequence[AttendanceRecord]) -> None:
        if records:
            self._notifier.publish(TOPIC_RECORDS_UPDATED, [r.to_dict() for r in records])

    def check_in(self, request: AttendanceRequest, department: str, *, now: Optional[datetime] = None) -> DepartmentOutcome:
        """Single-department check-in. Raises EligibilityError when a check fails."""

        user = self.resolve_user(request.user_ref)
        outcome = self._check_in(request, user, require_non_empty(department, "Department"), now or self._clock())
        if outcome.kind == OutcomeKind.CREATED:
            self._publish_records([outcome.record])
        return outcome

    def check_out(self, request: AttendanceRequest, department: str, *, now: Optional[datetime] = None) -> DepartmentOutcome:
        user = self.resolve_user(request.user_ref)
        outcome = self._check_out(request, user, require_non_empty(department, "Department"), now or self._clock())
        if outcome.kind == OutcomeKind.CLOSED:
            self._publish_records([outcome.record])
        return outcome

    def mark(self, request: AttendanceRequest, *, now: Optional[datetime] = None) -> MarkResult:
        """Check in or out of the requested department, or of every department
        the user belongs to when none is given.

        Departments are handled independently; partial success is a normal result.
        """

        now = now or self._clock()
        user = self.resolve_user(request.user_ref)
        departments = [request.department] if request.department else list(user.departments)

        outcomes: list[DepartmentOutcome] = []
        try:
            for department in departments:
                try:
                    if request.check_type == CheckType.IN:
                        outcome = self._check_in(request, user, department, now)
                    else:
                        outcome = self._check_out(request, user, department, now)
                except EligibilityError as exc:
                    logger.info(
                        "Rejected %s user=%s department=%s reason=%s",
                        request.check_type.value, user.user_id, department, exc.reason.value,
                    )
                    outcome = DepartmentOutcome(department, OutcomeKind.REJECTED, reason=exc.reason, message=str(exc))
                outcomes.append(outcome)
        finally:
            # Departments committed before a store failure are still announced.
            result = MarkResult(check_type=request.check_type, outcomes=tuple(outcomes))
            self._publish_records(result.records)
        return result

    # ------------------------------------------------------------------
    # Administrative corrections (bypass eligibility checks)
    # ------------------------------------------------------------------
    def list_recent(self, *, current_role: Role, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        require_role(current_role, *RECORD_ADMINS)
        return self._attendance.list_recent(int(limit))

    def create_manual_record(
        self,
        *,
        current_role: Role,
        user_ref: Any,
        work_date: date,
        check_in_time: datetime,
        check_out_time: Optional[datetime] = None,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        method: AttendanceMethod = AttendanceMethod.MANUAL,
        note: Optional[str] = None,
        department: Optional[str] = None,
    ) -> AttendanceRecord:
        require_role(current_role, *RECORD_ADMINS)
        user = self.resolve_user(user_ref)
        if check_out_time is not None and check_out_time < check_in_time:
            raise ValidationError("Check-out time must not be before check-in time")

        record = self._attendance.create_record(
            user_id=user.user_id,
            department=department or (user.departments[0] if user.departments else UNASSIGNED_DEPARTMENT),
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=AttendanceStatus(status),
            method=AttendanceMethod(method),
            note=(note or "").strip() or None,
        )
        if record is None:
            raise ValidationError("An open record already exists for this user, department and day")

        self._publish_records([record])
        return record

    def update_record(self, *, current_role: Role, attendance_id: int, changes: Mapping[str, Any]) -> AttendanceRecord:
        require_role(current_role, *RECORD_ADMINS)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        existing = self._attendance.get_by_id(int(attendance_id))
        if existing is None:
            raise NotFoundError("Record not found")

        updated = replace(existing, **self._coerce_changes(changes))
        if updated.check_out_time is not None and updated.check_out_time < updated.check_in_time:
            raise ValidationError("Check-out time must not be before check-in time")
        if not self._attendance.update_record(updated):
            if self._attendance.get_by_id(existing.attendance_id) is None:
                raise NotFoundError("Record not found")
            raise ValidationError("An open record already exists for this user, department and day")

        self._publish_records([updated])
        return updated

    @staticmethod
    def _coerce_changes(changes: Mapping[str, Any]) -> dict:
        out = dict(changes)
        if isinstance(out.get("work_date"), str):
            out["work_date"] = parse_iso_date(out["work_date"])
        for key in ("check_in_time", "check_out_time"):
            if isinstance(out.get(key), str):
                try:
                    out[key] = datetime.fromisoformat(out[key])
                except ValueError:
                    raise ValidationError(f"Invalid {key}: {out[key]!r}")
        try:
            if "status" in out:
                out["status"] = AttendanceStatus(out["status"])
            if "method" in out:
                out["method"] = AttendanceMethod(out["method"])
        except ValueError as exc:
            raise ValidationError(str(exc))
        if "check_in_time" in out and out["check_in_time"] is None:
            raise ValidationError("Check-in time is required")
        if "department" in out:
            out["department"] = require_non_empty(out["department"], "Department")
        return out

    def delete_record(self, *, current_role: Role, attendance_id: int) -> None:
        require_role(current_role, *RECORD_ADMINS)
        if not self._attendance.delete_record(int(attendance_id)):
            raise NotFoundError("Record not found")
        self._notifier.publish(TOPIC_REFRESH_DATA, {"attendance_id": int(attendance_id)})

    def delete_all_records(self, *, current_role: Role) -> int:
        require_role(current_role, Role.ADMIN)
        deleted = self._attendance.delete_all()
        logger.warning("Deleted all attendance records (%s)", deleted)
        self._notifier.publish(TOPIC_REFRESH_DATA, {"deleted": deleted})
        return deleted
