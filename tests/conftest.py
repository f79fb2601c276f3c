from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from attendflow.attendance.model import AttendanceRecord
from attendflow.container import Container, build_services
from attendflow.core.enums import AttendanceStatus, Role
from attendflow.policies.model import GlobalPolicy, TeamPolicyOverride
from attendflow.tokens.model import TokenScope, VerificationToken
from attendflow.users.model import User

# Monday
FIXED_NOW = datetime(2026, 3, 2, 8, 12, 0)


class InMemoryUsers:
    def __init__(self, users: Optional[list[User]] = None):
        self.users_by_id: dict[int, User] = {u.user_id: u for u in users or []}

    def add(self, user: User) -> User:
        self.users_by_id[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def find_by_logical_id(self, logical_id: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.logical_id == logical_id), None)


class InMemoryPolicies:
    def __init__(self, policy: Optional[GlobalPolicy] = None):
        self.policy = policy or GlobalPolicy()
        self.overrides: dict[str, TeamPolicyOverride] = {}
        self.tokens: dict[TokenScope, VerificationToken] = {}

    def get_global_policy(self) -> GlobalPolicy:
        return self.policy

    def save_global_policy(self, policy: GlobalPolicy) -> None:
        self.policy = policy

    def get_team_override(self, team: str) -> Optional[TeamPolicyOverride]:
        return self.overrides.get(team)

    def save_team_override(self, override: TeamPolicyOverride) -> None:
        self.overrides[override.team] = override

    def delete_team_override(self, team: str) -> bool:
        return self.overrides.pop(team, None) is not None

    def get_token(self, scope: TokenScope) -> Optional[VerificationToken]:
        return self.tokens.get(scope)

    def list_tokens(self):
        return dict(self.tokens)

    def set_token(self, scope: TokenScope, token: VerificationToken) -> None:
        self.tokens[scope] = token

    def clear_token(self, scope: TokenScope, *, code: Optional[str] = None) -> bool:
        token = self.tokens.get(scope)
        if token is None or (code is not None and token.code != code):
            return False
        del self.tokens[scope]
        return True


class InMemoryAttendance:
    """Same contract as the MySQL store: at most one open record per (user, department, day)."""

    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._lock = threading.Lock()

    def _open_for(self, user_id: int, department: str, work_date: date) -> Optional[AttendanceRecord]:
        return next(
            (
                r
                for r in self.records.values()
                if r.user_id == user_id and r.department == department and r.work_date == work_date and r.is_open
            ),
            None,
        )

    def find_open(self, user_id: int, department: str, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._open_for(user_id, department, work_date)

    def _insert(self, **fields) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(attendance_id=self._id, **fields)
        self.records[rec.attendance_id] = rec
        return rec

    def insert_open(self, *, user_id, department, work_date, check_in_time, status, method, note=None, location=None):
        with self._lock:
            if self._open_for(user_id, department, work_date) is not None:
                return None
            return self._insert(
                user_id=user_id,
                department=department,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=None,
                status=status,
                method=method,
                note=note,
                location=location,
            )

    def set_checkout(
        self, *, attendance_id: int, check_out_time: datetime, status: AttendanceStatus
    ) -> Optional[AttendanceRecord]:
        with self._lock:
            rec = self.records.get(attendance_id)
            if rec is None or not rec.is_open:
                return None
            rec = replace(rec, check_out_time=check_out_time, status=status)
            self.records[attendance_id] = rec
            return rec

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def list_recent(self, limit: int):
        items = sorted(self.records.values(), key=lambda r: r.check_in_time, reverse=True)
        return items[:limit]

    def create_record(self, *, user_id, department, work_date, check_in_time, check_out_time, status, method, note=None):
        with self._lock:
            if check_out_time is None and self._open_for(user_id, department, work_date) is not None:
                return None
            return self._insert(
                user_id=user_id,
                department=department,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                status=status,
                method=method,
                note=note,
            )

    def update_record(self, record: AttendanceRecord) -> bool:
        with self._lock:
            if record.attendance_id not in self.records:
                return False
            if record.is_open:
                other = self._open_for(record.user_id, record.department, record.work_date)
                if other is not None and other.attendance_id != record.attendance_id:
                    return False
            self.records[record.attendance_id] = record
            return True

    def delete_record(self, attendance_id: int) -> bool:
        return self.records.pop(attendance_id, None) is not None

    def delete_all(self) -> int:
        count = len(self.records)
        self.records.clear()
        return count

    def delete_older_than(self, cutoff: datetime) -> int:
        old = [rid for rid, r in self.records.items() if r.check_in_time < cutoff]
        for rid in old:
            del self.records[rid]
        return len(old)


class InMemoryTeams:
    def __init__(self, users: InMemoryUsers, policies: InMemoryPolicies, attendance: InMemoryAttendance):
        self._users = users
        self._policies = policies
        self._attendance = attendance

    def rename_team(self, old_name: str, new_name: str) -> None:
        override = self._policies.overrides.pop(old_name, None)
        if override is not None:
            self._policies.overrides[new_name] = replace(override, team=new_name)

        token = self._policies.tokens.pop(TokenScope.for_team(old_name), None)
        if token is not None:
            self._policies.tokens[TokenScope.for_team(new_name)] = token

        for user in list(self._users.users_by_id.values()):
            if old_name in user.departments:
                departments = tuple(dict.fromkeys(new_name if d == old_name else d for d in user.departments))
                self._users.add(replace(user, departments=departments))

        for rid, rec in list(self._attendance.records.items()):
            if rec.department == old_name:
                self._attendance.records[rid] = replace(rec, department=new_name)

    def delete_team(self, name: str) -> None:
        self._policies.overrides.pop(name, None)
        self._policies.tokens.pop(TokenScope.for_team(name), None)
        for user in list(self._users.users_by_id.values()):
            if name in user.departments:
                self._users.add(replace(user, departments=tuple(d for d in user.departments if d != name)))


class RecordingNotifier:
    def __init__(self):
        self.events: list[tuple[str, object]] = []

    def publish(self, topic: str, payload) -> None:
        self.events.append((topic, payload))

    def topics(self) -> list[str]:
        return [topic for topic, _ in self.events]


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        [
            User(user_id=1, logical_id="u-ops", full_name="Ops User", role=Role.EMPLOYEE, departments=("Ops",)),
            User(
                user_id=2,
                logical_id="u-multi",
                full_name="Multi User",
                role=Role.EMPLOYEE,
                departments=("Ops", "Sales"),
            ),
        ]
    )


@pytest.fixture
def policies() -> InMemoryPolicies:
    return InMemoryPolicies()


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def container(users, policies, attendance, notifier, fixed_now) -> Container:
    return build_services(
        users_repo=users,
        policies_repo=policies,
        attendance_repo=attendance,
        teams_repo=InMemoryTeams(users, policies, attendance),
        notifier=notifier,
        clock=lambda: fixed_now,
    )
