from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .maintenance.retention import RetentionService
from .maintenance.sweeper import MaintenanceSweeper
from .notifications.channel import LoggingNotificationChannel, NotificationChannel
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.repository import PolicyRepository
from .policies.resolver import ScopeResolver
from .policies.service import SettingsService
from .teams.mysql_team_repository import MySQLTeamRepository
from .teams.repository import TeamRepository
from .teams.service import TeamService
from .tokens.service import VerificationTokenManager
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    policies_repo: PolicyRepository
    attendance_repo: AttendanceRepository
    teams_repo: Optional[TeamRepository]

    notifier: NotificationChannel
    resolver: ScopeResolver
    token_manager: VerificationTokenManager
    attendance_service: AttendanceService
    settings_service: SettingsService
    team_service: Optional[TeamService]
    retention_service: RetentionService
    sweeper: MaintenanceSweeper

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    users_repo: UserRepository,
    policies_repo: PolicyRepository,
    attendance_repo: AttendanceRepository,
    teams_repo: Optional[TeamRepository] = None,
    notifier: Optional[NotificationChannel] = None,
    clock: Callable[[], datetime] = now_local,
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any store implementation (MySQL in production, fakes in tests)."""

    notifier = notifier or LoggingNotificationChannel()

    resolver = ScopeResolver(policies_repo, clock=clock)
    token_manager = VerificationTokenManager(policies_repo, notifier, clock=clock)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        resolver,
        token_manager,
        notifier,
        clock=clock,
    )
    settings_service = SettingsService(policies_repo, token_manager, notifier)
    team_service = TeamService(teams_repo, policies_repo, notifier) if teams_repo is not None else None
    retention_service = RetentionService(attendance_repo, policies_repo)
    sweeper = MaintenanceSweeper(token_manager, retention_service, sweep_interval_seconds, clock=clock)

    return Container(
        users_repo=users_repo,
        policies_repo=policies_repo,
        attendance_repo=attendance_repo,
        teams_repo=teams_repo,
        notifier=notifier,
        resolver=resolver,
        token_manager=token_manager,
        attendance_service=attendance_service,
        settings_service=settings_service,
        team_service=team_service,
        retention_service=retention_service,
        sweeper=sweeper,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    notifier: Optional[NotificationChannel] = None,
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connect_timeout=int(db_config.get("connect_timeout", 5)),
    )
    conn = DatabaseConnection.get_instance(config)

    return build_services(
        users_repo=MySQLUserRepository(conn),
        policies_repo=MySQLPolicyRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        teams_repo=MySQLTeamRepository(conn),
        notifier=notifier,
        sweep_interval_seconds=sweep_interval_seconds,
        conn=conn,
    )
