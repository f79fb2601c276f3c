from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta

from attendflow.common.datetime_utils import to_epoch_millis
from attendflow.core.enums import AttendanceMethod, AttendanceStatus
from attendflow.maintenance.retention import RetentionService
from attendflow.maintenance.sweeper import MaintenanceSweeper
from attendflow.tokens.model import GLOBAL, TokenScope, VerificationToken


def _record(attendance, check_in: datetime):
    return attendance.create_record(
        user_id=1,
        department="Ops",
        work_date=check_in.date(),
        check_in_time=check_in,
        check_out_time=check_in + timedelta(hours=8),
        status=AttendanceStatus.PRESENT,
        method=AttendanceMethod.MANUAL,
    )


def test_run_once_clears_codes_and_old_records(container, policies, attendance, fixed_now):
    now_ms = to_epoch_millis(fixed_now)
    policies.set_token(GLOBAL, VerificationToken("LIVE01", now_ms, 10_000))
    policies.set_token(TokenScope.for_team("Ops"), VerificationToken("DEAD01", now_ms - 60_000, 10_000))
    old = _record(attendance, fixed_now - timedelta(days=400))
    recent = _record(attendance, fixed_now - timedelta(days=30))

    report = container.sweeper.run_once(fixed_now)

    assert report.tokens_cleared == 1
    assert report.records_deleted == 1
    assert set(policies.tokens) == {GLOBAL}
    assert old.attendance_id not in attendance.records
    assert recent.attendance_id in attendance.records


def test_zero_retention_keeps_everything(policies, attendance, fixed_now):
    policies.save_global_policy(replace(policies.get_global_policy(), data_retention_days=0))
    _record(attendance, fixed_now - timedelta(days=4000))

    assert RetentionService(attendance, policies).purge(fixed_now) == 0
    assert len(attendance.records) == 1


class _FlakyTokens:
    def __init__(self):
        self.calls = 0
        self.recovered = threading.Event()

    def sweep(self, *, now_ms=None) -> int:
        self.calls += 1
        if self.calls == 1:
            raise ValueError("token store returned garbage")
        self.recovered.set()
        return 0


def test_scheduled_job_survives_a_failed_run(fixed_now, caplog):
    tokens = _FlakyTokens()
    sweeper = MaintenanceSweeper(tokens, None, interval_seconds=0.05, clock=lambda: fixed_now)

    sweeper.start()
    try:
        assert tokens.recovered.wait(timeout=5)
        assert sweeper.running
    finally:
        sweeper.stop()

    assert not sweeper.running
    assert tokens.calls >= 2
    assert "Cleanup failed" in caplog.text


def test_start_registers_a_single_interval_job(fixed_now):
    sweeper = MaintenanceSweeper(_FlakyTokens(), None, interval_seconds=3600, clock=lambda: fixed_now)

    sweeper.start()
    sweeper.start()
    try:
        jobs = sweeper._scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].max_instances == 1
        assert jobs[0].coalesce is True
    finally:
        sweeper.stop()

    assert not sweeper.running
