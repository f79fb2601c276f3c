from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import now_local, to_epoch_millis
from ..core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from ..tokens.service import VerificationTokenManager
from .retention import RetentionService

logger = logging.getLogger(__name__)

JOB_ID = "attendflow-cleanup"


@dataclass(frozen=True)
class SweepReport:
    tokens_cleared: int = 0
    records_deleted: int = 0


class MaintenanceSweeper:
    """Periodic cleanup of expired codes and old records.

    start() schedules run_once() on a background scheduler: once immediately,
    then every ``interval_seconds``. A failed run is logged and the next one
    still fires. Not a correctness mechanism: codes are re-checked at use time.
    Tests call run_once() with a fixed clock.
    """

    def __init__(
        self,
        tokens: VerificationTokenManager,
        retention: Optional[RetentionService] = None,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tokens = tokens
        self._retention = retention
        self._interval = float(interval_seconds)
        self._clock = clock
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self, now: Optional[datetime] = None) -> SweepReport:
        now = now or self._clock()
        logger.info("Starting background cleanup...")

        tokens_cleared = self._tokens.sweep(now_ms=to_epoch_millis(now))
        records_deleted = self._retention.purge(now) if self._retention else 0

        logger.info("Cleanup completed (codes=%s, records=%s)", tokens_cleared, records_deleted)
        return SweepReport(tokens_cleared=tokens_cleared, records_deleted=records_deleted)

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        logger.error(
            "Cleanup failed; retrying in %ss",
            self._interval,
            exc_info=(type(event.exception), event.exception, event.exception.__traceback__),
        )

    def start(self) -> None:
        if self.running:
            return

        scheduler = BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})
        scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self._interval,
            id=JOB_ID,
            next_run_time=datetime.now(),
        )
        scheduler.start()
        self._scheduler = scheduler

    def stop(self, wait: bool = True) -> None:
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=wait)
            self._scheduler = None
