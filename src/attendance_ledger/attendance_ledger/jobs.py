from __future__ import annotations

import logging
from datetime import tzinfo
from typing import Iterable

from apscheduler.schedulers.background import BackgroundScheduler

from .attendance.service import AttendanceService
from .common.datetime_utils import PH_TZ, parse_clock_time

logger = logging.getLogger(__name__)


def run_sweep(service: AttendanceService) -> None:
    result = service.run_forced_closure_sweep()
    if result.skipped:
        return
    if result.failed:
        logger.warning("Forced closure: %s closed, %s failed", result.closed_count, len(result.failed))
    else:
        logger.info("Forced closure: %s closed", result.closed_count)


def build_scheduler(service: AttendanceService, *, sweep_times: Iterable[str], tz: tzinfo = PH_TZ) -> BackgroundScheduler:
    """One cron job per sweep time (HH:MM, local).

    A run that would overlap a running one is dropped and missed runs are collapsed.
    """

    scheduler = BackgroundScheduler(timezone=tz)
    for value in sweep_times:
        at = parse_clock_time(value)
        scheduler.add_job(
            run_sweep,
            "cron",
            hour=at.hour,
            minute=at.minute,
            args=(service,),
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
            id=f"forced-closure-{at.hour:02d}{at.minute:02d}",
            replace_existing=True,
        )
        logger.info("Forced closure scheduled daily at %s", value)
    return scheduler
