from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Optional

from ..common.datetime_utils import PH_TZ, combine_local, localize
from ..core.exceptions import DomainError
from ..employees.repository import EmployeeDirectory
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    closed_count: int = 0
    failed: list[dict[str, Any]] = field(default_factory=list)
    skipped: bool = False
    trigger: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "closed_count": self.closed_count,
            "failed": self.failed,
            "skipped": self.skipped,
            "trigger": self.trigger.isoformat() if self.trigger else None,
        }


class ForcedClosureSweep:
    """Closes every record still clocked in on or before the trigger date.

    Records of earlier days are closed at the trigger's wall-clock time on their own
    date. A sweep started while another is running returns ``skipped=True``.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        directory: EmployeeDirectory,
        machine: AttendanceStateMachine,
        *,
        tz: tzinfo = PH_TZ,
    ):
        self._records = records
        self._directory = directory
        self._machine = machine
        self._tz = tz
        self._running = threading.Lock()

    def run(self, trigger: datetime) -> SweepResult:
        trigger = localize(trigger, self._tz)
        if not self._running.acquire(blocking=False):
            logger.warning("Sweep at %s skipped: previous sweep still running", trigger.isoformat())
            return SweepResult(skipped=True, trigger=trigger)

        try:
            return self._run(trigger)
        finally:
            self._running.release()

    def _run(self, trigger: datetime) -> SweepResult:
        closed = 0
        failed: list[dict[str, Any]] = []
        for record in self._records.list_open(on_or_before=trigger.date()):
            if record.work_date == trigger.date():
                closed_at = trigger
            else:
                closed_at = combine_local(record.work_date, trigger.time(), self._tz)
            try:
                employee = self._directory.get_by_employee_id(record.employee_id)
                self._machine.force_close(record, closed_at, employee)
            except DomainError as e:
                if e.code == "ALREADY_CLOSED":
                    logger.info("Sweep: record %s closed concurrently", record.record_id)
                    continue
                logger.warning("Sweep: record %s not closed (%s: %s)", record.record_id, e.code, e.message)
                failed.append({"record_id": record.record_id, "code": e.code, "reason": e.message})
                continue
            except Exception:
                logger.exception("Sweep: record %s failed", record.record_id)
                failed.append({"record_id": record.record_id, "code": "SYSTEM_ERROR", "reason": "Unexpected error"})
                continue
            closed += 1

        logger.info("Sweep at %s closed %s record(s), %s failed", trigger.isoformat(), closed, len(failed))
        return SweepResult(closed_count=closed, failed=failed, trigger=trigger)
