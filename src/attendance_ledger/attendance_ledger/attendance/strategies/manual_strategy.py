from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ...common.datetime_utils import combine_local
from ...core.constants import MANUAL_LATE_CUTOFF
from ...core.enums import AttendanceStatus, EventSource
from ...employees.model import EmployeeScheduleView
from .base import LatenessStrategy, StatusDecision


class ManualEntryStrategy(LatenessStrategy):
    """Administrative entries: fixed 08:00 cutoff, any lateness counts."""

    source = EventSource.MANUAL

    def decide_checkin(
        self, *, now: datetime, today: date, employee: Optional[EmployeeScheduleView]
    ) -> StatusDecision:
        cutoff = combine_local(today, time(*MANUAL_LATE_CUTOFF), self._tz)
        late = self._calculator.late_minutes(now, cutoff)
        status = AttendanceStatus.LATE if self.is_late(late) else AttendanceStatus.PRESENT
        return StatusDecision(status=status, late_minutes=late)

    def is_late(self, late_minutes: int) -> bool:
        return late_minutes > 0
