from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...common.datetime_utils import combine_local, weekday_name
from ...core.constants import SCHEDULE_LATE_THRESHOLD_MINUTES
from ...core.enums import AttendanceStatus, EventSource
from ...employees.model import EmployeeScheduleView
from ..model import AttendanceRecord
from ..policies import ShiftMetrics
from .base import LatenessStrategy, StatusDecision


class ScheduleAwareStrategy(LatenessStrategy):
    """Badge scans: lateness against the employee's own start time, 30 minutes tolerated.

    Late and overtime minutes are rounded to the nearest minute.

    Scans on an inactive weekday are still recorded, as "No Work".
    """

    source = EventSource.RFID
    rounds_to_nearest = True

    def decide_checkin(
        self, *, now: datetime, today: date, employee: Optional[EmployeeScheduleView]
    ) -> StatusDecision:
        day = employee.day_schedule(today) if employee else None
        if employee and not employee.works_on(today):
            return StatusDecision(
                status=AttendanceStatus.NO_WORK,
                note=f"Scanned on non-work day ({weekday_name(today)})",
            )
        if not day or not day.start:
            return StatusDecision(status=AttendanceStatus.PRESENT)

        late = self._calculator.late_minutes(
            now, combine_local(today, day.start, self._tz), nearest=self.rounds_to_nearest
        )
        status = AttendanceStatus.LATE if self.is_late(late) else AttendanceStatus.PRESENT
        return StatusDecision(status=status, late_minutes=late)

    def is_late(self, late_minutes: int) -> bool:
        return late_minutes > SCHEDULE_LATE_THRESHOLD_MINUTES

    def decide_checkout(
        self,
        *,
        record: AttendanceRecord,
        metrics: ShiftMetrics,
        employee: Optional[EmployeeScheduleView],
    ) -> StatusDecision:
        if employee is not None:
            non_work_day = not employee.works_on(record.work_date)
        else:
            non_work_day = record.status == AttendanceStatus.NO_WORK
        if non_work_day:
            return StatusDecision(status=AttendanceStatus.NO_WORK, late_minutes=record.late_minutes)
        return super().decide_checkout(record=record, metrics=metrics, employee=employee)
