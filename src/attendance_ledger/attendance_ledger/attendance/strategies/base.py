from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Optional

from ...common.datetime_utils import PH_TZ
from ...core.constants import HALF_DAY_HOURS
from ...core.enums import AttendanceStatus, EventSource
from ...employees.model import EmployeeScheduleView
from ..model import AttendanceRecord
from ..policies import LateOvertimeCalculator, ShiftMetrics


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0
    note: Optional[str] = None


class LatenessStrategy(ABC):
    """Strategy Pattern: how lateness and the derived status are decided for one input channel."""

    source: EventSource
    rounds_to_nearest: bool = False

    def __init__(self, calculator: LateOvertimeCalculator, *, tz: tzinfo = PH_TZ):
        self._calculator = calculator
        self._tz = tz

    @abstractmethod
    def decide_checkin(
        self, *, now: datetime, today: date, employee: Optional[EmployeeScheduleView]
    ) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def is_late(self, late_minutes: int) -> bool:
        raise NotImplementedError

    def decide_checkout(
        self,
        *,
        record: AttendanceRecord,
        metrics: ShiftMetrics,
        employee: Optional[EmployeeScheduleView],
    ) -> StatusDecision:
        if metrics.hours_worked < HALF_DAY_HOURS:
            return StatusDecision(status=AttendanceStatus.HALF_DAY, late_minutes=record.late_minutes)
        if self.is_late(record.late_minutes):
            return StatusDecision(status=AttendanceStatus.LATE, late_minutes=record.late_minutes)
        return StatusDecision(status=AttendanceStatus.COMPLETED, late_minutes=record.late_minutes)
