from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

from ..common.datetime_utils import PH_TZ, combine_local, localize, minutes_of_day, nearest_minutes, whole_minutes
from ..core.constants import TIME_IN_WINDOW_END, TIME_OUT_WINDOW_END, WORKING_HOURS_END, WORKING_HOURS_START
from ..core.exceptions import TimeWindowError
from ..employees.model import DaySchedule


def _clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class TimeWindowPolicy:
    """Time-of-day gates, evaluated in the configured civil zone.

    All windows are closed-open: 06:00 is inside, 19:00 is not.
    """

    def __init__(
        self,
        *,
        tz: tzinfo = PH_TZ,
        start: int = WORKING_HOURS_START,
        end: int = WORKING_HOURS_END,
        time_in_end: int = TIME_IN_WINDOW_END,
        time_out_end: int = TIME_OUT_WINDOW_END,
    ):
        self._tz = tz
        self._start = start
        self._end = end
        self._time_in_end = time_in_end
        self._time_out_end = time_out_end

    def is_working_hours(self, instant: datetime) -> bool:
        return self._start <= minutes_of_day(instant, self._tz) < self._end

    def is_time_in_allowed(self, instant: datetime) -> bool:
        return self._start <= minutes_of_day(instant, self._tz) < self._time_in_end

    def is_time_out_allowed(self, instant: datetime) -> bool:
        return self._start <= minutes_of_day(instant, self._tz) < self._time_out_end

    def check_working_hours(self, instant: datetime) -> None:
        if not self.is_working_hours(instant):
            raise TimeWindowError(
                f"Attendance can only be recorded between {_clock(self._start)} and {_clock(self._end)}",
                code="OUTSIDE_WORKING_HOURS",
            )

    def check_time_in(self, instant: datetime) -> None:
        self.check_working_hours(instant)
        if not self.is_time_in_allowed(instant):
            raise TimeWindowError(
                f"Time in is only allowed between {_clock(self._start)} and {_clock(self._time_in_end)}",
                code="TIMEIN_NOT_ALLOWED",
            )

    def check_time_out(self, instant: datetime) -> None:
        self.check_working_hours(instant)
        if not self.is_time_out_allowed(instant):
            raise TimeWindowError(
                f"Time out is only allowed between {_clock(self._start)} and {_clock(self._time_out_end)}",
                code="TIMEOUT_NOT_ALLOWED",
            )


@dataclass(frozen=True)
class ShiftMetrics:
    hours_worked: float
    total_minutes: int
    overtime_minutes: int


class LateOvertimeCalculator:
    """Pure arithmetic over instants; knows nothing about statuses.

    Minutes are floored unless ``nearest=True``, which badge scans use.
    """

    def __init__(self, *, tz: tzinfo = PH_TZ):
        self._tz = tz

    def late_minutes(self, instant: datetime, cutoff: datetime, *, nearest: bool = False) -> int:
        to_minutes = nearest_minutes if nearest else whole_minutes
        return max(0, to_minutes(localize(instant, self._tz) - localize(cutoff, self._tz)))

    def shift_metrics(
        self,
        time_in: datetime,
        time_out: datetime,
        day: Optional[DaySchedule] = None,
        *,
        nearest: bool = False,
    ) -> ShiftMetrics:
        """Worked duration and overtime.

        Overtime is measured against the scheduled end on the clock-out date and
        is 0 when the day is inactive or has no end.
        """

        time_in = localize(time_in, self._tz)
        time_out = localize(time_out, self._tz)
        elapsed = time_out - time_in

        overtime = 0
        if day and day.active and day.end:
            scheduled_end = combine_local(time_out.date(), day.end, self._tz)
            to_minutes = nearest_minutes if nearest else whole_minutes
            overtime = max(0, to_minutes(time_out - scheduled_end))

        return ShiftMetrics(
            hours_worked=round(elapsed.total_seconds() / 3600, 2),
            total_minutes=max(0, whole_minutes(elapsed)),
            overtime_minutes=overtime,
        )
