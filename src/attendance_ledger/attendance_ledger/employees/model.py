from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Mapping, Optional

from ..common.datetime_utils import WEEKDAYS, weekday_name


@dataclass(frozen=True)
class DaySchedule:
    """One weekday of an employee's schedule ({active, start, end})."""

    active: bool
    start: Optional[time] = None
    end: Optional[time] = None


def default_week() -> dict[str, DaySchedule]:
    """Monday-Friday 07:00-16:00, weekend off."""
    week = {day: DaySchedule(active=True, start=time(7, 0), end=time(16, 0)) for day in WEEKDAYS[:5]}
    week.update({day: DaySchedule(active=False) for day in WEEKDAYS[5:]})
    return week


@dataclass(frozen=True)
class EmployeeScheduleView:
    """Read-only snapshot of a directory entry.

    Owned by the employee directory; the attendance core never mutates it except for
    badge assignment.
    """

    employee_id: str
    name: str
    department: str
    position: str
    date_employed: Optional[date] = None
    badge_uid: Optional[str] = None
    is_active: bool = True
    schedule: Mapping[str, DaySchedule] = field(default_factory=default_week)

    def day_schedule(self, day: date) -> Optional[DaySchedule]:
        return self.schedule.get(weekday_name(day))

    def works_on(self, day: date) -> bool:
        sched = self.day_schedule(day)
        return bool(sched and sched.active)
