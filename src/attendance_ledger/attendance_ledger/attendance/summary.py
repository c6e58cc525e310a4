from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ..core.enums import AttendanceStatus
from ..employees.model import EmployeeScheduleView
from .model import AttendanceRecord

STANDARD_DAY_HOURS = 8


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0.0


@dataclass(frozen=True)
class DailySummary:
    """Headcount view of one day.

    ``absent`` is active headcount minus everyone who clocked in, so it also counts
    employees on leave or off schedule.
    """

    day: date
    present: int
    absent: int
    completed: int
    late: int
    on_time: int
    total_employees: int
    records: list[AttendanceRecord] = field(default_factory=list)

    @classmethod
    def build(cls, day: date, records: Iterable[AttendanceRecord], total_employees: int) -> "DailySummary":
        records = list(records)
        present = sum(1 for r in records if r.time_in is not None)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        return cls(
            day=day,
            present=present,
            absent=max(0, total_employees - present),
            completed=sum(1 for r in records if r.time_out is not None),
            late=late,
            on_time=max(0, present - late),
            total_employees=total_employees,
            records=records,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.day.isoformat(),
            "summary": {
                "present": self.present,
                "absent": self.absent,
                "completed": self.completed,
                "late": self.late,
                "on_time": self.on_time,
                "total_employees": self.total_employees,
            },
            "records": [r.to_dict() for r in self.records],
        }


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def scheduled_days(employee: EmployeeScheduleView, start: date, end: date) -> int:
    """Days in [start, end] that are active in the employee's weekly schedule."""
    count = 0
    day = start
    while day <= end:
        if employee.works_on(day):
            count += 1
        day += timedelta(days=1)
    return count


@dataclass(frozen=True)
class MonthlySummary:
    """One employee's month so far.

    The period starts at the later of the first of the month and the employment date,
    and ends at the earlier of month end and today.
    """

    employee_id: str
    name: str
    year: int
    month: int
    period_start: Optional[date]
    period_end: Optional[date]
    work_days: int
    present_days: int
    absent_days: int
    late_days: int
    total_minutes: int
    total_hours: float
    average_hours: float
    attendance_rate: float
    efficiency: float
    hours_utilization: float

    @classmethod
    def build(
        cls,
        employee: EmployeeScheduleView,
        year: int,
        month: int,
        *,
        today: date,
        records: Iterable[AttendanceRecord],
    ) -> "MonthlySummary":
        first, last = month_bounds(year, month)
        start = max(first, employee.date_employed) if employee.date_employed else first
        end = min(last, today)

        if start > end:
            records = []
            work_days = 0
            start = end = None
        else:
            records = [r for r in records if start <= r.work_date <= end]
            work_days = scheduled_days(employee, start, end)

        present = sum(1 for r in records if r.time_in is not None)
        total_minutes = sum(r.total_minutes for r in records)
        total_hours = round(total_minutes / 60, 1)
        return cls(
            employee_id=employee.employee_id,
            name=employee.name,
            year=year,
            month=month,
            period_start=start,
            period_end=end,
            work_days=work_days,
            present_days=present,
            absent_days=max(0, work_days - present),
            late_days=sum(1 for r in records if r.status == AttendanceStatus.LATE),
            total_minutes=total_minutes,
            total_hours=total_hours,
            average_hours=round(total_hours / present, 1) if present else 0.0,
            attendance_rate=_pct(present, work_days),
            efficiency=_pct(total_hours, present * STANDARD_DAY_HOURS),
            hours_utilization=_pct(total_hours, work_days * STANDARD_DAY_HOURS),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "period": {
                "year": self.year,
                "month": self.month,
                "month_name": calendar.month_name[self.month],
                "start": self.period_start.isoformat() if self.period_start else None,
                "end": self.period_end.isoformat() if self.period_end else None,
            },
            "work_days": self.work_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "total_minutes": self.total_minutes,
            "total_hours": self.total_hours,
            "average_hours": self.average_hours,
            "metrics": {
                "attendance_rate": self.attendance_rate,
                "efficiency": self.efficiency,
                "hours_utilization": self.hours_utilization,
            },
        }
