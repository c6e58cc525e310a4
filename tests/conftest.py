from __future__ import annotations

import os
from datetime import date, datetime

import pytest

os.environ["APP_ENV"] = "testing"

from src.attendance_ledger.attendance_ledger.common.datetime_utils import PH_TZ
from src.attendance_ledger.attendance_ledger.container import build_container
from src.attendance_ledger.attendance_ledger.employees.model import DaySchedule, EmployeeScheduleView, default_week

MONDAY = date(2025, 3, 3)
TUESDAY = date(2025, 3, 4)
FRIDAY_BEFORE = date(2025, 2, 28)
SATURDAY = date(2025, 3, 8)


def ph(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    """Wall-clock instant in Philippine time."""
    return datetime(year, month, day, hour, minute, second, tzinfo=PH_TZ)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_employee(employee_id: str, name: str, *, badge_uid: str | None = None, **kwargs) -> EmployeeScheduleView:
    return EmployeeScheduleView(
        employee_id=employee_id,
        name=name,
        department=kwargs.pop("department", "Engineering"),
        position=kwargs.pop("position", "Developer"),
        badge_uid=badge_uid,
        **kwargs,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return ph(2025, 3, 3, 12, 0)


@pytest.fixture
def clock(fixed_now) -> FrozenClock:
    return FrozenClock(fixed_now)


@pytest.fixture
def employees() -> list[EmployeeScheduleView]:
    # EMP-003 works a Tuesday-Saturday 09:00-18:00 week.
    shifted = dict(default_week())
    shifted["Monday"] = DaySchedule(active=False)
    for day in ("Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"):
        shifted[day] = DaySchedule(active=True, start=datetime(2000, 1, 1, 9).time(), end=datetime(2000, 1, 1, 18).time())
    return [
        make_employee("EMP-001", "Juan Dela Cruz", badge_uid="A1B2C3D4"),
        make_employee("EMP-002", "Maria Santos", badge_uid="0F0E0D0C", department="Finance", position="Analyst"),
        make_employee("EMP-003", "Jose Rizal", badge_uid="DEADBEEF", schedule=shifted),
        make_employee("EMP-004", "Former Staff", badge_uid="12345678", is_active=False),
    ]


@pytest.fixture
def container(clock, employees):
    c = build_container(backend="memory", clock=clock)
    for e in employees:
        c.employees_repo.add(e)
    return c


@pytest.fixture
def service(container):
    return container.attendance_service
