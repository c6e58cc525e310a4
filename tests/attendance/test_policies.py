from __future__ import annotations

from datetime import time, timedelta, timezone

import pytest

from conftest import MONDAY, ph
from src.attendance_ledger.attendance_ledger.attendance.policies import LateOvertimeCalculator, TimeWindowPolicy
from src.attendance_ledger.attendance_ledger.core.exceptions import TimeWindowError
from src.attendance_ledger.attendance_ledger.employees.model import DaySchedule


@pytest.mark.parametrize(
    "hour, minute, allowed",
    [(5, 59, False), (6, 0, True), (16, 59, True), (17, 0, False)],
)
def test_time_in_window_is_closed_open(hour, minute, allowed):
    policy = TimeWindowPolicy()
    assert policy.is_time_in_allowed(ph(2025, 3, 3, hour, minute)) is allowed


@pytest.mark.parametrize(
    "hour, minute, allowed",
    [(6, 0, True), (18, 59, True), (19, 0, False)],
)
def test_time_out_window_is_closed_open(hour, minute, allowed):
    policy = TimeWindowPolicy()
    assert policy.is_time_out_allowed(ph(2025, 3, 3, hour, minute)) is allowed


def test_working_hours_gate_runs_before_specific_checks():
    policy = TimeWindowPolicy()

    with pytest.raises(TimeWindowError) as e:
        policy.check_time_in(ph(2025, 3, 3, 5, 30))
    assert e.value.code == "OUTSIDE_WORKING_HOURS"

    with pytest.raises(TimeWindowError) as e:
        policy.check_time_in(ph(2025, 3, 3, 17, 30))
    assert e.value.code == "TIMEIN_NOT_ALLOWED"


def test_windows_are_evaluated_in_local_time():
    policy = TimeWindowPolicy()
    # 23:30 UTC is 07:30 the next morning in Manila.
    utc_instant = ph(2025, 3, 4, 7, 30).astimezone(timezone.utc)
    assert utc_instant.hour == 23
    assert policy.is_time_in_allowed(utc_instant)


def test_late_minutes_never_negative():
    calc = LateOvertimeCalculator()
    cutoff = ph(2025, 3, 3, 8, 0)

    assert calc.late_minutes(ph(2025, 3, 3, 7, 45), cutoff) == 0
    assert calc.late_minutes(ph(2025, 3, 3, 9, 5), cutoff) == 65
    assert calc.late_minutes(ph(2025, 3, 3, 8, 0, 59), cutoff) == 0


def test_shift_metrics_against_schedule_end():
    calc = LateOvertimeCalculator()
    day = DaySchedule(active=True, start=time(7, 0), end=time(16, 0))

    m = calc.shift_metrics(ph(2025, 3, 3, 7, 10), ph(2025, 3, 3, 16, 5), day)

    assert m.hours_worked == 8.92
    assert m.total_minutes == 535
    assert m.overtime_minutes == 5


def test_shift_metrics_without_schedule_has_no_overtime():
    calc = LateOvertimeCalculator()
    time_in = ph(2025, 3, 3, 7, 0)
    time_out = time_in + timedelta(hours=12, seconds=30)

    assert calc.shift_metrics(time_in, time_out, None).overtime_minutes == 0
    assert calc.shift_metrics(time_in, time_out, DaySchedule(active=False)).overtime_minutes == 0
    assert calc.shift_metrics(time_in, time_out, None).total_minutes == 720
    assert MONDAY == time_in.date()


def test_nearest_rounding_is_opt_in():
    calc = LateOvertimeCalculator()
    start = ph(2025, 3, 3, 7, 0)

    assert calc.late_minutes(ph(2025, 3, 3, 7, 30, 40), start) == 30
    assert calc.late_minutes(ph(2025, 3, 3, 7, 30, 40), start, nearest=True) == 31
    assert calc.late_minutes(ph(2025, 3, 3, 7, 30, 29), start, nearest=True) == 30
    assert calc.late_minutes(ph(2025, 3, 3, 6, 59, 40), start, nearest=True) == 0
