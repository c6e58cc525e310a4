from __future__ import annotations

from datetime import datetime

import mysql.connector
import pytest

from conftest import MONDAY, make_employee, ph
from src.attendance_ledger.attendance_ledger.attendance.factory import AttendanceStrategyFactory
from src.attendance_ledger.attendance_ledger.attendance.model import AttendanceRecord
from src.attendance_ledger.attendance_ledger.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.attendance_ledger.attendance_ledger.attendance.policies import LateOvertimeCalculator, TimeWindowPolicy
from src.attendance_ledger.attendance_ledger.attendance.state_machine import AttendanceStateMachine
from src.attendance_ledger.attendance_ledger.core.enums import AttendanceStatus, EventSource
from src.attendance_ledger.attendance_ledger.core.exceptions import ConflictError
from src.attendance_ledger.attendance_ledger.leaves.memory_leave_repository import InMemoryLeaveRepository
from src.attendance_ledger.attendance_ledger.leaves.service import LeaveConflictGuard

WINNER_ROW = {
    "record_id": 7,
    "employee_id": "EMP-001",
    "work_date": MONDAY,
    "employee_name": "Juan Dela Cruz",
    "department": "Engineering",
    "position": "Developer",
    "date_employed": None,
    "time_in": datetime(2025, 3, 3, 7, 59),
    "time_out": None,
    "status": "Present",
    "late_minutes": 0,
    "overtime_minutes": 0,
    "hours_worked": 0,
    "total_minutes": 0,
    "record_type": "manual",
    "time_in_source": "manual",
    "time_out_source": None,
    "notes": "",
    "recorded_by": "Admin",
    "last_modified": datetime(2025, 3, 3, 7, 59),
}


class FakeTable:
    """One attendance_records key; INSERT fails with the queued errors first."""

    database = "attendance_test"

    def __init__(self, insert_errors=(), winner=WINNER_ROW):
        self.row = None
        self.winner = winner
        self.insert_errors = list(insert_errors)
        self.commits = 0
        self.rollbacks = 0

    def connect(self):
        return FakeConnection(self)


class FakeConnection:
    def __init__(self, table: FakeTable):
        self._table = table

    def cursor(self, dictionary=True):
        return FakeCursor(self._table)

    def commit(self):
        self._table.commits += 1

    def rollback(self):
        self._table.rollbacks += 1

    def close(self):
        pass


class FakeCursor:
    def __init__(self, table: FakeTable):
        self._table = table
        self._result = None
        self.lastrowid = None

    def execute(self, sql, params=()):
        statement = sql.strip().split(None, 1)[0].upper()
        if statement == "SELECT":
            self._result = self._table.row
        elif statement == "INSERT":
            if self._table.insert_errors:
                # The competing writer commits its row while this one fails.
                if self._table.winner:
                    self._table.row = dict(self._table.winner)
                raise self._table.insert_errors.pop(0)
            self.lastrowid = 1

    def fetchone(self):
        return self._result

    def close(self):
        pass


def build_machine(table: FakeTable) -> AttendanceStateMachine:
    calculator = LateOvertimeCalculator()
    return AttendanceStateMachine(
        MySQLAttendanceRepository(table),
        LeaveConflictGuard(InMemoryLeaveRepository()),
        window=TimeWindowPolicy(),
        calculator=calculator,
        strategy_factory=AttendanceStrategyFactory(calculator),
        clock=lambda: ph(2025, 3, 3, 8, 0),
    )


def deadlock() -> mysql.connector.Error:
    return mysql.connector.DatabaseError(msg="Deadlock found when trying to get lock", errno=1213)


@pytest.mark.parametrize("lost_race", [mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062), deadlock()])
def test_losing_clock_in_sees_winner_row(lost_race):
    table = FakeTable(insert_errors=[lost_race])
    machine = build_machine(table)
    employee = make_employee("EMP-001", "Juan Dela Cruz")

    with pytest.raises(ConflictError) as exc:
        machine.clock_in(employee, ph(2025, 3, 3, 8, 0), EventSource.MANUAL, recorded_by="Admin")

    assert exc.value.code == "TIMEIN_ALREADY_RECORDED"
    assert table.rollbacks == 2


def test_first_clock_in_is_inserted():
    table = FakeTable()
    machine = build_machine(table)
    employee = make_employee("EMP-001", "Juan Dela Cruz")

    record = machine.clock_in(employee, ph(2025, 3, 3, 8, 0), EventSource.MANUAL, recorded_by="Admin")

    assert record.record_id == 1
    assert table.commits == 1


def test_repeated_deadlock_is_reported_busy():
    table = FakeTable(insert_errors=[deadlock(), deadlock()], winner=None)
    repo = MySQLAttendanceRepository(table)

    def always_insert(current):
        return AttendanceRecord(
            record_id=0,
            employee_id="EMP-001",
            work_date=MONDAY,
            employee_name="Juan Dela Cruz",
            department="Engineering",
            position="Developer",
            time_in=ph(2025, 3, 3, 8, 0),
            status=AttendanceStatus.PRESENT,
        )

    with pytest.raises(ConflictError) as exc:
        repo.apply("EMP-001", MONDAY, always_insert)

    assert exc.value.code == "RECORD_BUSY"
