from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policies import LateOvertimeCalculator, TimeWindowPolicy
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.state_machine import AttendanceStateMachine
from .attendance.sweep import ForcedClosureSweep
from .common.datetime_utils import fixed_zone
from .core.constants import DEFAULT_UTC_OFFSET_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.memory_employee_repository import InMemoryEmployeeRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeDirectory
from .employees.service import BadgeService
from .leaves.memory_leave_repository import InMemoryLeaveRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveConflictGuard, LeaveService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeDirectory
    leaves_repo: LeaveRepository
    attendance_repo: AttendanceRepository

    leave_guard: LeaveConflictGuard
    state_machine: AttendanceStateMachine
    sweep: ForcedClosureSweep

    attendance_service: AttendanceService
    badge_service: BadgeService
    leave_service: LeaveService


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: str = "mysql",
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    clock: Callable[[], datetime] | None = None,
) -> Container:
    """Wire repositories and services.

    ``backend="memory"`` keeps everything in process (tests, demos); the MySQL
    backend needs ``db_config``.
    """

    tz = fixed_zone(utc_offset_hours)

    conn: Optional[DatabaseConnection] = None
    if backend == "memory":
        employees_repo = InMemoryEmployeeRepository()
        leaves_repo = InMemoryLeaveRepository()
        attendance_repo = InMemoryAttendanceRepository()
    elif backend == "mysql":
        if not db_config:
            raise ValueError("db_config is required for the mysql backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        employees_repo = MySQLEmployeeRepository(conn)
        leaves_repo = MySQLLeaveRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn, tz=tz)
    else:
        raise ValueError(f"Unknown store backend: {backend!r}")

    calculator = LateOvertimeCalculator(tz=tz)
    leave_guard = LeaveConflictGuard(leaves_repo)
    state_machine = AttendanceStateMachine(
        attendance_repo,
        leave_guard,
        window=TimeWindowPolicy(tz=tz),
        calculator=calculator,
        strategy_factory=AttendanceStrategyFactory(calculator, tz=tz),
        tz=tz,
        clock=clock,
    )
    sweep = ForcedClosureSweep(attendance_repo, employees_repo, state_machine, tz=tz)

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        state_machine,
        sweep,
        tz=tz,
        clock=clock,
    )
    badge_service = BadgeService(employees_repo)
    leave_service = LeaveService(leaves_repo, employees_repo)

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        leave_guard=leave_guard,
        state_machine=state_machine,
        sweep=sweep,
        attendance_service=attendance_service,
        badge_service=badge_service,
        leave_service=leave_service,
    )
