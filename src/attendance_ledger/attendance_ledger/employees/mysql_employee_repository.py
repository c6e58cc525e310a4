from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DaySchedule, EmployeeScheduleView, default_week
from .repository import EmployeeDirectory

_EMPLOYEE_COLUMNS = """
    employee_id, first_name, last_name, department, position, date_employed, badge_uid, status
"""


class MySQLEmployeeRepository(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_schedule(self, cur, employee_id: str) -> dict[str, DaySchedule]:
        cur.execute(
            """
            SELECT weekday, active, start_time, end_time
            FROM employee_schedules
            WHERE employee_id=%s
            """,
            (employee_id,),
        )
        rows = fetchall(cur)
        if not rows:
            return default_week()
        week = {day: DaySchedule(active=False) for day in default_week()}
        for r in rows:
            week[r["weekday"]] = DaySchedule(
                active=bool(r["active"]),
                start=normalize_mysql_time(r.get("start_time")),
                end=normalize_mysql_time(r.get("end_time")),
            )
        return week

    def _to_view(self, cur, row: Dict[str, Any]) -> EmployeeScheduleView:
        return EmployeeScheduleView(
            employee_id=row["employee_id"],
            name=f"{row['first_name']} {row['last_name']}".strip(),
            department=row["department"],
            position=row["position"],
            date_employed=row.get("date_employed"),
            badge_uid=row.get("badge_uid"),
            is_active=row.get("status", "Active") == "Active",
            schedule=self._load_schedule(cur, row["employee_id"]),
        )

    def get_by_employee_id(self, employee_id: str) -> Optional[EmployeeScheduleView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            row = fetchone(cur)
            if not row:
                return None
            return self._to_view(cur, row)

    def get_by_badge_uid(self, uid: str) -> Optional[EmployeeScheduleView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE badge_uid=%s AND status='Active'",
                (uid,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return self._to_view(cur, row)

    def find_badge_holder(self, uid: str) -> Optional[EmployeeScheduleView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE badge_uid=%s", (uid,))
            row = fetchone(cur)
            if not row:
                return None
            return self._to_view(cur, row)

    def set_badge(self, employee_id: str, uid: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET badge_uid=%s WHERE employee_id=%s",
                (uid, employee_id),
            )
            return cur.rowcount > 0

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM employees WHERE status='Active'")
            return int((fetchone(cur) or {}).get("total") or 0)
