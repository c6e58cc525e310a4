from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveInterval
from .repository import LeaveRepository

_COLUMNS = "leave_id, employee_id, start_date, end_date, status, leave_type, reason, approved_by, created_at"


def _to_leave(r: Dict[str, Any]) -> LeaveInterval:
    return LeaveInterval(
        leave_id=int(r["leave_id"]),
        employee_id=r["employee_id"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=LeaveStatus(r["status"]),
        leave_type=LeaveType(r["leave_type"]),
        reason=r.get("reason") or "",
        approved_by=r.get("approved_by"),
        created_at=r.get("created_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        status: LeaveStatus,
        leave_type: LeaveType,
        reason: str = "",
        approved_by: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(employee_id, start_date, end_date, status, leave_type, reason, approved_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (employee_id, start_date, end_date, status.value, leave_type.value, reason, approved_by),
            )
            return int(cur.lastrowid)

    def delete(self, leave_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM leaves WHERE leave_id=%s", (int(leave_id),))
            return cur.rowcount > 0

    def get_by_id(self, leave_id: int) -> Optional[LeaveInterval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leaves WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_approved_covering(self, employee_id: str, day: date) -> Optional[LeaveInterval]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leaves
                WHERE employee_id=%s AND status=%s AND start_date<=%s AND end_date>=%s
                LIMIT 1
                """,
                (employee_id, LeaveStatus.APPROVED.value, day, day),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveInterval]:
        clauses = ["employee_id=%s", "status=%s"]
        params: list[object] = [employee_id, LeaveStatus.APPROVED.value]
        if start_date and end_date:
            clauses.append("start_date<=%s AND end_date>=%s")
            params.extend([end_date, start_date])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leaves WHERE {' AND '.join(clauses)} ORDER BY start_date DESC",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]
