from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import PH_TZ, localize
from ..core.enums import AttendanceStatus, EventSource, RecordType
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository, Transition

logger = logging.getLogger(__name__)

_COLUMNS = """
    record_id, employee_id, work_date, employee_name, department, position, date_employed,
    time_in, time_out, status, late_minutes, overtime_minutes, hours_worked, total_minutes,
    record_type, time_in_source, time_out_source, notes, recorded_by, last_modified
"""

_MIXED = "time_in_source IS NOT NULL AND time_out_source IS NOT NULL AND time_in_source <> time_out_source"


def _duplicate() -> ConflictError:
    return ConflictError(
        "Attendance record already exists for this employee on this date",
        code="DUPLICATE_RECORD",
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """MySQL store.

    DATETIME columns hold local wall-clock time of the configured zone.
    Writes lock the key row with SELECT ... FOR UPDATE; the
    UNIQUE(employee_id, work_date) index catches two inserts racing on an empty key.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, tz: tzinfo = PH_TZ):
        self._conn_factory = conn_factory
        self._tz = tz

    def _wall(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return localize(value, self._tz).replace(tzinfo=None)

    def _aware(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=self._tz)

    def _to_record(self, r: Dict[str, Any]) -> AttendanceRecord:
        return AttendanceRecord(
            record_id=int(r["record_id"]),
            employee_id=str(r["employee_id"]),
            work_date=r["work_date"],
            employee_name=r.get("employee_name") or "",
            department=r.get("department") or "",
            position=r.get("position") or "",
            date_employed=r.get("date_employed"),
            time_in=self._aware(r.get("time_in")),
            time_out=self._aware(r.get("time_out")),
            status=AttendanceStatus(r["status"]),
            late_minutes=int(r.get("late_minutes") or 0),
            overtime_minutes=int(r.get("overtime_minutes") or 0),
            hours_worked=float(r.get("hours_worked") or 0),
            total_minutes=int(r.get("total_minutes") or 0),
            record_type=RecordType(r.get("record_type") or RecordType.MANUAL.value),
            time_in_source=EventSource(r["time_in_source"]) if r.get("time_in_source") else None,
            time_out_source=EventSource(r["time_out_source"]) if r.get("time_out_source") else None,
            notes=r.get("notes") or "",
            recorded_by=r.get("recorded_by"),
            last_modified=self._aware(r.get("last_modified")),
        )

    def _values(self, rec: AttendanceRecord) -> tuple:
        return (
            rec.employee_id,
            rec.work_date,
            rec.employee_name,
            rec.department,
            rec.position,
            rec.date_employed,
            self._wall(rec.time_in),
            self._wall(rec.time_out),
            rec.status.value,
            int(rec.late_minutes),
            int(rec.overtime_minutes),
            float(rec.hours_worked),
            int(rec.total_minutes),
            rec.record_type.value,
            rec.time_in_source.value if rec.time_in_source else None,
            rec.time_out_source.value if rec.time_out_source else None,
            rec.notes,
            rec.recorded_by,
            self._wall(rec.last_modified),
        )

    def _insert(self, cur, rec: AttendanceRecord) -> AttendanceRecord:
        cur.execute(
            """
            INSERT INTO attendance_records(
                employee_id, work_date, employee_name, department, position, date_employed,
                time_in, time_out, status, late_minutes, overtime_minutes, hours_worked, total_minutes,
                record_type, time_in_source, time_out_source, notes, recorded_by, last_modified
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            self._values(rec),
        )
        return replace(rec, record_id=int(cur.lastrowid))

    def _update(self, cur, record_id: int, rec: AttendanceRecord) -> AttendanceRecord:
        cur.execute(
            """
            UPDATE attendance_records
            SET employee_id=%s, work_date=%s, employee_name=%s, department=%s, position=%s, date_employed=%s,
                time_in=%s, time_out=%s, status=%s, late_minutes=%s, overtime_minutes=%s, hours_worked=%s,
                total_minutes=%s, record_type=%s, time_in_source=%s, time_out_source=%s, notes=%s,
                recorded_by=%s, last_modified=%s
            WHERE record_id=%s
            """,
            self._values(rec) + (record_id,),
        )
        return replace(rec, record_id=record_id)

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def _retry_once(self, work: Callable[[], AttendanceRecord]) -> AttendanceRecord:
        # Two writers racing on an empty key: the loser hits the unique index or an
        # InnoDB deadlock on the gap lock. The second run re-reads the winner's row.
        try:
            return work()
        except mysql.connector.IntegrityError:
            pass
        except mysql.connector.Error as e:
            if e.errno != errorcode.ER_LOCK_DEADLOCK:
                raise
        logger.info("Write race on attendance_records, retrying once")

        try:
            return work()
        except mysql.connector.IntegrityError:
            raise _duplicate()
        except mysql.connector.Error as e:
            if e.errno == errorcode.ER_LOCK_DEADLOCK:
                raise ConflictError("Another update is in progress for this record", code="RECORD_BUSY")
            raise

    def apply(self, employee_id: str, work_date: date, transition: Transition) -> AttendanceRecord:
        def work() -> AttendanceRecord:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s FOR UPDATE",
                    (employee_id, work_date),
                )
                r = fetchone(cur)
                current = self._to_record(r) if r else None
                updated = replace(transition(current), employee_id=employee_id, work_date=work_date)
                if current is None:
                    return self._insert(cur, updated)
                return self._update(cur, current.record_id, updated)

        return self._retry_once(work)

    def apply_to_record(self, record_id: int, transition: Transition) -> AttendanceRecord:
        def work() -> AttendanceRecord:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s FOR UPDATE", (int(record_id),))
                r = fetchone(cur)
                if not r:
                    raise NotFoundError("Attendance record not found", code="RECORD_NOT_FOUND")
                current = self._to_record(r)
                updated = replace(transition(current), employee_id=current.employee_id)

                if updated.work_date != current.work_date:
                    cur.execute(
                        "SELECT record_id FROM attendance_records WHERE employee_id=%s AND work_date=%s FOR UPDATE",
                        (current.employee_id, updated.work_date),
                    )
                    if fetchone(cur):
                        raise _duplicate()
                return self._update(cur, current.record_id, updated)

        return self._retry_once(work)

    def list_open(self, *, on_or_before: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE time_in IS NOT NULL AND time_out IS NULL AND work_date<=%s
                ORDER BY work_date, record_id
                """,
                (on_or_before,),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def _page(self, where: str, params: tuple, limit: int, offset: int) -> tuple[Sequence[AttendanceRecord], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", params)
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, record_id DESC
                LIMIT %s OFFSET %s
                """,
                params + (int(limit), int(offset)),
            )
            return [self._to_record(r) for r in fetchall(cur)], total

    def list_records(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        where = ["1=1"]
        params: list[Any] = []
        if employee_id:
            where.append("employee_id=%s")
            params.append(employee_id)
        if start_date:
            where.append("work_date>=%s")
            params.append(start_date)
        if end_date:
            where.append("work_date<=%s")
            params.append(end_date)
        return self._page(" AND ".join(where), tuple(params), limit, offset)

    def list_by_source(
        self,
        source: EventSource,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        where = "(time_in_source=%s OR time_out_source=%s)"
        params: tuple = (source.value, source.value)
        if work_date:
            where += " AND work_date=%s"
            params += (work_date,)
        return self._page(where, params, limit, offset)

    def list_mixed_source(
        self,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        where = _MIXED
        params: tuple = ()
        if work_date:
            where += " AND work_date=%s"
            params = (work_date,)
        return self._page(where, params, limit, offset)

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (int(record_id),))
            return cur.rowcount > 0
