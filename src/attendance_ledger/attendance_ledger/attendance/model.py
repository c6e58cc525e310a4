from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Optional

from ..core.enums import Action, AttendanceStatus, EventSource, RecordState, RecordType


def _iso(value: date | datetime | None) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (employee_id, work_date).

    Employee fields are a snapshot taken when the record is created.
    ``record_id`` is 0 until the store assigns one.
    """

    record_id: int
    employee_id: str
    work_date: date
    employee_name: str
    department: str
    position: str
    time_in: Optional[datetime]
    status: AttendanceStatus
    date_employed: Optional[date] = None
    time_out: Optional[datetime] = None
    late_minutes: int = 0
    overtime_minutes: int = 0
    hours_worked: float = 0.0
    total_minutes: int = 0
    record_type: RecordType = RecordType.MANUAL
    time_in_source: Optional[EventSource] = None
    time_out_source: Optional[EventSource] = None
    notes: str = ""
    recorded_by: Optional[str] = None
    last_modified: Optional[datetime] = None

    @property
    def state(self) -> RecordState:
        if self.time_out is not None:
            return RecordState.COMPLETED
        return RecordState.CLOCKED_IN

    @property
    def is_open(self) -> bool:
        return self.time_in is not None and self.time_out is None

    @property
    def is_mixed_source(self) -> bool:
        return (
            self.time_in_source is not None
            and self.time_out_source is not None
            and self.time_in_source != self.time_out_source
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "department": self.department,
            "position": self.position,
            "date_employed": _iso(self.date_employed),
            "date": self.work_date.isoformat(),
            "time_in": _iso(self.time_in),
            "time_out": _iso(self.time_out),
            "status": self.status.value,
            "state": self.state.value,
            "late_minutes": self.late_minutes,
            "overtime_minutes": self.overtime_minutes,
            "hours_worked": self.hours_worked,
            "total_minutes": self.total_minutes,
            "record_type": self.record_type.value,
            "time_in_source": self.time_in_source.value if self.time_in_source else None,
            "time_out_source": self.time_out_source.value if self.time_out_source else None,
            "is_mixed_source": self.is_mixed_source,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "last_modified": _iso(self.last_modified),
        }


@dataclass(frozen=True)
class RecordCorrection:
    """Administrative changes to an existing record. ``None`` means unchanged."""

    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    work_date: Optional[date] = None
    notes: Optional[str] = None

    def is_empty(self) -> bool:
        return self.time_in is None and self.time_out is None and self.work_date is None and self.notes is None


@dataclass(frozen=True)
class ManualEvent:
    """One administrative clock-in / clock-out entry (wall-clock date + time)."""

    employee_id: str
    work_date: date
    clock_time: time
    action: Action
    notes: str = ""


@dataclass(frozen=True)
class Page:
    items: list
    total: int
    limit: int
    offset: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [r.to_dict() for r in self.items],
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
        }
