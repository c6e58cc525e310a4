from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveInterval:
    """Leave granted to an employee, ``start_date``..``end_date`` inclusive."""

    leave_id: int
    employee_id: str
    start_date: date
    end_date: date
    status: LeaveStatus
    leave_type: LeaveType = LeaveType.VACATION
    reason: str = ""
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
