from __future__ import annotations

import threading
from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveInterval
from .repository import LeaveRepository


class InMemoryLeaveRepository(LeaveRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, LeaveInterval] = {}
        self._id = 0

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
        with self._lock:
            self._id += 1
            self._by_id[self._id] = LeaveInterval(
                leave_id=self._id,
                employee_id=employee_id,
                start_date=start_date,
                end_date=end_date,
                status=status,
                leave_type=leave_type,
                reason=reason,
                approved_by=approved_by,
            )
            return self._id

    def delete(self, leave_id: int) -> bool:
        with self._lock:
            return self._by_id.pop(int(leave_id), None) is not None

    def get_by_id(self, leave_id: int) -> Optional[LeaveInterval]:
        return self._by_id.get(int(leave_id))

    def find_approved_covering(self, employee_id: str, day: date) -> Optional[LeaveInterval]:
        for leave in list(self._by_id.values()):
            if leave.employee_id == employee_id and leave.status == LeaveStatus.APPROVED and leave.covers(day):
                return leave
        return None

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveInterval]:
        items = [
            lv
            for lv in self._by_id.values()
            if lv.employee_id == employee_id and lv.status == LeaveStatus.APPROVED
        ]
        if start_date and end_date:
            items = [lv for lv in items if lv.start_date <= end_date and lv.end_date >= start_date]
        items.sort(key=lambda lv: lv.start_date, reverse=True)
        return items
