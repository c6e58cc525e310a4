from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveInterval


class LeaveRepository(Protocol):
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
        raise NotImplementedError

    def delete(self, leave_id: int) -> bool:
        raise NotImplementedError

    def get_by_id(self, leave_id: int) -> Optional[LeaveInterval]:
        raise NotImplementedError

    def find_approved_covering(self, employee_id: str, day: date) -> Optional[LeaveInterval]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveInterval]:
        """Approved leaves overlapping the optional window, newest first."""

        raise NotImplementedError
