from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from .model import LeaveInterval
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveConflictGuard:
    """Blocks attendance writes for days covered by an Approved leave."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def is_blocked(self, employee_id: str, day: date) -> bool:
        return self._leaves.find_approved_covering(employee_id, day) is not None

    def ensure_not_blocked(self, employee_id: str, day: date) -> None:
        leave = self._leaves.find_approved_covering(employee_id, day)
        if leave:
            raise ConflictError(
                f"Employee {employee_id} is on approved {leave.leave_type.value} leave on {day.isoformat()}",
                code="ON_APPROVED_LEAVE",
            )


class LeaveService:
    """Use case: assign / remove leave intervals (the leave-assignment action)."""

    def __init__(self, leaves: LeaveRepository, directory: EmployeeDirectory):
        self._leaves = leaves
        self._directory = directory

    def assign(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        leave_type: LeaveType = LeaveType.VACATION,
        reason: str = "",
        status: LeaveStatus = LeaveStatus.APPROVED,
        approved_by: Optional[str] = "System",
    ) -> LeaveInterval:
        employee_id = require_non_empty(employee_id, "Employee ID")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date", code="INVALID_LEAVE_RANGE")
        if not self._directory.get_by_employee_id(employee_id):
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        if status == LeaveStatus.APPROVED:
            overlapping = self._leaves.list_for_employee(employee_id, start_date=start_date, end_date=end_date)
            if overlapping:
                raise ConflictError("Leave overlaps an existing approved leave", code="LEAVE_OVERLAP")

        leave_id = self._leaves.create(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            leave_type=leave_type,
            reason=(reason or "").strip(),
            approved_by=approved_by if status == LeaveStatus.APPROVED else None,
        )
        logger.info("Leave %s assigned to %s (%s..%s)", leave_id, employee_id, start_date, end_date)
        return self._leaves.get_by_id(leave_id)

    def remove(self, *, leave_id: int) -> None:
        if not self._leaves.delete(leave_id):
            raise NotFoundError("Leave not found", code="LEAVE_NOT_FOUND")
        logger.info("Leave %s removed", leave_id)

    def list_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LeaveInterval]:
        return self._leaves.list_for_employee(employee_id, start_date=start_date, end_date=end_date)
