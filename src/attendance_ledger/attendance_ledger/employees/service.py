from __future__ import annotations

import logging

from ..common.validators import is_valid_badge_uid, normalize_badge_uid, require_non_empty
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import EmployeeScheduleView
from .repository import EmployeeDirectory

logger = logging.getLogger(__name__)


class BadgeService:
    """Use case: bind / unbind an RFID badge to an employee."""

    def __init__(self, directory: EmployeeDirectory):
        self._directory = directory

    def assign(self, *, employee_id: str, uid: str) -> EmployeeScheduleView:
        employee_id = require_non_empty(employee_id, "Employee ID")
        clean = normalize_badge_uid(require_non_empty(uid, "RFID UID"))
        if not is_valid_badge_uid(clean):
            raise ValidationError("Invalid RFID UID format", code="INVALID_UID")

        holder = self._directory.find_badge_holder(clean)
        if holder and holder.employee_id != employee_id:
            raise ConflictError(f"RFID already assigned to {holder.name}", code="BADGE_ALREADY_ASSIGNED")

        employee = self._directory.get_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

        self._directory.set_badge(employee_id, clean)
        logger.info("Badge %s assigned to %s", clean, employee_id)
        return self._directory.get_by_employee_id(employee_id)

    def remove(self, *, employee_id: str) -> str | None:
        employee = self._directory.get_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
        removed = employee.badge_uid
        self._directory.set_badge(employee_id, None)
        logger.info("Badge %s removed from %s", removed, employee_id)
        return removed
