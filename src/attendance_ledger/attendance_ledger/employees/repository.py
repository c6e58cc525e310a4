from __future__ import annotations

from typing import Optional, Protocol

from .model import EmployeeScheduleView


class EmployeeDirectory(Protocol):
    """Read side of the employee directory consumed by the attendance core.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_employee_id(self, employee_id: str) -> Optional[EmployeeScheduleView]:
        raise NotImplementedError

    def get_by_badge_uid(self, uid: str) -> Optional[EmployeeScheduleView]:
        """Only active employees are matched."""

        raise NotImplementedError

    def find_badge_holder(self, uid: str) -> Optional[EmployeeScheduleView]:
        """Any employee (active or archived) currently holding ``uid``."""

        raise NotImplementedError

    def set_badge(self, employee_id: str, uid: Optional[str]) -> bool:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError
