from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, Optional

from .model import EmployeeScheduleView
from .repository import EmployeeDirectory


class InMemoryEmployeeRepository(EmployeeDirectory):
    """Directory kept in a dict; used by the ``memory`` store backend and tests."""

    def __init__(self, employees: Iterable[EmployeeScheduleView] = ()):
        self._lock = threading.Lock()
        self._by_id: dict[str, EmployeeScheduleView] = {e.employee_id: e for e in employees}

    def add(self, employee: EmployeeScheduleView) -> None:
        with self._lock:
            self._by_id[employee.employee_id] = employee

    def get_by_employee_id(self, employee_id: str) -> Optional[EmployeeScheduleView]:
        return self._by_id.get(employee_id)

    def get_by_badge_uid(self, uid: str) -> Optional[EmployeeScheduleView]:
        holder = self.find_badge_holder(uid)
        return holder if holder and holder.is_active else None

    def find_badge_holder(self, uid: str) -> Optional[EmployeeScheduleView]:
        return next((e for e in self._by_id.values() if e.badge_uid == uid), None)

    def set_badge(self, employee_id: str, uid: Optional[str]) -> bool:
        with self._lock:
            current = self._by_id.get(employee_id)
            if not current:
                return False
            self._by_id[employee_id] = replace(current, badge_uid=uid)
            return True

    def count_active(self) -> int:
        return sum(1 for e in self._by_id.values() if e.is_active)
