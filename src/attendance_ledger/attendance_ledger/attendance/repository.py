from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import EventSource
from .model import AttendanceRecord

# Receives the current record for a key (None when the key is empty) and returns
# the record to store. Raising aborts the write.
Transition = Callable[[Optional[AttendanceRecord]], AttendanceRecord]


class AttendanceRepository(Protocol):
    """AttendanceRecordStore.

    ``apply`` and ``apply_to_record`` are the only write paths; both run the
    transition while holding the (employee_id, work_date) key exclusively, so
    two concurrent events for the same key are serialized.
    """

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def apply(self, employee_id: str, work_date: date, transition: Transition) -> AttendanceRecord:
        raise NotImplementedError

    def apply_to_record(self, record_id: int, transition: Transition) -> AttendanceRecord:
        """Like ``apply`` but addressed by id; the transition may move the record to another date.

        Raises NotFoundError for an unknown id and ConflictError (DUPLICATE_RECORD)
        when the target date already holds a record for the employee.
        """

        raise NotImplementedError

    def list_open(self, *, on_or_before: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        raise NotImplementedError

    def list_by_source(
        self,
        source: EventSource,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """Records where either side was captured through ``source``."""

        raise NotImplementedError

    def list_mixed_source(
        self,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError
