from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Iterable, Iterator, Optional, Sequence

from ..core.enums import EventSource
from ..core.exceptions import ConflictError, NotFoundError
from .model import AttendanceRecord
from .repository import AttendanceRepository, Transition

_Key = tuple[str, date]


def _page(items: Iterable[AttendanceRecord], limit: int, offset: int) -> tuple[Sequence[AttendanceRecord], int]:
    ordered = sorted(items, key=lambda r: (r.work_date, r.record_id), reverse=True)
    return ordered[offset : offset + limit], len(ordered)


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local store.

    Each (employee_id, work_date) key has its own lock while someone holds or waits
    on it; ``_guard`` protects the index dictionaries and the lock table.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._key_locks: dict[_Key, _KeyLock] = {}
        self._by_key: dict[_Key, AttendanceRecord] = {}
        self._keys_by_id: dict[int, _Key] = {}
        self._id = 0

    def _acquire(self, key: _Key, *, blocking: bool = True) -> bool:
        with self._guard:
            entry = self._key_locks.setdefault(key, _KeyLock())
            entry.users += 1
        if entry.lock.acquire(blocking=blocking):
            return True
        self._leave(key, entry)
        return False

    def _release(self, key: _Key) -> None:
        with self._guard:
            entry = self._key_locks[key]
        entry.lock.release()
        self._leave(key, entry)

    def _leave(self, key: _Key, entry: _KeyLock) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._key_locks[key]

    @contextmanager
    def _holding(self, key: _Key) -> Iterator[None]:
        self._acquire(key)
        try:
            yield
        finally:
            self._release(key)

    def _store(self, key: _Key, record: AttendanceRecord) -> AttendanceRecord:
        with self._guard:
            if not record.record_id:
                self._id += 1
                record = replace(record, record_id=self._id)
            self._by_key[key] = record
            self._keys_by_id[record.record_id] = key
            return record

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with self._guard:
            key = self._keys_by_id.get(int(record_id))
            return self._by_key.get(key) if key else None

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with self._guard:
            return self._by_key.get((employee_id, work_date))

    def apply(self, employee_id: str, work_date: date, transition: Transition) -> AttendanceRecord:
        key = (employee_id, work_date)
        with self._holding(key):
            with self._guard:
                current = self._by_key.get(key)
            updated = transition(current)
            if current is not None:
                updated = replace(updated, record_id=current.record_id)
            return self._store(key, replace(updated, employee_id=employee_id, work_date=work_date))

    def apply_to_record(self, record_id: int, transition: Transition) -> AttendanceRecord:
        with self._guard:
            key = self._keys_by_id.get(int(record_id))
        if key is None:
            raise NotFoundError("Attendance record not found", code="RECORD_NOT_FOUND")

        with self._holding(key):
            with self._guard:
                current = self._by_key.get(key)
            if current is None or current.record_id != int(record_id):
                raise NotFoundError("Attendance record not found", code="RECORD_NOT_FOUND")

            updated = replace(transition(current), record_id=current.record_id, employee_id=current.employee_id)
            target = (updated.employee_id, updated.work_date)
            if target == key:
                return self._store(key, updated)

            # Moving to another date: hold the target key too. A busy target is
            # reported instead of waited on so two opposite moves cannot deadlock.
            if not self._acquire(target, blocking=False):
                raise ConflictError("Another update is in progress for the target date", code="RECORD_BUSY")
            try:
                with self._guard:
                    if target in self._by_key:
                        raise ConflictError(
                            "Attendance record already exists for this employee on the target date",
                            code="DUPLICATE_RECORD",
                        )
                    del self._by_key[key]
                return self._store(target, updated)
            finally:
                self._release(target)

    def _select(self, predicate: Callable[[AttendanceRecord], bool]) -> list[AttendanceRecord]:
        with self._guard:
            return [r for r in self._by_key.values() if predicate(r)]

    def list_open(self, *, on_or_before: date) -> Sequence[AttendanceRecord]:
        items = self._select(lambda r: r.is_open and r.work_date <= on_or_before)
        return sorted(items, key=lambda r: (r.work_date, r.record_id))

    def list_records(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        def matches(r: AttendanceRecord) -> bool:
            if employee_id and r.employee_id != employee_id:
                return False
            if start_date and r.work_date < start_date:
                return False
            if end_date and r.work_date > end_date:
                return False
            return True

        return _page(self._select(matches), limit, offset)

    def list_by_source(
        self,
        source: EventSource,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        items = self._select(
            lambda r: source in (r.time_in_source, r.time_out_source)
            and (work_date is None or r.work_date == work_date)
        )
        return _page(items, limit, offset)

    def list_mixed_source(
        self,
        *,
        work_date: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        items = self._select(lambda r: r.is_mixed_source and (work_date is None or r.work_date == work_date))
        return _page(items, limit, offset)

    def delete(self, record_id: int) -> bool:
        with self._guard:
            key = self._keys_by_id.pop(int(record_id), None)
            if key is None:
                return False
            self._by_key.pop(key, None)
            return True
