from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import PH_TZ, combine_local, localize, now_local
from ..common.validators import is_valid_badge_uid, normalize_badge_uid, require_non_empty
from ..core.constants import ADMIN_RECORDER, DEFAULT_HISTORY_LIMIT, MAX_PAGE_LIMIT, RFID_RECORDER
from ..core.enums import Action, AttendanceStatus, EventSource
from ..core.exceptions import DomainError, NotFoundError, UnexpectedError, ValidationError
from ..employees.repository import EmployeeDirectory
from ..hardware import protocol
from .bulk import BulkOperationProcessor, BulkResult
from .model import AttendanceRecord, ManualEvent, Page, RecordCorrection
from .repository import AttendanceRepository
from .schemas import parse_manual_event
from .state_machine import AttendanceStateMachine
from .summary import DailySummary, MonthlySummary, month_bounds
from .sweep import ForcedClosureSweep, SweepResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rejection:
    kind: str
    code: str
    message: str

    @classmethod
    def from_error(cls, error: DomainError) -> "Rejection":
        return cls(kind=error.kind, code=error.code, message=error.message)

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "code": self.code, "message": self.message}


_UNEXPECTED = Rejection(kind=UnexpectedError.kind, code=UnexpectedError.default_code, message="Unexpected error, please try again")


@dataclass(frozen=True)
class Outcome:
    record: Optional[AttendanceRecord] = None
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


@dataclass(frozen=True)
class ScanOutcome:
    token: str
    action: Optional[Action] = None
    employee_id: Optional[str] = None
    name: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    late_minutes: int = 0
    overtime_minutes: int = 0
    hours_worked: float = 0.0
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.ok,
            "token": self.token,
            "action": self.action.value if self.action else None,
            "employee_id": self.employee_id,
            "name": self.name,
            "status": self.status.value if self.status else None,
            "late_minutes": self.late_minutes,
            "overtime_minutes": self.overtime_minutes,
            "hours_worked": self.hours_worked,
            "error": self.rejection.to_dict() if self.rejection else None,
        }


def _clamp(limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
    limit = DEFAULT_HISTORY_LIMIT if limit is None else int(limit)
    offset = 0 if offset is None else int(offset)
    if limit < 1 or offset < 0:
        raise ValidationError("limit must be >= 1 and offset >= 0", code="INVALID_PAGINATION")
    return min(limit, MAX_PAGE_LIMIT), offset


class AttendanceService:
    """Use cases exposed to controllers, jobs and the bridge.

    Single-event operations never raise: domain errors come back as a ``Rejection``
    and anything unexpected is logged and reported as a system rejection.
    Bulk runs report failures per item; an empty batch raises ``ValidationError``.
    Read operations raise ``DomainError`` like the rest of the services.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        directory: EmployeeDirectory,
        machine: AttendanceStateMachine,
        sweep: ForcedClosureSweep,
        *,
        tz: tzinfo = PH_TZ,
        clock: Callable[[], datetime] | None = None,
    ):
        self._records = records
        self._directory = directory
        self._machine = machine
        self._sweep = sweep
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))
        self._bulk = BulkOperationProcessor(parse_manual_event, self._apply_manual)

    def _guarded(self, operation: str, fn: Callable[[], AttendanceRecord]) -> Outcome:
        try:
            return Outcome(record=fn())
        except DomainError as e:
            logger.info("%s rejected: %s (%s)", operation, e.code, e.message)
            return Outcome(rejection=Rejection.from_error(e))
        except Exception:
            logger.exception("%s failed", operation)
            return Outcome(rejection=_UNEXPECTED)

    def _employee(self, employee_id: str):
        employee_id = require_non_empty(employee_id, "Employee ID")
        employee = self._directory.get_by_employee_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
        return employee

    # ----- badge scans -----

    def submit_scan_event(self, uid: Optional[str], instant: Optional[datetime] = None) -> ScanOutcome:
        """Process one badge read; the outcome always carries exactly one token."""

        clean = normalize_badge_uid(uid)
        if not clean:
            return self._scan_rejected(ValidationError("No UID provided", code="NO_UID"))
        if not is_valid_badge_uid(clean):
            return self._scan_rejected(ValidationError(f"Invalid UID format: {clean}", code="INVALID_UID"))

        try:
            instant = localize(instant or self._clock(), self._tz)
            employee = self._directory.get_by_badge_uid(clean)
            if not employee:
                raise NotFoundError(f"No employee assigned to UID {clean}", code="NO_ASSIGNED_UID")
            record, action = self._machine.scan(employee, instant, recorded_by=RFID_RECORDER)
        except DomainError as e:
            return self._scan_rejected(e)
        except Exception:
            logger.exception("Scan %s failed", clean)
            return ScanOutcome(token=protocol.TOKEN_PROCESSING, rejection=_UNEXPECTED)

        return ScanOutcome(
            token=protocol.success_token(action, employee.name),
            action=action,
            employee_id=employee.employee_id,
            name=employee.name,
            status=record.status,
            late_minutes=record.late_minutes,
            overtime_minutes=record.overtime_minutes,
            hours_worked=record.hours_worked,
        )

    def _scan_rejected(self, error: DomainError) -> ScanOutcome:
        logger.info("Scan rejected: %s (%s)", error.code, error.message)
        return ScanOutcome(token=protocol.token_for_code(error.code), rejection=Rejection.from_error(error))

    # ----- manual entry -----

    def _apply_manual(self, event: ManualEvent) -> AttendanceRecord:
        employee = self._employee(event.employee_id)
        instant = combine_local(event.work_date, event.clock_time, self._tz)
        if event.action == Action.TIME_IN:
            return self._machine.clock_in(
                employee,
                instant,
                EventSource.MANUAL,
                work_date=event.work_date,
                notes=event.notes,
                recorded_by=ADMIN_RECORDER,
            )
        return self._machine.clock_out(
            employee,
            instant,
            EventSource.MANUAL,
            work_date=event.work_date,
            notes=event.notes,
            recorded_by=ADMIN_RECORDER,
        )

    def submit_manual_event(self, event: ManualEvent | Mapping[str, Any]) -> Outcome:
        def run() -> AttendanceRecord:
            parsed = event if isinstance(event, ManualEvent) else parse_manual_event(event)
            return self._apply_manual(parsed)

        return self._guarded("Manual event", run)

    def submit_bulk_manual_events(self, events: Sequence[ManualEvent | Mapping[str, Any]] | None) -> BulkResult:
        """Raises ValidationError only for an empty batch."""
        return self._bulk.process(events)

    # ----- corrections / sweep -----

    def correct_record(self, record_id: int, changes: RecordCorrection) -> Outcome:
        return self._guarded(
            f"Correction of record {record_id}",
            lambda: self._machine.correct(record_id, changes, employee_lookup=self._directory.get_by_employee_id),
        )

    def run_forced_closure_sweep(self, trigger: Optional[datetime] = None) -> SweepResult:
        return self._sweep.run(trigger or self._clock())

    # ----- reads -----

    def get_record(self, record_id: int) -> AttendanceRecord:
        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found", code="RECORD_NOT_FOUND")
        return record

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._records.get_for_employee_and_date(employee_id, work_date)

    def list_records(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("end_date must be on or after start_date", code="INVALID_DATE_RANGE")
        limit, offset = _clamp(limit, offset)
        items, total = self._records.list_records(
            start_date=start_date, end_date=end_date, employee_id=employee_id, limit=limit, offset=offset
        )
        return Page(items=list(items), total=total, limit=limit, offset=offset)

    def list_by_source(
        self,
        source: EventSource | str,
        *,
        work_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        try:
            source = EventSource(source)
        except ValueError:
            raise ValidationError("Source must be 'rfid' or 'manual'", code="INVALID_SOURCE")
        limit, offset = _clamp(limit, offset)
        items, total = self._records.list_by_source(source, work_date=work_date, limit=limit, offset=offset)
        return Page(items=list(items), total=total, limit=limit, offset=offset)

    def list_mixed_source(
        self,
        *,
        work_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Page:
        limit, offset = _clamp(limit, offset)
        items, total = self._records.list_mixed_source(work_date=work_date, limit=limit, offset=offset)
        return Page(items=list(items), total=total, limit=limit, offset=offset)

    def delete_record(self, record_id: int) -> None:
        if not self._records.delete(record_id):
            raise NotFoundError("Attendance record not found", code="RECORD_NOT_FOUND")
        logger.info("Record %s deleted", record_id)

    # ----- summaries -----

    def _all_records(
        self, start_date: date, end_date: date, employee_id: Optional[str] = None
    ) -> list[AttendanceRecord]:
        records: list[AttendanceRecord] = []
        while True:
            items, total = self._records.list_records(
                start_date=start_date,
                end_date=end_date,
                employee_id=employee_id,
                limit=MAX_PAGE_LIMIT,
                offset=len(records),
            )
            records.extend(items)
            if not items or len(records) >= total:
                return records

    def daily_summary(self, day: Optional[date] = None) -> DailySummary:
        day = day or localize(self._clock(), self._tz).date()
        return DailySummary.build(day, self._all_records(day, day), self._directory.count_active())

    def monthly_summary(self, employee_id: str, year: int, month: int) -> MonthlySummary:
        employee = self._employee(employee_id)
        if not 1 <= int(month) <= 12 or not 1 <= int(year) <= 9999:
            raise ValidationError("year and month must form a valid calendar month", code="INVALID_PERIOD")
        first, last = month_bounds(int(year), int(month))
        return MonthlySummary.build(
            employee,
            int(year),
            int(month),
            today=localize(self._clock(), self._tz).date(),
            records=self._all_records(first, last, employee.employee_id),
        )
