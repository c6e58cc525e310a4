from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional

from ..common.datetime_utils import PH_TZ, combine_local, localize, now_local, whole_minutes
from ..core.constants import (
    ADMIN_RECORDER,
    CORRECTION_MIN_GAP_MINUTES,
    MANUAL_TIMEOUT_MIN_GAP_MINUTES,
    SCAN_TIMEOUT_MIN_GAP_SECONDS,
    SWEEP_RECORDER,
)
from ..core.enums import Action, AttendanceStatus, EventSource, RecordType
from ..core.exceptions import ConflictError, ValidationError
from ..employees.model import EmployeeScheduleView
from ..leaves.service import LeaveConflictGuard
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, RecordCorrection
from .policies import LateOvertimeCalculator, TimeWindowPolicy
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_MIN_TIMEOUT_GAP = {
    EventSource.MANUAL: timedelta(minutes=MANUAL_TIMEOUT_MIN_GAP_MINUTES),
    EventSource.RFID: timedelta(seconds=SCAN_TIMEOUT_MIN_GAP_SECONDS),
}


def _join_notes(*parts: Optional[str]) -> str:
    return "; ".join(p.strip() for p in parts if p and p.strip())


def _record_type(source: EventSource) -> RecordType:
    return RecordType.AUTO if source == EventSource.RFID else RecordType.MANUAL


class AttendanceStateMachine:
    """NoRecord -> ClockedIn -> Completed, one key (employee_id, work_date) at a time.

    Every transition runs inside ``AttendanceRepository.apply`` so the state it
    reads is the state it writes over. Nothing goes backwards except through
    ``correct``.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        leave_guard: LeaveConflictGuard,
        *,
        window: TimeWindowPolicy,
        calculator: LateOvertimeCalculator,
        strategy_factory: AttendanceStrategyFactory,
        tz: tzinfo = PH_TZ,
        clock: Callable[[], datetime] | None = None,
    ):
        self._records = records
        self._leave_guard = leave_guard
        self._window = window
        self._calculator = calculator
        self._factory = strategy_factory
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))

    # ----- gates -----

    def _gate(self, action: Action, instant: datetime, source: EventSource) -> None:
        # Scans only pass the general working-hours gate; manual entries also get
        # the action-specific window.
        if source == EventSource.RFID:
            self._window.check_working_hours(instant)
        elif action == Action.TIME_IN:
            self._window.check_time_in(instant)
        else:
            self._window.check_time_out(instant)

    # ----- transitions -----

    def _opened(
        self,
        employee: EmployeeScheduleView,
        work_date: date,
        instant: datetime,
        source: EventSource,
        *,
        notes: str,
        recorded_by: str,
    ) -> AttendanceRecord:
        decision = self._factory.for_source(source).decide_checkin(now=instant, today=work_date, employee=employee)
        return AttendanceRecord(
            record_id=0,
            employee_id=employee.employee_id,
            work_date=work_date,
            employee_name=employee.name,
            department=employee.department,
            position=employee.position,
            date_employed=employee.date_employed,
            time_in=instant,
            status=decision.status,
            late_minutes=decision.late_minutes,
            record_type=_record_type(source),
            time_in_source=source,
            notes=_join_notes(decision.note, notes),
            recorded_by=recorded_by,
            last_modified=self._clock(),
        )

    def _closed(
        self,
        current: AttendanceRecord,
        employee: Optional[EmployeeScheduleView],
        instant: datetime,
        source: Optional[EventSource],
        *,
        notes: Optional[str],
        recorded_by: str,
    ) -> AttendanceRecord:
        if instant <= current.time_in:
            raise ValidationError("Time out must be after time in", code="TIMEOUT_BEFORE_TIMEIN")

        strategy = self._factory.for_source(current.time_in_source)
        day = employee.day_schedule(current.work_date) if employee else None
        metrics = self._calculator.shift_metrics(current.time_in, instant, day, nearest=strategy.rounds_to_nearest)
        decision = strategy.decide_checkout(record=current, metrics=metrics, employee=employee)
        return replace(
            current,
            time_out=instant,
            status=decision.status,
            hours_worked=metrics.hours_worked,
            total_minutes=metrics.total_minutes,
            overtime_minutes=metrics.overtime_minutes,
            record_type=_record_type(source) if source else RecordType.AUTO,
            time_out_source=source,
            notes=_join_notes(current.notes, notes),
            recorded_by=recorded_by,
            last_modified=self._clock(),
        )

    def clock_in(
        self,
        employee: EmployeeScheduleView,
        instant: datetime,
        source: EventSource,
        *,
        work_date: Optional[date] = None,
        notes: str = "",
        recorded_by: str,
    ) -> AttendanceRecord:
        instant = localize(instant, self._tz)
        work_date = work_date or instant.date()
        self._gate(Action.TIME_IN, instant, source)

        def transition(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            self._leave_guard.ensure_not_blocked(employee.employee_id, work_date)
            if current is not None:
                raise ConflictError("Time in already recorded for this date", code="TIMEIN_ALREADY_RECORDED")
            return self._opened(employee, work_date, instant, source, notes=notes, recorded_by=recorded_by)

        record = self._records.apply(employee.employee_id, work_date, transition)
        logger.info("Clock-in %s %s via %s (%s)", employee.employee_id, work_date, source.value, record.status.value)
        return record

    def clock_out(
        self,
        employee: EmployeeScheduleView,
        instant: datetime,
        source: EventSource,
        *,
        work_date: Optional[date] = None,
        notes: Optional[str] = None,
        recorded_by: str,
    ) -> AttendanceRecord:
        instant = localize(instant, self._tz)
        work_date = work_date or instant.date()
        self._gate(Action.TIME_OUT, instant, source)

        def transition(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            self._leave_guard.ensure_not_blocked(employee.employee_id, work_date)
            if current is None:
                raise ConflictError("No time in record found for this date", code="NO_TIMEIN_RECORD")
            if not current.is_open:
                raise ConflictError("Time out already recorded for this date", code="TIMEOUT_ALREADY_RECORDED")
            self._ensure_gap(current, instant, source)
            return self._closed(current, employee, instant, source, notes=notes, recorded_by=recorded_by)

        record = self._records.apply(employee.employee_id, work_date, transition)
        logger.info(
            "Clock-out %s %s via %s (%s, %.2fh)",
            employee.employee_id,
            work_date,
            source.value,
            record.status.value,
            record.hours_worked,
        )
        return record

    def scan(self, employee: EmployeeScheduleView, instant: datetime, *, recorded_by: str) -> tuple[AttendanceRecord, Action]:
        """Badge scan: clock in when the day is empty, otherwise clock out."""

        instant = localize(instant, self._tz)
        work_date = instant.date()
        self._window.check_working_hours(instant)
        chosen: list[Action] = []

        def transition(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            self._leave_guard.ensure_not_blocked(employee.employee_id, work_date)
            if current is None:
                chosen.append(Action.TIME_IN)
                return self._opened(employee, work_date, instant, EventSource.RFID, notes="", recorded_by=recorded_by)
            if not current.is_open:
                raise ConflictError("Attendance already completed for this date", code="TIMEOUT_ALREADY_RECORDED")
            self._ensure_gap(current, instant, EventSource.RFID)
            chosen.append(Action.TIME_OUT)
            return self._closed(current, employee, instant, EventSource.RFID, notes=None, recorded_by=recorded_by)

        record = self._records.apply(employee.employee_id, work_date, transition)
        logger.info("Scan %s %s -> %s (%s)", employee.employee_id, work_date, chosen[-1].value, record.status.value)
        return record, chosen[-1]

    def _ensure_gap(self, current: AttendanceRecord, instant: datetime, source: EventSource) -> None:
        if instant <= current.time_in:
            raise ValidationError("Time out must be after time in", code="TIMEOUT_BEFORE_TIMEIN")
        gap = _MIN_TIMEOUT_GAP[source]
        if instant - current.time_in < gap:
            wait = int(gap.total_seconds())
            unit = f"{wait // 60} minutes" if wait >= 60 else f"{wait} seconds"
            raise ValidationError(f"Time out requires at least {unit} after time in", code="TIMEOUT_TOO_SOON")

    def correct(
        self,
        record_id: int,
        changes: RecordCorrection,
        *,
        employee_lookup: Callable[[str], Optional[EmployeeScheduleView]],
    ) -> AttendanceRecord:
        """Administrative correction. Every side present afterwards is tagged manual."""

        if changes.is_empty():
            raise ValidationError("No changes supplied", code="NO_CHANGES")

        new_in = localize(changes.time_in, self._tz) if changes.time_in else None
        new_out = localize(changes.time_out, self._tz) if changes.time_out else None
        if new_in and new_out and whole_minutes(new_out - new_in) < CORRECTION_MIN_GAP_MINUTES:
            raise ConflictError(
                f"Time out must be at least {CORRECTION_MIN_GAP_MINUTES} minutes after time in",
                code="CORRECTION_GAP_TOO_SHORT",
            )

        manual = self._factory.for_source(EventSource.MANUAL)

        def transition(current: AttendanceRecord) -> AttendanceRecord:
            target_date = changes.work_date or current.work_date
            self._leave_guard.ensure_not_blocked(current.employee_id, current.work_date)
            if target_date != current.work_date:
                self._leave_guard.ensure_not_blocked(current.employee_id, target_date)
            for value in (new_in, new_out):
                if value is not None and value.date() != target_date:
                    raise ValidationError(
                        f"Corrected times must fall on {target_date.isoformat()}",
                        code="CORRECTION_DATE_MISMATCH",
                    )

            def moved(value: Optional[datetime]) -> Optional[datetime]:
                if value is None or target_date == current.work_date:
                    return value
                local = localize(value, self._tz)
                return combine_local(target_date, local.time(), self._tz)

            time_in = new_in or moved(current.time_in)
            time_out = new_out or moved(current.time_out)
            if time_out is not None and time_in is None:
                raise ValidationError("Time out cannot be set without a time in", code="NO_TIMEIN_RECORD")
            if time_in is not None and time_out is not None and time_out <= time_in:
                raise ValidationError("Time out must be after time in", code="TIMEOUT_BEFORE_TIMEIN")

            updated = replace(
                current,
                work_date=target_date,
                time_in=time_in,
                time_out=time_out,
                time_in_source=EventSource.MANUAL if time_in else None,
                time_out_source=EventSource.MANUAL if time_out else None,
                record_type=RecordType.MANUAL,
                recorded_by=ADMIN_RECORDER,
                notes=changes.notes.strip() if changes.notes is not None else current.notes,
                last_modified=self._clock(),
            )

            if time_in is not None and time_in != current.time_in:
                decision = manual.decide_checkin(now=time_in, today=target_date, employee=None)
                updated = replace(updated, late_minutes=decision.late_minutes, status=decision.status)

            if time_in is not None and time_out is not None:
                employee = employee_lookup(current.employee_id)
                day = employee.day_schedule(target_date) if employee else None
                metrics = self._calculator.shift_metrics(time_in, time_out, day)
                decision = manual.decide_checkout(record=updated, metrics=metrics, employee=employee)
                updated = replace(
                    updated,
                    status=decision.status,
                    hours_worked=metrics.hours_worked,
                    total_minutes=metrics.total_minutes,
                    overtime_minutes=metrics.overtime_minutes,
                )
            else:
                updated = replace(updated, hours_worked=0.0, total_minutes=0, overtime_minutes=0)
            return updated

        record = self._records.apply_to_record(record_id, transition)
        logger.info("Record %s corrected (%s %s)", record_id, record.employee_id, record.work_date)
        return record

    def force_close(
        self,
        record: AttendanceRecord,
        closed_at: datetime,
        employee: Optional[EmployeeScheduleView],
    ) -> AttendanceRecord:
        """Close an open record for the sweep. Time windows and leave do not apply."""

        closed_at = localize(closed_at, self._tz)

        def transition(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            if current is None or current.record_id != record.record_id or not current.is_open:
                raise ConflictError("Record is no longer open", code="ALREADY_CLOSED")
            return self._closed(
                current,
                employee,
                closed_at,
                None,
                notes="Automatic time out",
                recorded_by=SWEEP_RECORDER,
            )

        return self._records.apply(record.employee_id, record.work_date, transition)
