from __future__ import annotations

from conftest import MONDAY, TUESDAY, ph
from src.attendance_ledger.attendance_ledger.attendance.model import RecordCorrection
from src.attendance_ledger.attendance_ledger.core.enums import AttendanceStatus, EventSource, RecordType


def clock_in(service, employee_id="EMP-001", day="2025-03-03", at="08:00"):
    outcome = service.submit_manual_event({"employeeId": employee_id, "date": day, "time": at, "action": "timein"})
    assert outcome.ok
    return outcome.record


def test_correction_gap_too_short(service):
    record = clock_in(service)

    outcome = service.correct_record(
        record.record_id,
        RecordCorrection(time_in=ph(2025, 3, 3, 10, 0), time_out=ph(2025, 3, 3, 10, 5)),
    )

    assert outcome.rejection.kind == "conflict"
    assert outcome.rejection.code == "CORRECTION_GAP_TOO_SHORT"
    assert service.get_record(record.record_id) == record


def test_correction_recomputes_everything(service, clock):
    record = clock_in(service)
    clock.now = ph(2025, 3, 5, 9, 0)

    outcome = service.correct_record(
        record.record_id,
        RecordCorrection(time_in=ph(2025, 3, 3, 9, 0), time_out=ph(2025, 3, 3, 17, 0), notes="forgot badge"),
    )

    corrected = outcome.record
    assert corrected.late_minutes == 60
    assert corrected.status == AttendanceStatus.LATE
    assert corrected.hours_worked == 8.0
    assert corrected.overtime_minutes == 60
    assert corrected.time_in_source == EventSource.MANUAL
    assert corrected.time_out_source == EventSource.MANUAL
    assert corrected.record_type == RecordType.MANUAL
    assert corrected.recorded_by == "Admin"
    assert corrected.notes == "forgot badge"
    assert corrected.last_modified == ph(2025, 3, 5, 9, 0)


def test_correcting_scan_record_retags_sources(service):
    service.submit_scan_event("A1B2C3D4", ph(2025, 3, 3, 7, 0))
    service.submit_scan_event("A1B2C3D4", ph(2025, 3, 3, 16, 0))
    record = service.get_for_employee_and_date("EMP-001", MONDAY)

    outcome = service.correct_record(record.record_id, RecordCorrection(time_out=ph(2025, 3, 3, 16, 30)))

    corrected = outcome.record
    assert corrected.time_in == record.time_in
    assert corrected.late_minutes == record.late_minutes
    assert corrected.time_in_source == EventSource.MANUAL
    assert corrected.time_out_source == EventSource.MANUAL
    assert corrected.overtime_minutes == 30
    assert corrected.status == AttendanceStatus.COMPLETED


def test_correction_moves_record_to_another_date(service):
    record = clock_in(service, at="08:30")

    outcome = service.correct_record(record.record_id, RecordCorrection(work_date=TUESDAY))

    moved = outcome.record
    assert moved.record_id == record.record_id
    assert moved.work_date == TUESDAY
    assert moved.time_in == ph(2025, 3, 4, 8, 30)
    assert service.get_for_employee_and_date("EMP-001", MONDAY) is None
    assert service.get_for_employee_and_date("EMP-001", TUESDAY).record_id == record.record_id


def test_correction_date_move_cannot_collide(service):
    monday = clock_in(service)
    clock_in(service, day="2025-03-04")

    outcome = service.correct_record(monday.record_id, RecordCorrection(work_date=TUESDAY))

    assert outcome.rejection.code == "DUPLICATE_RECORD"
    assert service.get_record(monday.record_id).work_date == MONDAY


def test_correction_of_unknown_record(service):
    outcome = service.correct_record(404, RecordCorrection(notes="x"))

    assert outcome.rejection.kind == "not_found"


def test_empty_correction_is_invalid(service):
    record = clock_in(service)

    outcome = service.correct_record(record.record_id, RecordCorrection())

    assert outcome.rejection.kind == "validation"


def test_correction_time_out_before_time_in(service):
    record = clock_in(service, at="10:00")

    outcome = service.correct_record(record.record_id, RecordCorrection(time_out=ph(2025, 3, 3, 9, 0)))

    assert outcome.rejection.code == "TIMEOUT_BEFORE_TIMEIN"


def test_corrected_times_must_fall_on_the_record_date(service, container):
    record = clock_in(service)
    container.leave_service.assign(employee_id="EMP-001", start_date=TUESDAY, end_date=TUESDAY)

    outcome = service.correct_record(
        record.record_id,
        RecordCorrection(time_in=ph(2025, 3, 4, 8, 0), time_out=ph(2025, 3, 4, 17, 0)),
    )

    assert outcome.rejection.kind == "validation"
    assert outcome.rejection.code == "CORRECTION_DATE_MISMATCH"
    assert service.get_record(record.record_id) == record


def test_corrected_times_follow_a_date_move(service):
    record = clock_in(service)

    outcome = service.correct_record(
        record.record_id,
        RecordCorrection(work_date=TUESDAY, time_in=ph(2025, 3, 4, 8, 0), time_out=ph(2025, 3, 4, 17, 0)),
    )

    assert outcome.ok
    assert outcome.record.work_date == TUESDAY
    assert outcome.record.hours_worked == 9.0
