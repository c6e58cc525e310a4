from __future__ import annotations

import threading

from conftest import FRIDAY_BEFORE, MONDAY, ph
from src.attendance_ledger.attendance_ledger.core.enums import AttendanceStatus, RecordType


def open_manual(service, employee_id, day, at):
    outcome = service.submit_manual_event({"employeeId": employee_id, "date": day, "time": at, "action": "timein"})
    assert outcome.ok
    return outcome.record


def test_sweep_closes_open_records(service):
    today = open_manual(service, "EMP-001", "2025-03-03", "08:00")
    earlier = open_manual(service, "EMP-002", "2025-02-28", "07:30")
    service.submit_scan_event("DEADBEEF", ph(2025, 3, 3, 9, 0))
    open_manual(service, "EMP-003", "2025-03-04", "08:00")

    result = service.run_forced_closure_sweep(ph(2025, 3, 3, 19, 5))

    assert result.closed_count == 3
    assert result.failed == []
    assert not result.skipped

    closed = service.get_record(today.record_id)
    assert closed.time_out == ph(2025, 3, 3, 19, 5)
    assert closed.recorded_by == "system:auto-timeout"
    assert closed.record_type == RecordType.AUTO
    assert closed.time_out_source is None
    assert closed.overtime_minutes == 185
    assert closed.status == AttendanceStatus.COMPLETED
    assert "Automatic time out" in closed.notes

    older = service.get_record(earlier.record_id)
    assert older.work_date == FRIDAY_BEFORE
    assert older.time_out == ph(2025, 2, 28, 19, 5)

    # EMP-003 does not work Mondays; the scan-opened record keeps "No Work".
    no_work = service.get_for_employee_and_date("EMP-003", MONDAY)
    assert no_work.status == AttendanceStatus.NO_WORK

    # Future-dated records are left alone.
    assert service.get_for_employee_and_date("EMP-003", ph(2025, 3, 4).date()).is_open


def test_sweep_is_idempotent(service):
    open_manual(service, "EMP-001", "2025-03-03", "08:00")
    service.submit_manual_event({"employeeId": "EMP-002", "date": "2025-03-03", "time": "08:00", "action": "timein"})
    service.submit_manual_event({"employeeId": "EMP-002", "date": "2025-03-03", "time": "16:00", "action": "timeout"})
    completed_before = service.get_for_employee_and_date("EMP-002", MONDAY)

    first = service.run_forced_closure_sweep(ph(2025, 3, 3, 19, 5))
    snapshot = service.get_for_employee_and_date("EMP-001", MONDAY)
    second = service.run_forced_closure_sweep(ph(2025, 3, 3, 20, 0))

    assert first.closed_count == 1
    assert second.closed_count == 0
    assert service.get_for_employee_and_date("EMP-001", MONDAY) == snapshot
    assert service.get_for_employee_and_date("EMP-002", MONDAY) == completed_before


def test_sweep_ignores_leave_and_windows(service, container):
    open_manual(service, "EMP-001", "2025-03-03", "08:00")
    container.leave_service.assign(employee_id="EMP-001", start_date=MONDAY, end_date=MONDAY)

    result = service.run_forced_closure_sweep(ph(2025, 3, 3, 20, 0))

    assert result.closed_count == 1
    assert service.get_for_employee_and_date("EMP-001", MONDAY).time_out == ph(2025, 3, 3, 20, 0)


def test_sweep_logs_and_skips_failures(service):
    open_manual(service, "EMP-001", "2025-03-03", "10:00")
    open_manual(service, "EMP-002", "2025-03-03", "08:00")

    # Closing at 09:00 cannot work for the 10:00 record.
    result = service.run_forced_closure_sweep(ph(2025, 3, 3, 9, 0))

    assert result.closed_count == 1
    assert [f["code"] for f in result.failed] == ["TIMEOUT_BEFORE_TIMEIN"]
    assert service.get_for_employee_and_date("EMP-001", MONDAY).is_open


def test_overlapping_sweep_is_skipped(container, service):
    open_manual(service, "EMP-001", "2025-03-03", "08:00")

    entered = threading.Event()
    release = threading.Event()
    lookup = container.employees_repo.get_by_employee_id

    def slow_lookup(employee_id):
        entered.set()
        release.wait(5)
        return lookup(employee_id)

    container.employees_repo.get_by_employee_id = slow_lookup
    results = []
    worker = threading.Thread(target=lambda: results.append(service.run_forced_closure_sweep(ph(2025, 3, 3, 19, 5))))
    worker.start()
    assert entered.wait(5)

    overlapping = service.run_forced_closure_sweep(ph(2025, 3, 3, 19, 5))
    release.set()
    worker.join(5)

    assert overlapping.skipped
    assert overlapping.closed_count == 0
    assert results[0].closed_count == 1
