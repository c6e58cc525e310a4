from __future__ import annotations

from conftest import ph
from src.attendance_ledger.attendance_ledger.common.datetime_utils import PH_TZ
from src.attendance_ledger.attendance_ledger.jobs import build_scheduler, run_sweep


def test_scheduler_registers_one_cron_job_per_time(service):
    scheduler = build_scheduler(service, sweep_times=("19:05", "20:00"), tz=PH_TZ)

    jobs = sorted(scheduler.get_jobs(), key=lambda j: j.id)

    assert [j.id for j in jobs] == ["forced-closure-1905", "forced-closure-2000"]
    assert all(j.max_instances == 1 for j in jobs)
    assert all(j.coalesce for j in jobs)


def test_run_sweep_uses_service_clock(service, clock):
    service.submit_manual_event({"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:00", "action": "timein"})
    clock.now = ph(2025, 3, 3, 19, 5)

    run_sweep(service)

    record = service.get_for_employee_and_date("EMP-001", clock.now.date())
    assert record.time_out == ph(2025, 3, 3, 19, 5)
