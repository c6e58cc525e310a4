from __future__ import annotations

import pytest

from conftest import MONDAY
from src.attendance_ledger.attendance_ledger.core.exceptions import ValidationError


def test_bulk_every_item_lands_in_exactly_one_list(service):
    items = [
        {"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:00", "action": "timein"},
        {"employeeId": "EMP-002", "date": "2025-03-03", "time": "08:10", "action": "timein"},
        {"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:30", "action": "timein"},
        {"employeeId": "EMP-999", "date": "2025-03-03", "time": "08:00", "action": "timein"},
        {"employeeId": "EMP-002", "date": "03/03/2025", "time": "08:00", "action": "timein"},
        {"employeeId": "EMP-002", "date": "2025-03-03", "time": "16:00"},
        "not an object",
        {"employeeId": "EMP-001", "date": "2025-03-03", "time": "16:00", "action": "timeout"},
    ]

    result = service.submit_bulk_manual_events(items)

    assert [s["index"] for s in result.successful] == [0, 1, 7]
    assert [f["index"] for f in result.failed] == [2, 3, 4, 5, 6]
    assert len(result.successful) + len(result.failed) == len(items)
    codes = {f["index"]: f["code"] for f in result.failed}
    assert codes[2] == "TIMEIN_ALREADY_RECORDED"
    assert codes[3] == "EMPLOYEE_NOT_FOUND"
    assert result.failed[0]["item"] == items[2]
    assert all(f["reason"] for f in result.failed)
    assert result.to_dict()["summary"] == {"total": 8, "successful": 3, "failed": 5}


def test_bulk_is_not_transactional(service):
    items = [
        {"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:00", "action": "timein"},
        {"employeeId": "EMP-001", "date": "2025-03-03", "time": "20:00", "action": "timeout"},
    ]

    result = service.submit_bulk_manual_events(items)

    assert len(result.successful) == 1
    assert result.failed[0]["code"] == "OUTSIDE_WORKING_HOURS"
    assert service.get_for_employee_and_date("EMP-001", MONDAY).is_open


@pytest.mark.parametrize("items", [[], None])
def test_bulk_requires_items(service, items):
    with pytest.raises(ValidationError) as exc:
        service.submit_bulk_manual_events(items)
    assert exc.value.code == "EMPTY_BATCH"
