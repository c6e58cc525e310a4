from __future__ import annotations

import pytest

from src.attendance_ledger.attendance_ledger import create_app


@pytest.fixture
def client(container):
    app = create_app(container=container)
    return app.test_client()


def post_manual(client, **overrides):
    body = {"employeeId": "EMP-001", "date": "2025-03-03", "time": "09:05", "action": "timein"}
    body.update(overrides)
    return client.post("/api/attendance/manual", json=body)


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["data"] == {"status": "ok"}


def test_manual_entry_and_conflict(client):
    created = post_manual(client)
    duplicate = post_manual(client, time="09:30")

    assert created.status_code == 201
    assert created.get_json()["data"]["late_minutes"] == 65
    assert created.get_json()["data"]["status"] == "Late"
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"]["code"] == "TIMEIN_ALREADY_RECORDED"


def test_manual_entry_time_window_is_400(client):
    post_manual(client, time="08:00")

    res = post_manual(client, time="20:00", action="timeout")

    assert res.status_code == 400
    assert res.get_json()["error"]["kind"] == "time_window"


def test_malformed_payload_is_400(client):
    assert post_manual(client, time="9am").status_code == 400
    assert client.post("/api/attendance/manual", data="nope").status_code == 400


def test_scan_always_answers_with_token(client):
    ok = client.post("/api/rfid/scan", json={"uid": "A1B2C3D4", "timestamp": "2025-03-03T07:10:00+08:00"})
    missing = client.post("/api/rfid/scan", json={})

    assert ok.status_code == 200
    assert ok.get_json()["token"] == "SUCCESS:CHECKIN:Juan_Dela_Cruz:IN"
    assert ok.get_json()["data"]["late_minutes"] == 10
    assert missing.status_code == 200
    assert missing.get_json()["token"] == "ERROR:NO_UID:Scan_Again"


def test_bulk_endpoint(client):
    res = client.post(
        "/api/attendance/manual/bulk",
        json={
            "records": [
                {"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:00", "action": "timein"},
                {"employeeId": "EMP-001", "date": "2025-03-03", "time": "08:10", "action": "timein"},
            ]
        },
    )
    empty = client.post("/api/attendance/manual/bulk", json={"records": []})

    assert res.status_code == 200
    summary = res.get_json()["data"]["summary"]
    assert summary == {"total": 2, "successful": 1, "failed": 1}
    assert empty.status_code == 400


def test_correct_get_list_delete(client):
    record_id = post_manual(client, time="08:00").get_json()["data"]["id"]

    short = client.patch(
        f"/api/attendance/{record_id}/correct",
        json={"timeIn": "2025-03-03T10:00:00+08:00", "timeOut": "2025-03-03T10:05:00+08:00"},
    )
    fixed = client.patch(
        f"/api/attendance/{record_id}/correct",
        json={"timeIn": "2025-03-03T08:00:00", "timeOut": "2025-03-03T16:00:00", "notes": "approved"},
    )

    assert short.status_code == 409
    assert short.get_json()["error"]["code"] == "CORRECTION_GAP_TOO_SHORT"
    assert fixed.status_code == 200
    assert fixed.get_json()["data"]["status"] == "Completed"
    assert fixed.get_json()["data"]["hours_worked"] == 8.0

    assert client.get(f"/api/attendance/{record_id}").get_json()["data"]["recorded_by"] == "Admin"
    listing = client.get("/api/attendance?employee_id=EMP-001&start_date=2025-03-01&end_date=2025-03-31")
    assert listing.get_json()["data"]["total"] == 1
    manual = client.get("/api/attendance/source/manual?date=2025-03-03")
    assert manual.get_json()["data"]["total"] == 1
    assert client.get("/api/attendance/source/fax").status_code == 400
    assert client.get("/api/attendance/mixed").get_json()["data"]["total"] == 0

    assert client.delete(f"/api/attendance/{record_id}").status_code == 200
    assert client.get(f"/api/attendance/{record_id}").status_code == 404


def test_pagination_is_capped(client):
    res = client.get("/api/attendance?limit=500")
    assert res.get_json()["data"]["limit"] == 100
    assert client.get("/api/attendance?limit=abc").status_code == 400


def test_sweep_endpoint(client):
    post_manual(client, time="08:00")

    res = client.post("/api/attendance/sweep", json={"trigger": "2025-03-03T19:05:00+08:00"})

    assert res.status_code == 200
    assert res.get_json()["data"]["closed_count"] == 1


def test_badge_and_leave_routes(client):
    assigned = client.post("/api/rfid/assign", json={"employeeId": "EMP-002", "rfidUid": "CAFEBABE"})
    taken = client.post("/api/rfid/assign", json={"employeeId": "EMP-002", "rfidUid": "A1B2C3D4"})
    removed = client.delete("/api/rfid/assign/EMP-002")

    assert assigned.status_code == 200
    assert taken.status_code == 409
    assert removed.get_json()["data"]["removed_uid"] == "CAFEBABE"

    leave = client.post(
        "/api/leaves",
        json={"employeeId": "EMP-001", "startDate": "2025-03-03", "endDate": "2025-03-04", "leaveType": "Sick"},
    )
    assert leave.status_code == 201
    assert leave.get_json()["data"]["approved_by"] == "System"

    blocked = post_manual(client, time="08:00")
    assert blocked.status_code == 409
    assert blocked.get_json()["error"]["code"] == "ON_APPROVED_LEAVE"

    listed = client.get("/api/leaves?employee_id=EMP-001")
    assert len(listed.get_json()["data"]) == 1
    assert client.delete(f"/api/leaves/{leave.get_json()['data']['id']}").status_code == 200
    assert post_manual(client, time="08:00").status_code == 201


def test_unknown_route_stays_404(client):
    assert client.get("/api/nope").status_code == 404


def test_summary_routes(client):
    post_manual(client, time="08:00")

    daily = client.get("/api/attendance/summary?date=2025-03-03")
    monthly = client.get("/api/attendance/summary/monthly/EMP-001?year=2025&month=3")
    missing = client.get("/api/attendance/summary/monthly/EMP-001?year=2025")

    assert daily.status_code == 200
    assert daily.get_json()["data"]["summary"]["present"] == 1
    assert monthly.status_code == 200
    assert monthly.get_json()["data"]["present_days"] == 1
    assert monthly.get_json()["data"]["period"]["month_name"] == "March"
    assert missing.status_code == 400
    assert missing.get_json()["error"]["code"] == "INVALID_PERIOD"
