from __future__ import annotations

from flask import Flask, request

from ..common.responses import ok
from ..common.schemas import parse_iso_datetime, parse_payload
from ..container import Container
from .schemas import BadgeAssignIn, ScanIn


def register(app: Flask, container: Container) -> None:
    @app.route("/api/rfid/scan", methods=["POST"], endpoint="rfid_scan")
    def scan():
        # Always 200: the reader only understands the token.
        body = parse_payload(ScanIn, request.get_json(silent=True) or {})
        outcome = container.attendance_service.submit_scan_event(body.uid, parse_iso_datetime(body.timestamp))
        return ok(outcome.to_dict(), token=outcome.token)

    @app.route("/api/rfid/assign", methods=["POST"], endpoint="rfid_assign")
    def assign():
        body = parse_payload(BadgeAssignIn, request.get_json(silent=True))
        employee = container.badge_service.assign(employee_id=body.employee_id, uid=body.uid)
        return ok({"employee_id": employee.employee_id, "name": employee.name, "uid": employee.badge_uid})

    @app.route("/api/rfid/assign/<employee_id>", methods=["DELETE"], endpoint="rfid_unassign")
    def unassign(employee_id: str):
        removed = container.badge_service.remove(employee_id=employee_id)
        return ok({"employee_id": employee_id, "removed_uid": removed})
