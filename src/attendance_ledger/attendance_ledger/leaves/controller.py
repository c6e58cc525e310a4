from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.responses import ok
from ..common.schemas import parse_payload
from ..common.validators import require_non_empty
from ..container import Container
from .model import LeaveInterval
from .schemas import LeaveIn


def _to_dict(leave: LeaveInterval) -> dict:
    return {
        "id": leave.leave_id,
        "employee_id": leave.employee_id,
        "start_date": leave.start_date.isoformat(),
        "end_date": leave.end_date.isoformat(),
        "status": leave.status.value,
        "leave_type": leave.leave_type.value,
        "reason": leave.reason,
        "approved_by": leave.approved_by,
    }


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leaves", methods=["POST"], endpoint="leaves_create")
    def create():
        body = parse_payload(LeaveIn, request.get_json(silent=True))
        leave = service.assign(
            employee_id=body.employee_id,
            start_date=parse_iso_date(body.start_date),
            end_date=parse_iso_date(body.end_date),
            leave_type=body.leave_type,
            reason=body.reason,
            status=body.status,
        )
        return ok(_to_dict(leave), status=201)

    @app.route("/api/leaves/<int:leave_id>", methods=["DELETE"], endpoint="leaves_delete")
    def delete(leave_id: int):
        service.remove(leave_id=leave_id)
        return ok({"id": leave_id})

    @app.route("/api/leaves", methods=["GET"], endpoint="leaves_list")
    def list_leaves():
        employee_id = require_non_empty(request.args.get("employee_id"), "employee_id")
        start = request.args.get("start_date")
        end = request.args.get("end_date")
        leaves = service.list_for_employee(
            employee_id,
            start_date=parse_iso_date(start) if start else None,
            end_date=parse_iso_date(end) if end else None,
        )
        return ok([_to_dict(lv) for lv in leaves])
