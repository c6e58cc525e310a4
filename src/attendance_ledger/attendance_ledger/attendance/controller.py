from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.responses import ok, rejected
from ..common.schemas import parse_iso_datetime, parse_payload
from ..container import Container
from ..core.exceptions import ValidationError
from .schemas import BulkManualIn, CorrectionIn, SweepIn


def _date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    return parse_iso_date(value) if value else None


def _int_arg(name: str, *, code: str = "INVALID_PAGINATION") -> Optional[int]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", code=code)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="attendance_manual")
    def manual_entry():
        outcome = service.submit_manual_event(request.get_json(silent=True))
        if not outcome.ok:
            r = outcome.rejection
            return rejected(r.kind, r.code, r.message)
        return ok(outcome.record.to_dict(), status=201)

    @app.route("/api/attendance/manual/bulk", methods=["POST"], endpoint="attendance_manual_bulk")
    def manual_bulk():
        body = parse_payload(BulkManualIn, request.get_json(silent=True))
        result = service.submit_bulk_manual_events(body.records)
        return ok(result.to_dict())

    @app.route("/api/attendance/<int:record_id>/correct", methods=["PATCH"], endpoint="attendance_correct")
    def correct(record_id: int):
        changes = parse_payload(CorrectionIn, request.get_json(silent=True)).to_correction()
        outcome = service.correct_record(record_id, changes)
        if not outcome.ok:
            r = outcome.rejection
            return rejected(r.kind, r.code, r.message)
        return ok(outcome.record.to_dict())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_records():
        page = service.list_records(
            start_date=_date_arg("start_date"),
            end_date=_date_arg("end_date"),
            employee_id=request.args.get("employee_id") or None,
            limit=_int_arg("limit"),
            offset=_int_arg("offset"),
        )
        return ok(page.to_dict())

    @app.route("/api/attendance/<int:record_id>", methods=["GET"], endpoint="attendance_get")
    def get_record(record_id: int):
        return ok(service.get_record(record_id).to_dict())

    @app.route("/api/attendance/<int:record_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete_record(record_id: int):
        service.delete_record(record_id)
        return ok({"id": record_id})

    @app.route("/api/attendance/source/<source>", methods=["GET"], endpoint="attendance_by_source")
    def by_source(source: str):
        page = service.list_by_source(
            source,
            work_date=_date_arg("date"),
            limit=_int_arg("limit"),
            offset=_int_arg("offset"),
        )
        return ok(page.to_dict())

    @app.route("/api/attendance/mixed", methods=["GET"], endpoint="attendance_mixed")
    def mixed_source():
        page = service.list_mixed_source(
            work_date=_date_arg("date"),
            limit=_int_arg("limit"),
            offset=_int_arg("offset"),
        )
        return ok(page.to_dict())

    @app.route("/api/attendance/sweep", methods=["POST"], endpoint="attendance_sweep")
    def sweep():
        body = parse_payload(SweepIn, request.get_json(silent=True) or {})
        result = service.run_forced_closure_sweep(parse_iso_datetime(body.trigger))
        return ok(result.to_dict())

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_daily_summary")
    def daily_summary():
        return ok(service.daily_summary(_date_arg("date")).to_dict())

    @app.route(
        "/api/attendance/summary/monthly/<employee_id>",
        methods=["GET"],
        endpoint="attendance_monthly_summary",
    )
    def monthly_summary(employee_id: str):
        year, month = _int_arg("year", code="INVALID_PERIOD"), _int_arg("month", code="INVALID_PERIOD")
        if year is None or month is None:
            raise ValidationError("year and month are required", code="INVALID_PERIOD")
        return ok(service.monthly_summary(employee_id, year, month).to_dict())
