from __future__ import annotations

from typing import Any

from flask import jsonify

from ..core.exceptions import DomainError

HTTP_STATUS = {
    "validation": 400,
    "time_window": 400,
    "not_found": 404,
    "conflict": 409,
    "system": 500,
}


def ok(data: Any = None, *, status: int = 200, **extra: Any):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def rejected(kind: str, code: str, message: str):
    status = HTTP_STATUS.get(kind, 400)
    if status == 500:
        message = "Unexpected error, please try again"
    return jsonify({"success": False, "error": {"kind": kind, "code": code, "message": message}}), status


def error_response(error: DomainError):
    return rejected(error.kind, error.code, error.message)
