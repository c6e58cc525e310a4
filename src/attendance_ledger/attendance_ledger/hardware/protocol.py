"""Line contract between badge readers and the attendance backend.

Reader -> bridge: ``UID:<8 hex>`` (older firmware prints ``Card detected! UID:<hex>``)
and ``SYSTEM:READY`` once after boot.
Backend -> reader: exactly one status token per scan, ``<KIND>:<CODE>:<Detail>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.enums import Action

TOKEN_ALREADY_DONE = "INFO:ALREADY_DONE:Attendance_Complete"
TOKEN_NO_UID = "ERROR:NO_UID:Scan_Again"
TOKEN_INVALID_UID = "ERROR:INVALID_UID:Check_Card"
TOKEN_NO_ASSIGNED_UID = "ERROR:NO_ASSIGNED_UID:See_Admin"
TOKEN_ON_LEAVE = "ERROR:ON_LEAVE:See_Admin"
TOKEN_OUTSIDE_HOURS = "ERROR:OUTSIDE_HOURS:Scan_Rejected"
TOKEN_TOO_SOON = "ERROR:TOO_SOON:Wait_10_Seconds"
TOKEN_PROCESSING = "ERROR:PROCESSING:Try_Again"
# Written by the bridge itself, never by the backend.
TOKEN_SERVER_DOWN = "ERROR:SERVER_DOWN:Start_Backend"
TOKEN_CONNECTED = "SYSTEM:CONNECTED:Backend_Ready"

_UID_LINE = re.compile(r"UID:\s*([0-9A-Fa-f][0-9A-Fa-f\s]*)")

_TOKENS_BY_CODE = {
    "NO_UID": TOKEN_NO_UID,
    "INVALID_UID": TOKEN_INVALID_UID,
    "NO_ASSIGNED_UID": TOKEN_NO_ASSIGNED_UID,
    "ON_APPROVED_LEAVE": TOKEN_ON_LEAVE,
    "OUTSIDE_WORKING_HOURS": TOKEN_OUTSIDE_HOURS,
    "TIMEOUT_TOO_SOON": TOKEN_TOO_SOON,
    "TIMEOUT_ALREADY_RECORDED": TOKEN_ALREADY_DONE,
    "TIMEIN_ALREADY_RECORDED": TOKEN_ALREADY_DONE,
}


class LineKind(str, Enum):
    UID = "uid"
    READY = "ready"
    OTHER = "other"


@dataclass(frozen=True)
class DeviceLine:
    kind: LineKind
    uid: Optional[str] = None
    raw: str = ""


def parse_device_line(line: str) -> DeviceLine:
    raw = (line or "").strip()
    if raw == "SYSTEM:READY":
        return DeviceLine(kind=LineKind.READY, raw=raw)
    m = _UID_LINE.search(raw)
    if m:
        return DeviceLine(kind=LineKind.UID, uid=re.sub(r"\s", "", m.group(1)).upper(), raw=raw)
    return DeviceLine(kind=LineKind.OTHER, raw=raw)


def display_name(name: str) -> str:
    """``"Juan Dela Cruz"`` -> ``"Juan_Dela_Cruz"``."""
    return re.sub(r"\s+", "_", (name or "").strip()) or "Unknown"


def success_token(action: Action, name: str) -> str:
    if action == Action.TIME_IN:
        return f"SUCCESS:CHECKIN:{display_name(name)}:IN"
    return f"SUCCESS:CHECKOUT:{display_name(name)}:OUT"


def token_for_code(code: str) -> str:
    """Token for a rejection code; anything unmapped tells the holder to try again."""
    return _TOKENS_BY_CODE.get(code, TOKEN_PROCESSING)
