from __future__ import annotations

import pytest

from src.attendance_ledger.attendance_ledger.core.enums import Action
from src.attendance_ledger.attendance_ledger.hardware.protocol import (
    LineKind,
    parse_device_line,
    success_token,
    token_for_code,
)


@pytest.mark.parametrize(
    "line, uid",
    [
        ("UID:A1B2C3D4", "A1B2C3D4"),
        ("uid:a1b2c3d4\r\n", None),
        ("Card detected! UID: a1 b2 c3 d4", "A1B2C3D4"),
        ("UID:a1b2c3d4", "A1B2C3D4"),
    ],
)
def test_parse_uid_lines(line, uid):
    message = parse_device_line(line)
    if uid is None:
        assert message.kind == LineKind.OTHER
    else:
        assert message.kind == LineKind.UID
        assert message.uid == uid


def test_parse_ready_and_noise():
    assert parse_device_line("SYSTEM:READY\n").kind == LineKind.READY
    assert parse_device_line("RC522 firmware v2").kind == LineKind.OTHER
    assert parse_device_line("").kind == LineKind.OTHER


def test_success_tokens_replace_whitespace():
    assert success_token(Action.TIME_IN, "Juan  Dela Cruz") == "SUCCESS:CHECKIN:Juan_Dela_Cruz:IN"
    assert success_token(Action.TIME_OUT, "Maria Santos") == "SUCCESS:CHECKOUT:Maria_Santos:OUT"


def test_rejection_tokens():
    assert token_for_code("ON_APPROVED_LEAVE") == "ERROR:ON_LEAVE:See_Admin"
    assert token_for_code("TIMEOUT_ALREADY_RECORDED") == "INFO:ALREADY_DONE:Attendance_Complete"
    assert token_for_code("SYSTEM_ERROR") == "ERROR:PROCESSING:Try_Again"
    assert token_for_code("SOMETHING_NEW") == "ERROR:PROCESSING:Try_Again"
