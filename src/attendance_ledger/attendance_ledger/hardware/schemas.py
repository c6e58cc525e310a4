from __future__ import annotations

from typing import Optional

from pydantic import Field, StrictStr

from ..common.schemas import DATETIME_PATTERN, StrictPayload


class ScanIn(StrictPayload):
    # Missing / empty uid is answered with a token, not a 400.
    uid: Optional[StrictStr] = None
    device: Optional[StrictStr] = None
    timestamp: Optional[StrictStr] = Field(default=None, pattern=DATETIME_PATTERN)


class BadgeAssignIn(StrictPayload):
    employee_id: StrictStr = Field(min_length=1, alias="employeeId")
    uid: StrictStr = Field(min_length=1, alias="rfidUid")
