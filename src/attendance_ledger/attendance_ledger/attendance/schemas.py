from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, StrictStr

from ..common.datetime_utils import parse_clock_time, parse_iso_date
from ..common.schemas import DATE_PATTERN, DATETIME_PATTERN, TIME_PATTERN, StrictPayload, parse_iso_datetime, parse_payload
from ..core.enums import Action
from .model import ManualEvent, RecordCorrection


class ManualEventIn(StrictPayload):
    employee_id: StrictStr = Field(min_length=1, alias="employeeId")
    work_date: StrictStr = Field(pattern=DATE_PATTERN, alias="date")
    clock_time: StrictStr = Field(pattern=TIME_PATTERN, alias="time")
    action: Action
    notes: StrictStr = ""

    def to_event(self) -> ManualEvent:
        return ManualEvent(
            employee_id=self.employee_id,
            work_date=parse_iso_date(self.work_date),
            clock_time=parse_clock_time(self.clock_time),
            action=self.action,
            notes=self.notes,
        )


class BulkManualIn(StrictPayload):
    # Items are validated one by one so a malformed entry only fails itself.
    records: list[Any] = Field(min_length=1)


class CorrectionIn(StrictPayload):
    time_in: Optional[StrictStr] = Field(default=None, pattern=DATETIME_PATTERN, alias="timeIn")
    time_out: Optional[StrictStr] = Field(default=None, pattern=DATETIME_PATTERN, alias="timeOut")
    work_date: Optional[StrictStr] = Field(default=None, pattern=DATE_PATTERN, alias="date")
    notes: Optional[StrictStr] = None

    def to_correction(self) -> RecordCorrection:
        return RecordCorrection(
            time_in=parse_iso_datetime(self.time_in),
            time_out=parse_iso_datetime(self.time_out),
            work_date=parse_iso_date(self.work_date) if self.work_date else None,
            notes=self.notes,
        )


class SweepIn(StrictPayload):
    trigger: Optional[StrictStr] = Field(default=None, pattern=DATETIME_PATTERN)


def parse_manual_event(payload: Any) -> ManualEvent:
    return parse_payload(ManualEventIn, payload).to_event()
