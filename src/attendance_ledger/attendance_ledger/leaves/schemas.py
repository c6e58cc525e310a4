from __future__ import annotations

from pydantic import Field, StrictStr

from ..common.schemas import DATE_PATTERN, StrictPayload
from ..core.enums import LeaveStatus, LeaveType


class LeaveIn(StrictPayload):
    employee_id: StrictStr = Field(min_length=1, alias="employeeId")
    start_date: StrictStr = Field(pattern=DATE_PATTERN, alias="startDate")
    end_date: StrictStr = Field(pattern=DATE_PATTERN, alias="endDate")
    leave_type: LeaveType = Field(default=LeaveType.VACATION, alias="leaveType")
    status: LeaveStatus = LeaveStatus.APPROVED
    reason: StrictStr = ""
