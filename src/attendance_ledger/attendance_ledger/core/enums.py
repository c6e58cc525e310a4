from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Derived status stored on an attendance record."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    COMPLETED = "Completed"
    HALF_DAY = "Half-day"
    NO_WORK = "No Work"


class RecordType(str, Enum):
    """Who last wrote the record: hardware/sweep (auto) or an administrator (manual)."""

    AUTO = "auto"
    MANUAL = "manual"


class EventSource(str, Enum):
    """Input channel of one side (time in / time out) of a record."""

    RFID = "rfid"
    MANUAL = "manual"


class Action(str, Enum):
    TIME_IN = "timein"
    TIME_OUT = "timeout"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveType(str, Enum):
    VACATION = "Vacation"
    SICK = "Sick"
    EMERGENCY = "Emergency"
    PERSONAL = "Personal"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    BEREAVEMENT = "Bereavement"
    STUDY = "Study"
    SABBATICAL = "Sabbatical"


class RecordState(str, Enum):
    """Lifecycle state of the (employee, day) key."""

    NO_RECORD = "NoRecord"
    CLOCKED_IN = "ClockedIn"
    COMPLETED = "Completed"
