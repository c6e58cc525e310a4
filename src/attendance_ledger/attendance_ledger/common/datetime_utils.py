from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo

from ..core.constants import DEFAULT_UTC_OFFSET_HOURS
from ..core.exceptions import ValidationError

# Philippine Standard Time: fixed UTC+8, no DST.
PH_TZ = timezone(timedelta(hours=DEFAULT_UTC_OFFSET_HOURS), name="PST")

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def fixed_zone(offset_hours: int) -> tzinfo:
    if offset_hours == DEFAULT_UTC_OFFSET_HOURS:
        return PH_TZ
    return timezone(timedelta(hours=offset_hours))


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD", code="INVALID_DATE")


def parse_clock_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS."""
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value, fmt).time()
        except (TypeError, ValueError):
            continue
    raise ValidationError(f"Invalid time {value!r}, expected HH:MM or HH:MM:SS", code="INVALID_TIME")


def localize(value: datetime, tz: tzinfo = PH_TZ) -> datetime:
    """Naive datetimes are taken as wall-clock time in ``tz``; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def combine_local(day: date, clock: time, tz: tzinfo = PH_TZ) -> datetime:
    return datetime.combine(day, clock.replace(tzinfo=None)).replace(tzinfo=tz)


def minutes_of_day(instant: datetime, tz: tzinfo = PH_TZ) -> int:
    local = localize(instant, tz)
    return local.hour * 60 + local.minute


def local_date(instant: datetime, tz: tzinfo = PH_TZ) -> date:
    return localize(instant, tz).date()


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def whole_minutes(delta: timedelta) -> int:
    """Floor a duration to whole minutes (negative durations floor towards -inf)."""
    return int(delta.total_seconds() // 60)


def nearest_minutes(delta: timedelta) -> int:
    """Round a duration to the nearest minute, halves away from zero."""
    seconds = delta.total_seconds()
    minutes = int((abs(seconds) + 30) // 60)
    return minutes if seconds >= 0 else -minutes


def now_local(tz: tzinfo = PH_TZ) -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)
