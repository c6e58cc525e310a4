from __future__ import annotations

from datetime import tzinfo
from typing import Optional

from ..common.datetime_utils import PH_TZ
from ..core.enums import EventSource
from .policies import LateOvertimeCalculator
from .strategies.base import LatenessStrategy
from .strategies.manual_strategy import ManualEntryStrategy
from .strategies.schedule_strategy import ScheduleAwareStrategy


class AttendanceStrategyFactory:
    """Factory Pattern: pick the lateness policy matching the channel that opened the record."""

    def __init__(self, calculator: Optional[LateOvertimeCalculator] = None, *, tz: tzinfo = PH_TZ):
        calculator = calculator or LateOvertimeCalculator(tz=tz)
        self._strategies: dict[EventSource, LatenessStrategy] = {
            EventSource.MANUAL: ManualEntryStrategy(calculator, tz=tz),
            EventSource.RFID: ScheduleAwareStrategy(calculator, tz=tz),
        }

    def for_source(self, source: Optional[EventSource]) -> LatenessStrategy:
        """Records with no recorded channel fall back to the manual policy."""
        return self._strategies[source or EventSource.MANUAL]
