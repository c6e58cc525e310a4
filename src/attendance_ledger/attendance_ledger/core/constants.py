"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_UTC_OFFSET_HOURS = 8

# Minute-of-day windows, closed-open.
WORKING_HOURS_START = 6 * 60
WORKING_HOURS_END = 19 * 60
TIME_IN_WINDOW_END = 17 * 60
TIME_OUT_WINDOW_END = 19 * 60

MANUAL_LATE_CUTOFF = (8, 0)
SCHEDULE_LATE_THRESHOLD_MINUTES = 30
HALF_DAY_HOURS = 4

CORRECTION_MIN_GAP_MINUTES = 10
MANUAL_TIMEOUT_MIN_GAP_MINUTES = 10
SCAN_TIMEOUT_MIN_GAP_SECONDS = 10

ADMIN_RECORDER = "Admin"
RFID_RECORDER = "RFID"
SWEEP_RECORDER = "system:auto-timeout"

DEFAULT_SWEEP_TIMES = ("19:05", "20:00")
DEFAULT_SCAN_DEBOUNCE_SECONDS = 3.0
DEFAULT_BRIDGE_TIMEOUT_SECONDS = 10.0
DEFAULT_HISTORY_LIMIT = 50
MAX_PAGE_LIMIT = 100
