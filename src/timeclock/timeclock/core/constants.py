"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 24 * 60

# Defaults applied when the organization has no attendance_policy row yet.
DEFAULT_WORK_START = "08:00"
DEFAULT_WORK_END = "16:00"
DEFAULT_GRACE_MINUTES = 15
DEFAULT_ABSENT_CUTOFF = "12:00"
DEFAULT_WEEKLY_OFF_DAYS = (5, 6)  # Friday, Saturday
DEFAULT_MAX_LATE_DAYS_BEFORE_WARNING = 3
DEFAULT_ANNUAL_LEAVE_PER_YEAR = 21
DEFAULT_SICK_LEAVE_PER_YEAR = 10

# Checkout earlier than work_end minus this window triggers a confirmation.
EARLY_CHECKOUT_WINDOW_MINUTES = 60

DEFAULT_HISTORY_LIMIT = 15
DEFAULT_REPORT_DAYS = 7
DEFAULT_REQUEST_LIST_LIMIT = 200
PENDING_REQUEST_LIST_LIMIT = 500
MAX_REPORT_DAYS = 366
DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 200
