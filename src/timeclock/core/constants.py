"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_UNPAID_BREAK_MINUTES = 30
BREAK_BUFFER_MINUTES = 2
DEFAULT_SCHEDULED_BREAK_MINUTES = 30

AUTO_END_BREAK_NOTE = "Auto-ended on clock out"

DEFAULT_LIST_LIMIT = 200
DEFAULT_LOCK_TIMEOUT_SECONDS = 10
