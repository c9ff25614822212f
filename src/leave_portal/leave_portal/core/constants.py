"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_TIMEOUT_MINUTES = 30
DEFAULT_HISTORY_LIMIT = 30

RATE_LIMIT_MAX_ATTEMPTS = 5
RATE_LIMIT_WINDOW_MINUTES = 15
RATE_LIMIT_BLOCK_MINUTES = 60

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
SANITIZED_MAX_LENGTH = 255

MIN_WORKING_HOURS = 0.5
MAX_WORKING_HOURS = 24

CURRENT_USER_KEY = "currentUser"
HOLIDAYS_KEY = "holidays"
