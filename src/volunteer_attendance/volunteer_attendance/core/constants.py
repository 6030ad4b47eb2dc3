"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ACTIVITY_LIMIT = 20
MAX_ACTIVITY_LIMIT = 100
VOLUNTEER_RECENT_ATTENDANCE = 10
MIN_PASSWORD_LENGTH = 6

# One retry after a ConflictError; a human rescanning is the retry beyond that.
CONFLICT_RETRIES = 1

DEFAULT_DB_TIMEOUT_MS = 5000
DEFAULT_DB_POOL_SIZE = 5

QR_DEFAULT_BOX_SIZE = 10
QR_DEFAULT_BORDER = 1
