"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000.0
DEFAULT_RADIUS_METERS = 500
DEFAULT_OFFICE_NAME = "Office"
LEGACY_OFFICE_NAME = "Main Office"

DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_TOKEN_TTL_SECONDS = 10
DEFAULT_TOKEN_LENGTH = 8
DEFAULT_RETENTION_DAYS = 365
DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60
DEFAULT_HISTORY_LIMIT = 100

DIGITS = "0123456789"
LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Token store key of the organization-wide code; never a valid team name
GLOBAL_SCOPE_KEY = "*"

# Notification topics
TOPIC_RECORDS_UPDATED = "records_updated"
TOPIC_REFRESH_DATA = "refresh_data"
TOPIC_TOKEN_ROTATED = "token_rotated"
TOPIC_SETTINGS_UPDATED = "settings_updated"
