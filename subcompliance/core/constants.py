"""Core constants: cache key prefixes and engine defaults.

Single source of truth for cache key structure and the numeric defaults
that Settings falls back to.
"""

# Cache key prefixes (used with :subcontractor_id)
CACHE_PREFIX_COMPLIANCE = "compliance"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Engine defaults
DEFAULT_EXPIRING_WINDOW_DAYS = 30
DEFAULT_DUE_DAYS = 14
DEFAULT_REMINDER_INTERVAL_HOURS = 72
DEFAULT_REMINDER_MAX_INTERVAL_HOURS = 336
DEFAULT_REMINDER_MAX_ATTEMPTS = 5
DEFAULT_REMINDER_BATCH_SIZE = 50

# Minimum length of a rejection reason after stripping whitespace
MIN_REJECTION_REASON_LENGTH = 10

# Minimum length of a custom document label after stripping whitespace
MIN_CUSTOM_LABEL_LENGTH = 3

# Reminder attempt from which the hard-worded template is used
HARD_REMINDER_FROM_ATTEMPT = 4

# Expiring documents at or below this many days are flagged urgent
URGENT_EXPIRY_DAYS = 7
