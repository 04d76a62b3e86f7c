"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MINUTES_PER_DAY = 1440
DEFAULT_ADVANCE_DAYS = 14
DEFAULT_LIST_LIMIT = 200
MAX_LIST_LIMIT = 1000
