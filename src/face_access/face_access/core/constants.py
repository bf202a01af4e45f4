"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Bogotá time.
DEFAULT_ORG_UTC_OFFSET_HOURS = -5.0

# End-of-day stamp given to synthesized check-outs.
DEFAULT_AUTO_CLOSE_TIME = time(23, 59, 59)

MIN_EDIT_REASON_LENGTH = 10

DEFAULT_LAST_LOGS_LIMIT = 5
MAX_LAST_LOGS_LIMIT = 20

DEFAULT_SESSION_DAYS = 7
