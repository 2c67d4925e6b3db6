"""
Server-wide constants.

Values that are part of the public HTTP contract and therefore do not
belong in environment-driven settings.
"""

PROJECT_NAME = "EduStack API"
API_VERSION = "1.0.0"
SCHEMA_VERSION = "v1"
API_V1_STR = "/api/v1"

# Pagination defaults shared by every list endpoint
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Analytics look-back windows in days
TIMEFRAME_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_TIMEFRAME = "30d"

# Server-Sent Events
NOTIFICATION_PING_SECONDS = 15
NOTIFICATION_QUEUE_SIZE = 100
