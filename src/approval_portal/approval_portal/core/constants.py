"""Constants and defaults.

Note: Keep constants here to avoid magic strings spread across code.
"""

ALL_DEPARTMENTS = "All Departments"

# Roles allowed into the administration / recapitulation area.
RECAP_ROLES = frozenset({"admin", "hrd", "manager", "general_manager"})

MAX_BROADCAST_EMAILS = 5
BROADCAST_SETTINGS_KEY = "broadcast_emails"

DEFAULT_APP_NAME = "PrestovaPOA"
DEFAULT_QUEUE_LIMIT = 500
