"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Collections in the document store
USERS = "users"
HOSTELS = "hostels"
RESIDENTS = "residents"
LEAVES = "leaves"
ATTENDANCE = "attendance"
ENTRY_EXIT_LOGS = "entry_exit_logs"
COMPLAINTS = "complaints"

TENANT_FIELD = "hostelId"

EARTH_RADIUS_METERS = 6_371_000.0
DEFAULT_GEOFENCE_RADIUS_METERS = 80.0
DEFAULT_HOSTEL_TIMEZONE = "Asia/Kolkata"
DEFAULT_COUNTRY_CODE = "+91"

DEFAULT_HISTORY_LIMIT = 50
GUARDIAN_USER_PREFIX = "guardian_"
