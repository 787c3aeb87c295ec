import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hostel_test"),
}

STORE_BACKEND = "memory"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

HOSTEL_TIMEZONE = "Asia/Kolkata"
GEOFENCE_RADIUS_METERS = 80.0
DEFAULT_COUNTRY_CODE = "+91"

ATTENDANCE_ALLOW_BYPASS = True

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"
NOTIFICATION_TIMEOUT_SECONDS = 1.0
NOTIFICATION_QUEUE_SIZE = 100

DEV_OTP_CODE = "123456"
