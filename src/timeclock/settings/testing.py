import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

LOCK_TIMEOUT_SECONDS = 2

MIN_UNPAID_BREAK_MINUTES = 30
BREAK_BUFFER_MINUTES = 2
DEFAULT_SCHEDULED_BREAK_MINUTES = 30
