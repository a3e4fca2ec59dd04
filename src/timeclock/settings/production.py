import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOCK_TIMEOUT_SECONDS = int(os.getenv("LOCK_TIMEOUT_SECONDS", "10"))

MIN_UNPAID_BREAK_MINUTES = int(os.getenv("MIN_UNPAID_BREAK_MINUTES", "30"))
BREAK_BUFFER_MINUTES = int(os.getenv("BREAK_BUFFER_MINUTES", "2"))
DEFAULT_SCHEDULED_BREAK_MINUTES = int(os.getenv("DEFAULT_SCHEDULED_BREAK_MINUTES", "30"))
