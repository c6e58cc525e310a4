import os

from config import env_list

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "mysql" or "memory" (process-local, lost on restart)
STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

UTC_OFFSET_HOURS = int(os.getenv("UTC_OFFSET_HOURS", "8"))

# Forced closure of open shifts (local time, HH:MM)
ENABLE_SCHEDULER = bool(int(os.getenv("ENABLE_SCHEDULER", "1")))
SWEEP_TIMES = env_list("SWEEP_TIMES", "19:05,20:00")

# Hardware bridge
BRIDGE_ENDPOINTS = env_list("BRIDGE_ENDPOINTS", "http://localhost:5000/api/rfid/scan")
BRIDGE_TIMEOUT_SECONDS = float(os.getenv("BRIDGE_TIMEOUT_SECONDS", "10"))
SCAN_DEBOUNCE_SECONDS = float(os.getenv("SCAN_DEBOUNCE_SECONDS", "3"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
