import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

UTC_OFFSET_HOURS = 8

ENABLE_SCHEDULER = False
SWEEP_TIMES = ("19:05", "20:00")

BRIDGE_ENDPOINTS = ("http://localhost:5000/api/rfid/scan",)
BRIDGE_TIMEOUT_SECONDS = 10.0
SCAN_DEBOUNCE_SECONDS = 3.0

AUTO_INIT_DB = False
