import os

from config import env_list

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

UTC_OFFSET_HOURS = int(os.getenv("UTC_OFFSET_HOURS", "8"))

ENABLE_SCHEDULER = bool(int(os.getenv("ENABLE_SCHEDULER", "1")))
SWEEP_TIMES = env_list("SWEEP_TIMES", "19:05,20:00")

BRIDGE_ENDPOINTS = env_list("BRIDGE_ENDPOINTS", "http://localhost:5000/api/rfid/scan")
BRIDGE_TIMEOUT_SECONDS = float(os.getenv("BRIDGE_TIMEOUT_SECONDS", "10"))
SCAN_DEBOUNCE_SECONDS = float(os.getenv("SCAN_DEBOUNCE_SECONDS", "3"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
