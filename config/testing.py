import os

from .config import MQTT_CONFIG  # noqa: F401

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendflow_test"),
    "connect_timeout": 2,
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOG_LEVEL = "DEBUG"
LOG_DIR = None

SWEEP_INTERVAL_SECONDS = 60
NOTIFICATIONS = "log"
