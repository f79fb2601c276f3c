import os


class Config:
    # Database
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "attendflow")
    DB_CONNECT_TIMEOUT = int(os.environ.get("DB_CONNECT_TIMEOUT", "5"))

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    # Background cleanup of expired codes and old records
    SWEEP_INTERVAL_SECONDS = int(os.environ.get("SWEEP_INTERVAL_SECONDS", "3600"))

    # "log" or "mqtt"
    NOTIFICATIONS = os.environ.get("NOTIFICATIONS", "log").lower()
    MQTT_BROKER = os.environ.get("MQTT_BROKER", "localhost")
    MQTT_PORT = int(os.environ.get("MQTT_PORT", "1883"))
    MQTT_USERNAME = os.environ.get("MQTT_USERNAME", "")
    MQTT_PASSWORD = os.environ.get("MQTT_PASSWORD", "")
    MQTT_TOPIC_PREFIX = os.environ.get("MQTT_TOPIC_PREFIX", "attendflow")


DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
    "connect_timeout": Config.DB_CONNECT_TIMEOUT,
}

MQTT_CONFIG = {
    "broker": Config.MQTT_BROKER,
    "port": Config.MQTT_PORT,
    "username": Config.MQTT_USERNAME,
    "password": Config.MQTT_PASSWORD,
    "topic_prefix": Config.MQTT_TOPIC_PREFIX,
}

DB_CONNECT_TIMEOUT = Config.DB_CONNECT_TIMEOUT
AUTO_INIT_DB = Config.AUTO_INIT_DB
LOG_LEVEL = Config.LOG_LEVEL
LOG_DIR = Config.LOG_DIR
SWEEP_INTERVAL_SECONDS = Config.SWEEP_INTERVAL_SECONDS
NOTIFICATIONS = Config.NOTIFICATIONS
