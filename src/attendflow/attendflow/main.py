from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from .core.logger import setup_logger
from .database.bootstrap import apply_schema, list_tables
from .notifications.channel import LoggingNotificationChannel, NotificationChannel
from .notifications.mqtt_channel import MQTTConfig, MQTTNotificationChannel

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    container: Container
    mqtt: Optional[MQTTNotificationChannel] = None

    def start(self) -> None:
        if self.mqtt is not None:
            self.mqtt.start()
        self.container.sweeper.start()

    def stop(self) -> None:
        self.container.sweeper.stop()
        if self.mqtt is not None:
            self.mqtt.stop()


def _build_notifier(settings) -> tuple[NotificationChannel, Optional[MQTTNotificationChannel]]:
    kind = str(getattr(settings, "NOTIFICATIONS", "log")).lower()
    if kind == "mqtt":
        channel = MQTTNotificationChannel(MQTTConfig(**getattr(settings, "MQTT_CONFIG", {})))
        return channel, channel
    if kind != "log":
        logger.warning("Unknown NOTIFICATIONS=%r; falling back to log channel", kind)
    return LoggingNotificationChannel(), None


def create_runtime(*, start: bool = True) -> Runtime:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logger(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", "logs"))

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

    notifier, mqtt_channel = _build_notifier(settings)
    container = build_container(
        db_config=db_config,
        notifier=notifier,
        sweep_interval_seconds=getattr(settings, "SWEEP_INTERVAL_SECONDS", DEFAULT_SWEEP_INTERVAL_SECONDS),
    )

    runtime = Runtime(container=container, mqtt=mqtt_channel)
    if start:
        runtime.start()
    return runtime
