"""MQTT notification channel: pushes change events to subscribed dashboards."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

import paho.mqtt.client as mqtt

from .channel import encode_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MQTTConfig:
    broker: str = "localhost"
    port: int = 1883
    username: str = ""
    password: str = ""
    topic_prefix: str = "attendflow"
    keepalive: int = 60
    client_id: str = "attendflow_engine"


class MQTTNotificationChannel:
    def __init__(self, config: MQTTConfig, client: mqtt.Client | None = None):
        self.config = config
        self.client = client or mqtt.Client(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
        )
        self._connected = False
        self._lock = threading.Lock()

        if config.username:
            self.client.username_pw_set(config.username, config.password)

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code == 0:
            self._connected = True
            logger.info("Connected to MQTT broker at %s:%s", self.config.broker, self.config.port)
        else:
            logger.error("MQTT connection refused: %s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self._connected = False
        logger.warning("Disconnected from MQTT broker (reason=%s)", reason_code)

    def start(self) -> None:
        self.client.connect_async(self.config.broker, self.config.port, self.config.keepalive)
        self.client.loop_start()

    def stop(self) -> None:
        self.client.loop_stop()
        self.client.disconnect()

    def publish(self, topic: str, payload: Any) -> None:
        full_topic = f"{self.config.topic_prefix}/{topic}"
        try:
            with self._lock:
                info = self.client.publish(full_topic, encode_payload(payload), qos=0)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                logger.warning("MQTT publish to %s failed (rc=%s)", full_topic, info.rc)
        except (OSError, ValueError) as exc:
            # Notifications are best effort; the attendance write already committed.
            logger.warning("MQTT publish to %s failed: %s", full_topic, exc)
