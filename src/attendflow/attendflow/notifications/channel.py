from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    """Fire-and-forget broadcast to connected clients. No ack, no ordering across topics."""

    def publish(self, topic: str, payload: Any) -> None:
        raise NotImplementedError


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_payload(payload: Any) -> str:
    return json.dumps(payload, default=_default, ensure_ascii=False)


class LoggingNotificationChannel:
    """Default channel when no broker is configured: writes events to the log."""

    def publish(self, topic: str, payload: Any) -> None:
        logger.info("notify %s %s", topic, encode_payload(payload))
