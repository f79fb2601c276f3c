"""Centralized logging configuration."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FILE_NAME = "attendflow.log"


def setup_logger(level: int | str = logging.INFO, log_dir: str | None = "logs") -> None:
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # 5MB x 3 backups
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME), maxBytes=5_000_000, backupCount=3
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
