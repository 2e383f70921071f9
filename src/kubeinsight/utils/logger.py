"""Logging configuration."""

import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "kubeinsight"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name or ROOT_LOGGER_NAME)

    # Only configure the package root; children propagate to it
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)

    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of every kubeinsight logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    get_logger().setLevel(level)
