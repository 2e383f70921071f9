"""Shared helpers."""

from .formatting import (
    UNAVAILABLE,
    format_bytes,
    format_cpu,
    format_currency,
    format_percent,
    parse_cpu,
    parse_memory,
    safe_percent,
)
from .logger import get_logger, set_log_level

__all__ = [
    "UNAVAILABLE",
    "format_bytes",
    "format_cpu",
    "format_currency",
    "format_percent",
    "parse_cpu",
    "parse_memory",
    "safe_percent",
    "get_logger",
    "set_log_level",
]
