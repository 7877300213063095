"""Logs del servicio: sink local + espejo opcional al bus."""

from .bus_mirror import BusLogMirror, enable_bus_logging, log_subject
from .service_logger import (
    LoggerRegistry,
    ServiceLogger,
    create_loggers,
    format_message,
    get_log_level,
    set_log_level,
)

__all__ = [
    "BusLogMirror",
    "enable_bus_logging",
    "log_subject",
    "LoggerRegistry",
    "ServiceLogger",
    "create_loggers",
    "format_message",
    "get_log_level",
    "set_log_level",
]
