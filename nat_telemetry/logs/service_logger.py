"""Loggers del servicio sobre logging estándar.

Cada logger expone info/warn/error/debug(msg, *values). Los valores extra
se concatenan al mensaje: strings tal cual, el resto como JSON canónico,
separados por espacios.

El umbral de nivel es global (logger padre "nftables") y se aplica a la
salida local y al espejo del bus por igual.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence, Union

import orjson

from ..core.domain.errors import EncodingError

ROOT_LOGGER_NAME = "nftables"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return orjson.dumps(value, option=orjson.OPT_SORT_KEYS, default=str).decode("utf-8")
    except TypeError as e:
        raise EncodingError(f"Cannot format log value of type {type(value).__name__}: {e}") from e


def format_message(msg: str, values: Sequence[Any]) -> str:
    """Mensaje con los valores extra inline.

    Raises:
        EncodingError: si algún valor no se puede serializar
    """
    if not values:
        return msg
    return f"{msg} {' '.join(_to_text(v) for v in values)}"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    name = level.strip().lower()
    if name in LEVELS:
        return LEVELS[name]
    resolved = logging.getLevelName(name.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def set_log_level(level: Union[str, int]) -> None:
    """Cambia el umbral global; aplica a las siguientes llamadas sin reinstalar nada."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(_resolve_level(level))


def get_log_level() -> str:
    return logging.getLevelName(logging.getLogger(ROOT_LOGGER_NAME).getEffectiveLevel())


def stdlib_logger_name(name: str) -> str:
    """Nombre del logger estándar, siempre bajo "nftables" para heredar el umbral.

    Example:
        >>> stdlib_logger_name("nftables:service")
        'nftables.service'
        >>> stdlib_logger_name("edge:cmd")
        'nftables.edge.cmd'
    """
    dotted = name.replace(":", ".")
    if dotted == ROOT_LOGGER_NAME or dotted.startswith(ROOT_LOGGER_NAME + "."):
        return dotted
    return f"{ROOT_LOGGER_NAME}.{dotted}"


class ServiceLogger:
    """Sink base: escribe al logging estándar."""

    def __init__(self, name: str, logger: logging.Logger | None = None):
        self.name = name
        self._logger = logger or logging.getLogger(stdlib_logger_name(name))

    def is_enabled_for(self, level: str) -> bool:
        return self._logger.isEnabledFor(LEVELS[level])

    def log(self, level: str, msg: str, *values: Any) -> None:
        if not self.is_enabled_for(level):
            return
        try:
            text = format_message(msg, values)
        except EncodingError:
            text = " ".join([msg, *(repr(v) for v in values)])
        self._logger.log(LEVELS[level], "%s", text)

    def debug(self, msg: str, *values: Any) -> None:
        self.log("debug", msg, *values)

    def info(self, msg: str, *values: Any) -> None:
        self.log("info", msg, *values)

    def warn(self, msg: str, *values: Any) -> None:
        self.log("warn", msg, *values)

    warning = warn

    def error(self, msg: str, *values: Any) -> None:
        self.log("error", msg, *values)


@dataclass(frozen=True)
class LoggerRegistry:
    """Loggers del servicio. El host guarda este valor y lo reemplaza al activar el bus."""
    service: ServiceLogger
    cmd: ServiceLogger
    prefix: str = ROOT_LOGGER_NAME


def create_loggers(prefix: str = ROOT_LOGGER_NAME) -> LoggerRegistry:
    return LoggerRegistry(
        service=ServiceLogger(f"{prefix}:service"),
        cmd=ServiceLogger(f"{prefix}:cmd"),
        prefix=prefix,
    )
