"""Espejo de logs hacia el bus.

Envuelve un ServiceLogger: cada llamada se escribe primero en el sink
local y después, best effort, se publica un ServiceLogEntry en
service.logs.{serviceType}.{moduleId}. Un fallo al publicar nunca llega
a quien loguea ni impide la escritura local.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Optional, Sequence

from prometheus_client import Counter

from ..core.domain.bus_interface import IMessageBus, SendResult, try_publish
from ..core.domain.messages import ServiceLogEntry
from ..core.monitoring.stats import LogMirrorStats
from .service_logger import LoggerRegistry, ServiceLogger, format_message

# Logger de módulo (no espejado): evita recursión al reportar fallos.
logger = logging.getLogger(__name__)

LOG_MIRROR_MESSAGES = Counter(
    "nftables_log_mirror_messages_total",
    "Log entries mirrored to the message bus",
    ["status"],  # sent, failed
)


def log_subject(service_type: str, module_id: str) -> str:
    return f"service.logs.{service_type}.{module_id}"


class BusLogMirror:
    """Logger con la misma superficie que ServiceLogger que además publica al bus."""

    def __init__(
        self,
        inner: ServiceLogger,
        bus: IMessageBus,
        service_type: str,
        module_id: str,
        logger_name: str,
        stats: Optional[LogMirrorStats] = None,
    ):
        self.inner = inner
        self.name = logger_name
        self._bus = bus
        self._service_type = service_type
        self._module_id = module_id
        self._subject = log_subject(service_type, module_id)
        self.stats = stats if stats is not None else LogMirrorStats()

    @property
    def subject(self) -> str:
        return self._subject

    def is_enabled_for(self, level: str) -> bool:
        return self.inner.is_enabled_for(level)

    def log(self, level: str, msg: str, *values: Any) -> None:
        self.inner.log(level, msg, *values)
        if not self.inner.is_enabled_for(level):
            return
        self._send(level, msg, values)

    def debug(self, msg: str, *values: Any) -> None:
        self.log("debug", msg, *values)

    def info(self, msg: str, *values: Any) -> None:
        self.log("info", msg, *values)

    def warn(self, msg: str, *values: Any) -> None:
        self.log("warn", msg, *values)

    warning = warn

    def error(self, msg: str, *values: Any) -> None:
        self.log("error", msg, *values)

    def _build_entry(self, level: str, msg: str, values: Sequence[Any]) -> ServiceLogEntry:
        return ServiceLogEntry(
            level=level,
            message=format_message(msg, values),
            service_type=self._service_type,
            module_id=self._module_id,
            logger=self.name,
        )

    def _send(self, level: str, msg: str, values: Sequence[Any]) -> SendResult:
        result = try_publish(
            self._bus,
            self._subject,
            lambda: self._build_entry(level, msg, values).to_bytes(),
        )
        if result.ok:
            self.stats.sent += 1
            LOG_MIRROR_MESSAGES.labels(status="sent").inc()
        else:
            self.stats.failed += 1
            self.stats.last_error = result.error_message
            LOG_MIRROR_MESSAGES.labels(status="failed").inc()
            logger.debug("[LOG_MIRROR] Publish failed on %s: %s", self._subject, result.error_message)
        return result


def enable_bus_logging(
    registry: LoggerRegistry,
    bus: IMessageBus,
    service_type: str,
    module_id: str,
    stats: Optional[LogMirrorStats] = None,
) -> LoggerRegistry:
    """Devuelve un registro nuevo cuyos loggers también publican al bus.

    El registro original no se modifica; el host reemplaza su referencia.
    Si un logger ya estaba espejado se re-envuelve su sink base.
    """
    shared_stats = stats if stats is not None else LogMirrorStats()
    wrapped = {}
    for f in fields(registry):
        if f.name == "prefix":
            continue
        current = getattr(registry, f.name)
        base = current.inner if isinstance(current, BusLogMirror) else current
        wrapped[f.name] = BusLogMirror(
            base,
            bus,
            service_type=service_type,
            module_id=module_id,
            logger_name=f"{registry.prefix}:{f.name}",
            stats=shared_stats,
        )
    return LoggerRegistry(prefix=registry.prefix, **wrapped)
