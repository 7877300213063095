"""Publicador de métricas de reglas NAT.

Publica cada regla (o cada campo, según estrategia) en
{namespace}.data.{key}, solo cuando su valor canónico cambió desde la
última publicación.

DECISIÓN: la cache se confirma ANTES del envío. Si el envío falla, el
valor no se reenvía hasta que vuelva a cambiar: preferimos perder un
mensaje a reenviar en bucle. No hay reintentos.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional

from prometheus_client import Counter

from ..core.domain.bus_interface import IMessageBus, try_publish
from ..core.domain.errors import EncodingError
from ..core.domain.nat_rule import NatRule, NftablesConfig
from ..core.monitoring.stats import PublishStats
from ..logs.service_logger import ServiceLogger
from .change_cache import ChangeDetectionCache
from .encoders import EntityEncoder, StructuredEncoder
from .keys import get_rule_key

logger = logging.getLogger(__name__)

NAT_METRICS_MESSAGES = Counter(
    "nftables_metrics_messages_total",
    "NAT rule metric messages handled by the publisher",
    ["status"],  # published, suppressed, failed, encoding_error
)


class MetricPublisher:
    """Orquesta clave → encoder → cache → bus para un lote de reglas.

    Uso:
        publisher = MetricPublisher(StructuredEncoder())
        sent = publisher.publish(bus, config.nat_rules)
    """

    def __init__(
        self,
        encoder: Optional[EntityEncoder] = None,
        cache: Optional[ChangeDetectionCache] = None,
        module_id: str = "nftables",
        device_id: Optional[str] = None,
        namespace: Optional[str] = None,
        log: Optional[ServiceLogger] = None,
    ):
        self._encoder = encoder or StructuredEncoder()
        self._cache = cache if cache is not None else ChangeDetectionCache()
        self._module_id = module_id
        self._device_id = device_id or module_id
        self._namespace = namespace or module_id
        self._log = log or ServiceLogger("nftables:service")
        self.stats = PublishStats()

    @property
    def cache(self) -> ChangeDetectionCache:
        return self._cache

    @property
    def encoder(self) -> EntityEncoder:
        return self._encoder

    def set_logger(self, log: ServiceLogger) -> None:
        """Reemplaza el logger (p.ej. por el espejado al bus)."""
        self._log = log

    def subject_for(self, comparison_key: str) -> str:
        return f"{self._namespace}.data.{comparison_key}"

    def publish(self, bus: IMessageBus, rules: Iterable[NatRule]) -> int:
        """Publica las reglas que cambiaron.

        Args:
            bus: Capacidad de publicación
            rules: Reglas en el orden en que se deben enviar

        Returns:
            Número de mensajes efectivamente enviados
        """
        self.stats.cycles += 1
        publish_count = 0

        for rule in rules:
            try:
                key = get_rule_key(rule)
                candidates = self._encoder.encode(
                    rule,
                    key,
                    module_id=self._module_id,
                    device_id=self._device_id,
                )
            except EncodingError as e:
                self.stats.encoding_errors += 1
                NAT_METRICS_MESSAGES.labels(status="encoding_error").inc()
                self._log.warn(f"Skipping NAT rule {rule.id}: {e}")
                continue

            for candidate in candidates:
                if not self._cache.should_publish(candidate.comparison_key, candidate.canonical):
                    self.stats.suppressed += 1
                    NAT_METRICS_MESSAGES.labels(status="suppressed").inc()
                    continue

                result = try_publish(
                    bus,
                    self.subject_for(candidate.comparison_key),
                    candidate.message.to_bytes,
                )
                if result.ok:
                    publish_count += 1
                    self.stats.published += 1
                    NAT_METRICS_MESSAGES.labels(status="published").inc()
                else:
                    self.stats.failed += 1
                    NAT_METRICS_MESSAGES.labels(status="failed").inc()
                    # Logger de módulo: el del servicio puede estar espejado al mismo bus.
                    logger.warning(
                        "[METRICS] Failed to publish %s: %s",
                        result.subject,
                        result.error_message,
                    )

        if publish_count > 0:
            self.stats.last_publish_at = time.time()
            self._log.debug(f"Published {publish_count} changed NAT rule metric(s)")

        return publish_count

    def publish_config(self, bus: IMessageBus, config: NftablesConfig) -> int:
        """Publica las reglas NAT de un snapshot de configuración."""
        return self.publish(bus, config.nat_rules)
