"""Fachada del servicio de telemetría.

Une configuración, loggers, publicador y bus. El servicio guarda su
propio LoggerRegistry y lo reemplaza por el espejado al conectar el bus.
"""

from __future__ import annotations

from typing import Callable, Optional

from common.config import Settings, get_settings

from .core.domain.bus_interface import IMessageBus
from .core.domain.nat_rule import NftablesConfig
from .core.monitoring.stats import LogMirrorStats
from .logs.bus_mirror import enable_bus_logging
from .logs.service_logger import LoggerRegistry, create_loggers, set_log_level
from .metrics.encoders import get_encoder
from .metrics.publisher import MetricPublisher
from .monitor.ruleset import read_nftables_ruleset

RulesetParser = Callable[[str], NftablesConfig]


class TelemetryService:
    """Publica reglas NAT y logs del servicio al bus.

    Uso:
        service = TelemetryService(get_settings(), parser=parse_ruleset)
        service.attach_bus(bus)
        service.refresh()
    """

    def __init__(
        self,
        settings: Settings,
        publisher: Optional[MetricPublisher] = None,
        loggers: Optional[LoggerRegistry] = None,
        parser: Optional[RulesetParser] = None,
        ruleset_reader: Callable[..., str] = read_nftables_ruleset,
    ):
        self._settings = settings
        self._loggers = loggers or create_loggers()
        self._publisher = publisher or MetricPublisher(
            get_encoder(settings.metrics_strategy),
            module_id=settings.module_id,
            device_id=settings.device_id,
            namespace=settings.metrics_namespace,
            log=self._loggers.service,
        )
        self._parser = parser
        self._read_ruleset = ruleset_reader
        self._bus: Optional[IMessageBus] = None
        self.log_stats = LogMirrorStats()

    @property
    def loggers(self) -> LoggerRegistry:
        return self._loggers

    @property
    def publisher(self) -> MetricPublisher:
        return self._publisher

    @property
    def bus(self) -> Optional[IMessageBus]:
        return self._bus

    def attach_bus(self, bus: IMessageBus) -> None:
        """Conecta el bus una sola vez y activa el espejo de logs."""
        if self._bus is not None:
            self._loggers.service.warn("Bus already attached, ignoring")
            return

        self._bus = bus
        if self._settings.bus_logging_enabled:
            self._loggers = enable_bus_logging(
                self._loggers,
                bus,
                service_type=self._settings.service_type,
                module_id=self._settings.module_id,
                stats=self.log_stats,
            )
            self._publisher.set_logger(self._loggers.service)

        self._loggers.service.info(
            "Telemetry bus attached",
            {"strategy": self._publisher.encoder.strategy, "busLogging": self._settings.bus_logging_enabled},
        )

    def publish_config(self, config: NftablesConfig) -> int:
        """Publica un snapshot. Devuelve 0 si todavía no hay bus."""
        if self._bus is None:
            self._loggers.service.debug("No telemetry bus attached, skipping publish")
            return 0
        return self._publisher.publish_config(self._bus, config)

    def refresh(self) -> int:
        """Lee el ruleset en vivo, lo parsea y publica lo que cambió.

        Raises:
            UpstreamReadError: si la lectura de nft falla
        """
        if self._parser is None:
            raise RuntimeError("No ruleset parser configured")

        raw = self._read_ruleset(
            log=self._loggers.cmd,
            nft_binary=self._settings.nft_binary,
            timeout=self._settings.nft_timeout_seconds,
        )
        return self.publish_config(self._parser(raw))

    @property
    def stats(self) -> dict:
        return {
            "bus_attached": self._bus is not None,
            "bus_connected": self._bus.is_connected() if self._bus is not None else False,
            "publisher": self._publisher.stats.to_dict(),
            "change_cache": self._publisher.cache.stats,
            "log_mirror": self.log_stats.to_dict(),
        }


def build_service(
    settings: Optional[Settings] = None,
    parser: Optional[RulesetParser] = None,
) -> TelemetryService:
    """Crea el servicio desde la configuración y aplica el nivel de log."""
    settings = settings or get_settings()
    set_log_level(settings.log_level)
    return TelemetryService(settings, parser=parser)
