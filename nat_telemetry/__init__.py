"""Telemetría de nftables: métricas de reglas NAT y logs del servicio hacia el bus.

Estructura modular:
- core/: dominio, transporte MQTT y estadísticas
- metrics/: claves, normalización, detección de cambios y publicación
- logs/: loggers del servicio y espejo al bus
- monitor/: lectura del ruleset de nftables
- service.py: fachada que une todo
"""

from .metrics.publisher import MetricPublisher
from .service import TelemetryService, build_service

__all__ = ["MetricPublisher", "TelemetryService", "build_service"]
