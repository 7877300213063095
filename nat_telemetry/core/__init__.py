"""Core module - Telemetría de nftables hacia el bus.

Estructura:
- domain/      → Reglas NAT, mensajes, errores y contrato del bus
- transport/   → Adaptador MQTT del bus
- monitoring/  → Estadísticas y métricas Prometheus
"""
