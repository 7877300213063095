"""CLI entry point: publica un snapshot de reglas NAT al broker MQTT."""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

import orjson

from common.config import get_settings

from .core.domain.nat_rule import NftablesConfig
from .core.transport.mqtt_bus import MQTTBus
from .service import build_service

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> NftablesConfig:
    """Carga un snapshot {"natRules": [...]} desde un archivo JSON."""
    return NftablesConfig.from_dict(orjson.loads(path.read_bytes()))


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    p = argparse.ArgumentParser(description="nftables NAT rule telemetry publisher")
    p.add_argument("snapshot", type=Path, help="JSON file with {\"natRules\": [...]}")
    p.add_argument("--interval-seconds", type=float, default=30.0)
    p.add_argument("--once", action="store_true", help="publish a single snapshot and exit")
    args = p.parse_args()

    settings = get_settings()
    service = build_service(settings)

    bus = MQTTBus(
        broker_host=settings.mqtt_host,
        broker_port=settings.mqtt_port,
        username=settings.mqtt_username,
        password=settings.mqtt_password,
        client_id=settings.mqtt_client_id,
        publish_timeout_seconds=settings.mqtt_publish_timeout_seconds,
    )
    if not bus.connect():
        raise SystemExit(f"Could not connect to MQTT broker {settings.mqtt_host}:{settings.mqtt_port}")
    service.attach_bus(bus)

    logger.info(
        "Config: strategy=%s namespace=%s interval=%.1fs",
        settings.metrics_strategy,
        settings.metrics_namespace,
        args.interval_seconds,
    )

    try:
        while True:
            try:
                sent = service.publish_config(load_snapshot(args.snapshot))
                logger.info("Ciclo completado: %d mensaje(s) enviados", sent)
            except (OSError, ValueError) as e:
                logger.error("Error leyendo snapshot: %s", e)
                if args.once:
                    raise
            if args.once:
                return
            time.sleep(args.interval_seconds)
    finally:
        bus.disconnect()


if __name__ == "__main__":
    main()
