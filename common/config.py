from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env en la raíz del repo; las variables reales del entorno tienen prioridad.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    mqtt_host: str
    mqtt_port: int
    mqtt_username: Optional[str]
    mqtt_password: Optional[str]
    mqtt_client_id: str
    mqtt_publish_timeout_seconds: float

    module_id: str
    device_id: str
    service_type: str
    metrics_namespace: str
    metrics_strategy: str

    log_level: str
    bus_logging_enabled: bool

    nft_binary: str
    nft_timeout_seconds: float


def get_settings() -> Settings:
    # Carga el env file (si existe) sin pisar variables ya definidas.
    env_file = os.getenv("NFT_TELEMETRY_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    mqtt_host = os.getenv("MQTT_BROKER_HOST", "localhost")
    mqtt_port = int(os.getenv("MQTT_BROKER_PORT", "1883"))
    mqtt_username = os.getenv("MQTT_USERNAME") or None
    mqtt_password = os.getenv("MQTT_PASSWORD") or None
    mqtt_client_id = os.getenv("MQTT_CLIENT_ID", "nftables-telemetry")
    mqtt_publish_timeout_seconds = float(os.getenv("MQTT_PUBLISH_TIMEOUT_SECONDS", "2.0"))

    module_id = os.getenv("MODULE_ID", "nftables")
    device_id = os.getenv("DEVICE_ID", module_id)
    service_type = os.getenv("SERVICE_TYPE", "nftables")
    metrics_namespace = os.getenv("METRICS_NAMESPACE", module_id)

    # "structured" publica una plantilla UDT por regla; "flattened" una métrica por campo.
    metrics_strategy = os.getenv("METRICS_STRATEGY", "structured").strip().lower()

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    bus_logging_enabled = _env_bool("BUS_LOGGING_ENABLED", True)

    nft_binary = os.getenv("NFT_BINARY", "nft")
    nft_timeout_seconds = float(os.getenv("NFT_TIMEOUT_SECONDS", "10.0"))

    return Settings(
        mqtt_host=mqtt_host,
        mqtt_port=mqtt_port,
        mqtt_username=mqtt_username,
        mqtt_password=mqtt_password,
        mqtt_client_id=mqtt_client_id,
        mqtt_publish_timeout_seconds=mqtt_publish_timeout_seconds,
        module_id=module_id,
        device_id=device_id,
        service_type=service_type,
        metrics_namespace=metrics_namespace,
        metrics_strategy=metrics_strategy,
        log_level=log_level,
        bus_logging_enabled=bus_logging_enabled,
        nft_binary=nft_binary,
        nft_timeout_seconds=nft_timeout_seconds,
    )
