"""Mensajes que se publican en el bus.

Formato de datos (PlcDataMessage):
{
    "moduleId": "nftables",
    "deviceId": "nftables",
    "variableId": "office-pc/enabled",
    "value": true,
    "timestamp": 1760000000000,
    "datatype": "boolean",
    "description": "Office PC - Enabled",
    "udtTemplate": {...}        # solo estrategia structured
}

Formato de logs (ServiceLogEntry):
{
    "timestamp": 1760000000000,
    "level": "info",
    "message": "...",
    "serviceType": "nftables",
    "moduleId": "nftables",
    "logger": "nftables:service"
}
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Literal, Optional

import orjson
from pydantic import BaseModel, ConfigDict, Field

from .errors import EncodingError

Datatype = Literal["number", "boolean", "string", "udt"]
LogLevelName = Literal["info", "warn", "error", "debug"]


def now_millis() -> int:
    """Epoch en milisegundos."""
    return int(time.time() * 1000)


def _dump(data: dict) -> bytes:
    try:
        return orjson.dumps(data)
    except TypeError as e:
        raise EncodingError(f"Cannot serialize message: {e}") from e


@dataclass(frozen=True)
class MetricDefinition:
    """Unidad de publicación de la estrategia flattened (una por campo)."""
    variable_id: str
    value: Any
    datatype: Datatype
    description: str


class OutboundMessage(BaseModel):
    """Mensaje de datos publicado en {namespace}.data.{key}."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    module_id: str = Field(..., alias="moduleId")
    device_id: str = Field(..., alias="deviceId")
    variable_id: str = Field(..., alias="variableId")
    value: Any = None
    timestamp: int = Field(default_factory=now_millis)
    datatype: Datatype
    description: str = ""
    udt_template: Optional[dict[str, Any]] = Field(default=None, alias="udtTemplate")

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        # value puede ser None legítimamente; solo se omite udtTemplate
        if data.get("udtTemplate") is None:
            data.pop("udtTemplate", None)
        return data

    def to_bytes(self) -> bytes:
        return _dump(self.to_wire())


class ServiceLogEntry(BaseModel):
    """Registro de log estructurado publicado en service.logs.{type}.{module}."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    timestamp: int = Field(default_factory=now_millis)
    level: LogLevelName
    message: str
    service_type: str = Field(..., alias="serviceType")
    module_id: str = Field(..., alias="moduleId")
    logger: str

    def to_bytes(self) -> bytes:
        return _dump(self.model_dump(by_alias=True))
