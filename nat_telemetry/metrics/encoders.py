"""Codificación de reglas NAT a mensajes del bus.

Dos estrategias, excluyentes por despliegue:
- flattened: una métrica escalar por campo ("{key}/{campo}")
- structured: una instancia UDT por regla, con su plantilla adjunta
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..core.domain.messages import Datatype, MetricDefinition, OutboundMessage, now_millis
from ..core.domain.nat_rule import NatRule
from ..core.domain.templates import (
    NAT_RULE_TEMPLATE_NAME,
    TemplateRegistry,
    default_template_registry,
)
from .normalizer import normalize

STRATEGY_FLATTENED = "flattened"
STRATEGY_STRUCTURED = "structured"


@dataclass(frozen=True)
class TrackedField:
    """Campo de la regla que se publica."""
    name: str           # nombre en el wire (camelCase)
    attr: str           # atributo de NatRule
    datatype: Datatype
    label: str          # etiqueta legible para la descripción


TRACKED_FIELDS: Tuple[TrackedField, ...] = (
    TrackedField("enabled", "enabled", "boolean", "Enabled"),
    TrackedField("protocol", "protocol", "string", "Protocol"),
    TrackedField("connectingDevices", "connecting_devices", "string", "Connecting Devices"),
    TrackedField("incomingInterface", "incoming_interface", "string", "Incoming Interface"),
    TrackedField("outgoingInterface", "outgoing_interface", "string", "Outgoing Interface"),
    TrackedField("natAddr", "nat_addr", "string", "NAT Address"),
    TrackedField("originalPort", "original_port", "string", "Original Port"),
    TrackedField("translatedPort", "translated_port", "string", "Translated Port"),
    TrackedField("deviceAddr", "device_addr", "string", "Device Address"),
    TrackedField("deviceName", "device_name", "string", "Device Name"),
    TrackedField("doubleNat", "double_nat", "boolean", "Double NAT"),
    TrackedField("doubleNatAddr", "double_nat_addr", "string", "Double NAT Address"),
    TrackedField("comment", "comment", "string", "Comment"),
)


@dataclass(frozen=True)
class Candidate:
    """Mensaje candidato + clave y valor canónico para detección de cambios."""
    comparison_key: str
    canonical: str
    message: OutboundMessage


def build_rule_value(rule: NatRule) -> Dict[str, Any]:
    """Valor de instancia UDT: todos los campos seguidos, por nombre de wire."""
    return {f.name: getattr(rule, f.attr) for f in TRACKED_FIELDS}


class EntityEncoder(ABC):
    """Convierte una regla en cero o más candidatos a publicar."""

    strategy: str = ""

    @abstractmethod
    def encode(
        self,
        rule: NatRule,
        key: str,
        *,
        module_id: str,
        device_id: str,
        timestamp: Optional[int] = None,
    ) -> List[Candidate]:
        """Codifica la regla.

        Raises:
            EncodingError: si algún campo tiene un tipo no soportado
        """


class FlattenedEncoder(EntityEncoder):
    """Una métrica escalar por campo seguido; la clave de comparación es el variable-id."""

    strategy = STRATEGY_FLATTENED

    def __init__(self, fields: Tuple[TrackedField, ...] = TRACKED_FIELDS):
        self._fields = fields

    def metric_definitions(self, rule: NatRule, key: str) -> List[MetricDefinition]:
        display_name = rule.device_name or key
        return [
            MetricDefinition(
                variable_id=f"{key}/{f.name}",
                value=getattr(rule, f.attr),
                datatype=f.datatype,
                description=f"{display_name} - {f.label}",
            )
            for f in self._fields
        ]

    def encode(self, rule, key, *, module_id, device_id, timestamp=None):
        ts = timestamp if timestamp is not None else now_millis()
        candidates = []
        for metric in self.metric_definitions(rule, key):
            canonical = normalize(metric.value)
            message = OutboundMessage(
                module_id=module_id,
                device_id=device_id,
                variable_id=metric.variable_id,
                value=metric.value,
                timestamp=ts,
                datatype=metric.datatype,
                description=metric.description,
            )
            candidates.append(Candidate(metric.variable_id, canonical, message))
        return candidates


class StructuredEncoder(EntityEncoder):
    """Una instancia UDT por regla con la plantilla NatRule adjunta."""

    strategy = STRATEGY_STRUCTURED

    def __init__(
        self,
        template_registry: Optional[TemplateRegistry] = None,
        template_name: str = NAT_RULE_TEMPLATE_NAME,
    ):
        self._registry = template_registry or default_template_registry()
        self._template_name = template_name

    def encode(self, rule, key, *, module_id, device_id, timestamp=None):
        value = build_rule_value(rule)
        canonical = normalize(value)
        description = f"NAT rule: {rule.device_name}" if rule.device_name else f"NAT rule: {key}"
        message = OutboundMessage(
            module_id=module_id,
            device_id=device_id,
            variable_id=key,
            value=value,
            timestamp=timestamp if timestamp is not None else now_millis(),
            datatype="udt",
            description=description,
            udt_template=self._registry.get(self._template_name),
        )
        return [Candidate(key, canonical, message)]


def get_encoder(
    strategy: str,
    template_registry: Optional[TemplateRegistry] = None,
) -> EntityEncoder:
    """Crea el encoder para la estrategia configurada."""
    name = (strategy or "").strip().lower()
    if name == STRATEGY_FLATTENED:
        return FlattenedEncoder()
    if name == STRATEGY_STRUCTURED:
        return StructuredEncoder(template_registry)
    raise ValueError(f"Unknown metrics strategy: {strategy!r}")
