"""Domain layer - Modelos, mensajes y contratos."""

from .bus_interface import IMessageBus, InMemoryBus, NullBus, SendResult, try_publish
from .errors import EncodingError, TelemetryError, TransportError, UpstreamReadError
from .messages import MetricDefinition, OutboundMessage, ServiceLogEntry
from .nat_rule import NatRule, NftablesConfig
from .templates import NAT_RULE_TEMPLATE, TemplateRegistry, default_template_registry

__all__ = [
    "IMessageBus",
    "InMemoryBus",
    "NullBus",
    "SendResult",
    "try_publish",
    "TelemetryError",
    "EncodingError",
    "TransportError",
    "UpstreamReadError",
    "MetricDefinition",
    "OutboundMessage",
    "ServiceLogEntry",
    "NatRule",
    "NftablesConfig",
    "NAT_RULE_TEMPLATE",
    "TemplateRegistry",
    "default_template_registry",
]
