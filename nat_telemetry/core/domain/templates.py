"""Definiciones de plantilla (UDT) para la estrategia structured.

El descriptor se adjunta sin modificar al mensaje para que el puente
MQTT/Sparkplug B pueda crear un Template Instance.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Optional

NAT_RULE_TEMPLATE_NAME = "NatRule"

NAT_RULE_TEMPLATE: Dict[str, Any] = {
    "name": NAT_RULE_TEMPLATE_NAME,
    "version": "1.0",
    "members": [
        {"name": "enabled", "datatype": "boolean"},
        {"name": "protocol", "datatype": "string"},
        {"name": "connectingDevices", "datatype": "string"},
        {"name": "incomingInterface", "datatype": "string"},
        {"name": "outgoingInterface", "datatype": "string"},
        {"name": "natAddr", "datatype": "string"},
        {"name": "originalPort", "datatype": "string"},
        {"name": "translatedPort", "datatype": "string"},
        {"name": "deviceAddr", "datatype": "string"},
        {"name": "deviceName", "datatype": "string"},
        {"name": "doubleNat", "datatype": "boolean"},
        {"name": "doubleNatAddr", "datatype": "string"},
        {"name": "comment", "datatype": "string"},
    ],
}


class TemplateRegistry:
    """Registro de plantillas UDT por nombre."""

    def __init__(self, templates: Optional[Dict[str, Dict[str, Any]]] = None):
        self._templates: Dict[str, Dict[str, Any]] = {}
        for name, template in (templates or {}).items():
            self.register(name, template)

    def register(self, name: str, template: Dict[str, Any]) -> None:
        self._templates[name] = copy.deepcopy(template)

    def get(self, name: str) -> Dict[str, Any]:
        """Devuelve el descriptor registrado.

        Raises:
            KeyError: si la plantilla no existe
        """
        return self._templates[name]

    def __contains__(self, name: str) -> bool:
        return name in self._templates


def default_template_registry() -> TemplateRegistry:
    """Registro con las plantillas conocidas por el servicio."""
    return TemplateRegistry({NAT_RULE_TEMPLATE_NAME: NAT_RULE_TEMPLATE})
