"""Modelo de dominio de reglas NAT.

Las reglas llegan ya parseadas (el parser del ruleset es externo).
Los nombres de campo en el wire son camelCase; en Python snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


def _parse_bool(value: Any, name: str) -> bool:
    """bool tal cual, o "true"/"false" en texto; cualquier otra cosa es error."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "true":
            return True
        if text == "false":
            return False
    raise ValueError(f"NAT rule field {name} must be a boolean, got {value!r}")


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class NatRule:
    """Regla NAT (port-forward) tal como la entrega el parser."""
    id: str
    enabled: bool = True
    protocol: str = "tcp"
    connecting_devices: str = "any"
    incoming_interface: str = ""
    outgoing_interface: str = ""
    nat_addr: str = ""
    original_port: str = ""
    translated_port: str = ""
    device_addr: str = ""
    device_name: Optional[str] = None
    double_nat: bool = False
    double_nat_addr: Optional[str] = None
    comment: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NatRule":
        """Construye la regla desde un dict (acepta camelCase o snake_case)."""
        def pick(wire: str, attr: str, default: Any = None) -> Any:
            if wire in data:
                return data[wire]
            return data.get(attr, default)

        rule_id = pick("id", "id")
        if rule_id is None or not str(rule_id).strip():
            raise ValueError("NAT rule requires a non-empty id")

        return cls(
            id=str(rule_id),
            enabled=_parse_bool(pick("enabled", "enabled", True), "enabled"),
            protocol=str(pick("protocol", "protocol", "tcp")),
            connecting_devices=str(pick("connectingDevices", "connecting_devices", "any")),
            incoming_interface=str(pick("incomingInterface", "incoming_interface", "")),
            outgoing_interface=str(pick("outgoingInterface", "outgoing_interface", "")),
            nat_addr=str(pick("natAddr", "nat_addr", "")),
            original_port=str(pick("originalPort", "original_port", "")),
            translated_port=str(pick("translatedPort", "translated_port", "")),
            device_addr=str(pick("deviceAddr", "device_addr", "")),
            device_name=_optional_str(pick("deviceName", "device_name")),
            double_nat=_parse_bool(pick("doubleNat", "double_nat", False), "doubleNat"),
            double_nat_addr=_optional_str(pick("doubleNatAddr", "double_nat_addr")),
            comment=pick("comment", "comment"),
        )


@dataclass(frozen=True)
class NftablesConfig:
    """Snapshot de configuración nftables relevante para telemetría."""
    nat_rules: List[NatRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NftablesConfig":
        raw_rules = data.get("natRules", data.get("nat_rules")) or []
        return cls(nat_rules=[NatRule.from_dict(r) for r in raw_rules])
