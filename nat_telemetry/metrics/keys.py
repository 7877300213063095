"""Derivación de claves estables para subjects del bus.

Convierte el nombre de dispositivo (editable por el usuario) en un
segmento de subject seguro; si no queda nada útil, usa el id de la regla.
"""

from __future__ import annotations

import re
from typing import Optional

from ..core.domain.errors import EncodingError
from ..core.domain.nat_rule import NatRule

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lowercase, runs no alfanuméricos → "-", sin guiones en los extremos.

    Example:
        >>> slugify("My Device #1")
        'my-device-1'
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def derive_key(name: Optional[str], fallback_id: str) -> str:
    """Clave de la entidad: slug del nombre, o fallback_id tal cual si queda vacío.

    Example:
        >>> derive_key("Office PC", "r1")
        'office-pc'
        >>> derive_key("!!!", "r1")
        'r1'

    Raises:
        EncodingError: si el nombre no es texto
    """
    if name is not None and not isinstance(name, str):
        raise EncodingError(f"Device name must be text, got {type(name).__name__}")
    slug = slugify(name) if name else ""
    return slug or fallback_id


def get_rule_key(rule: NatRule) -> str:
    """Clave usada en subjects y variable-ids para una regla NAT."""
    return derive_key(rule.device_name, rule.id)
