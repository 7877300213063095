"""Serialización canónica de valores para detección de cambios."""

from __future__ import annotations

import math
from typing import Any, Mapping

import orjson

from ..core.domain.errors import EncodingError

_SCALAR_TYPES = (bool, int, float, str)


def _check_scalar(value: Any, path: str) -> None:
    # orjson escribe nan/inf como null: no se distinguirían de None.
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodingError(f"Non-finite float {value!r} at {path}")
    if value is None or isinstance(value, _SCALAR_TYPES):
        return
    raise EncodingError(f"Unsupported value kind {type(value).__name__} at {path}")


def normalize(value: Any) -> str:
    """Devuelve el texto canónico de un valor.

    Soporta escalares (None, bool, int, float, str) y mappings planos de
    escalares con claves str. Las claves se ordenan, así que dos mappings
    iguales con distinto orden de inserción producen el mismo texto.

    Raises:
        EncodingError: si el valor (o algún miembro) no es de un tipo soportado
    """
    if isinstance(value, Mapping):
        for key, member in value.items():
            if not isinstance(key, str):
                raise EncodingError(f"Unsupported mapping key {key!r}")
            _check_scalar(member, key)
        payload = dict(value)
    else:
        _check_scalar(value, "<value>")
        payload = value

    try:
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS).decode("utf-8")
    except TypeError as e:
        # p.ej. enteros fuera de rango de 64 bits
        raise EncodingError(f"Cannot normalize value: {e}") from e
