"""Errores del núcleo de telemetría.

- EncodingError: valor de tipo no soportado al normalizar (local a una regla).
- TransportError: fallo del bus al enviar (siempre recuperable por el núcleo).
- UpstreamReadError: fallo leyendo el ruleset de nftables (se propaga).
"""

from __future__ import annotations

from typing import Optional


class TelemetryError(Exception):
    """Base de los errores de telemetría."""


class EncodingError(TelemetryError):
    """Un valor de tipo no soportado llegó al normalizador."""


class TransportError(TelemetryError):
    """El bus no pudo enviar el mensaje (desconectado, timeout, rc != 0)."""

    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(message)
        self.subject = subject


class UpstreamReadError(TelemetryError):
    """La lectura del ruleset (nft list ruleset) falló."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
