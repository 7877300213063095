"""Cache de detección de cambios.

Guarda, por clave de comparación, el último valor canónico publicado.
Vive lo que vive el proceso: no expira ni se persiste.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional


class ChangeDetectionCache:
    """Mapa clave → último valor canónico enviado al bus.

    should_publish() consulta y confirma en un solo paso bajo lock, de modo
    que dos ciclos concurrentes no deciden "cambió" para la misma clave.
    Quien recibe True debe intentar el envío a continuación.
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def should_publish(self, key: str, canonical: str) -> bool:
        """True si la clave es nueva o su valor cambió; en ese caso confirma el nuevo valor."""
        with self._lock:
            if self._values.get(key) == canonical:
                self._hits += 1
                return False
            self._values[key] = canonical
            self._misses += 1
            return True

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    @property
    def stats(self) -> dict:
        with self._lock:
            checks = self._hits + self._misses
            return {
                "size": len(self._values),
                "suppressed": self._hits,
                "changed": self._misses,
                "suppression_rate": self._hits / checks if checks > 0 else 0,
            }

    def clear(self) -> None:
        """Vacía la cache (solo para tests)."""
        with self._lock:
            self._values.clear()
            self._hits = 0
            self._misses = 0
