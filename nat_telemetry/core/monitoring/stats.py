"""Estadísticas de publicación."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PublishStats:
    """Estadísticas del publicador de métricas."""

    cycles: int = 0
    published: int = 0
    suppressed: int = 0
    failed: int = 0
    encoding_errors: int = 0
    last_publish_at: float = 0
    started_at: datetime = field(default_factory=_utcnow)

    def __str__(self) -> str:
        return (
            f"Stats: cycles={self.cycles} published={self.published} "
            f"suppressed={self.suppressed} failed={self.failed}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "cycles": self.cycles,
            "published": self.published,
            "suppressed": self.suppressed,
            "failed": self.failed,
            "encoding_errors": self.encoding_errors,
            "last_publish_at": self.last_publish_at,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito de envíos."""
        total = self.published + self.failed
        if total == 0:
            return 1.0
        return self.published / total

    def reset(self):
        """Reinicia estadísticas."""
        self.cycles = 0
        self.published = 0
        self.suppressed = 0
        self.failed = 0
        self.encoding_errors = 0
        self.last_publish_at = 0
        self.started_at = _utcnow()


@dataclass
class LogMirrorStats:
    """Estadísticas del espejo de logs hacia el bus."""

    sent: int = 0
    failed: int = 0
    last_error: str = ""

    def to_dict(self) -> dict:
        return {
            "sent": self.sent,
            "failed": self.failed,
            "last_error": self.last_error,
        }
