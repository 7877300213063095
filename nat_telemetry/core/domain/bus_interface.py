"""Abstract interface for the message bus.

The core only needs a publish-only capability: publish(subject, payload).
Any transport (MQTT, NATS, in-memory) can implement this interface.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple


class IMessageBus(ABC):
    """Abstract interface for the message bus.

    Implementations:
    - MQTTBus: Publishes to an MQTT broker (subject dots become topic levels)
    - InMemoryBus: Records messages (dry-run and tests)
    - NullBus: No-op
    """

    @abstractmethod
    def publish(self, subject: str, payload: bytes) -> None:
        """Publish a payload on a subject.

        Args:
            subject: Dot-separated subject (e.g. "nftables.data.office-pc")
            payload: Encoded message bytes

        Raises:
            TransportError: if the message could not be handed to the transport
        """
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if bus is connected."""
        pass


class NullBus(IMessageBus):
    """No-op bus used when telemetry publishing is disabled."""

    def publish(self, subject: str, payload: bytes) -> None:
        return None

    def is_connected(self) -> bool:
        return True


class InMemoryBus(IMessageBus):
    """Bus en memoria: guarda (subject, payload) en orden de publicación."""

    def __init__(self):
        self._messages: List[Tuple[str, bytes]] = []
        self._lock = threading.Lock()

    def publish(self, subject: str, payload: bytes) -> None:
        with self._lock:
            self._messages.append((subject, payload))

    def is_connected(self) -> bool:
        return True

    @property
    def messages(self) -> List[Tuple[str, bytes]]:
        with self._lock:
            return list(self._messages)

    def subjects(self) -> List[str]:
        return [subject for subject, _ in self.messages]

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()


@dataclass(frozen=True)
class SendResult:
    """Resultado de un envío al bus."""
    ok: bool
    subject: str
    error: Optional[BaseException] = None

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"


def try_publish(
    bus: IMessageBus,
    subject: str,
    encode: Callable[[], bytes],
) -> SendResult:
    """Codifica y envía un mensaje; cualquier fallo queda en el SendResult.

    Un único intento, sin reintentos: el timeout es responsabilidad del bus.
    """
    try:
        bus.publish(subject, encode())
        return SendResult(ok=True, subject=subject)
    except Exception as e:
        return SendResult(ok=False, subject=subject, error=e)
