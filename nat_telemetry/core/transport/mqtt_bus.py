"""Bus MQTT para publicación de telemetría.

Implementa IMessageBus sobre paho-mqtt. Los subjects del bus usan puntos
("nftables.data.office-pc"); en MQTT se publican como niveles de topic
("nftables/data/office-pc").
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from ..domain.bus_interface import IMessageBus
from ..domain.errors import TransportError

logger = logging.getLogger(__name__)


def subject_to_topic(subject: str) -> str:
    """Convierte un subject con puntos a topic MQTT."""
    return subject.replace(".", "/")


def _default_client_factory(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        client_id=client_id,
        protocol=mqtt.MQTTv311,
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
    )


class MQTTBus(IMessageBus):
    """Bus de publicación sobre un broker MQTT.

    Responsabilidades:
    - Conexión/desconexión al broker
    - Publicación fire-and-forget con timeout acotado
    - Reportar fallos como TransportError (sin reintentos)
    """

    def __init__(
        self,
        broker_host: str = "localhost",
        broker_port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: str = "nftables-telemetry",
        qos: int = 0,
        publish_timeout_seconds: float = 2.0,
        connect_timeout_seconds: float = 5.0,
        client_factory: Optional[Callable[[str], mqtt.Client]] = None,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.username = username
        self.password = password
        self.client_id = f"{client_id}-{int(time.time())}"
        self.qos = qos

        self._publish_timeout = publish_timeout_seconds
        self._connect_timeout = connect_timeout_seconds
        self._client_factory = client_factory or _default_client_factory
        self._client: Optional[mqtt.Client] = None
        self._connected = False

    def connect(self) -> bool:
        """Conecta al broker MQTT."""
        try:
            if self._client is None:
                self._client = self._client_factory(self.client_id)

            self._client.on_connect = self._on_connect
            self._client.on_disconnect = self._on_disconnect

            if self.username and self.password:
                self._client.username_pw_set(self.username, self.password)

            logger.info("[MQTT_BUS] Connecting to %s:%d", self.broker_host, self.broker_port)
            self._client.connect(self.broker_host, self.broker_port, keepalive=60)
            self._client.loop_start()

            # Esperar CONNACK
            deadline = time.monotonic() + self._connect_timeout
            while time.monotonic() < deadline:
                if self._connected:
                    return True
                time.sleep(0.1)

            if self._connected:
                return True
            logger.error("[MQTT_BUS] Connection timeout")
            return False

        except Exception as e:
            logger.exception("[MQTT_BUS] Connection failed: %s", e)
            return False

    def disconnect(self):
        """Desconecta del broker."""
        if self._client:
            try:
                self._client.loop_stop()
                self._client.disconnect()
            except Exception as e:
                logger.warning("[MQTT_BUS] Disconnect error: %s", e)
        self._connected = False

    def publish(self, subject: str, payload: bytes) -> None:
        """Publica un payload. Lanza TransportError si no se pudo entregar al broker."""
        if self._client is None or not self._connected:
            raise TransportError("MQTT bus not connected", subject=subject)

        topic = subject_to_topic(subject)
        try:
            info = self._client.publish(topic, payload, qos=self.qos, retain=False)
        except ValueError as e:
            raise TransportError(f"Invalid publish on {topic}: {e}", subject=subject) from e

        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(
                f"Publish failed on {topic}: rc={info.rc}",
                subject=subject,
            )

        if self._publish_timeout > 0:
            try:
                info.wait_for_publish(timeout=self._publish_timeout)
            except (RuntimeError, ValueError) as e:
                raise TransportError(f"Publish failed on {topic}: {e}", subject=subject) from e
            if not info.is_published():
                raise TransportError(
                    f"Publish timeout on {topic} after {self._publish_timeout:.1f}s",
                    subject=subject,
                )

    def is_connected(self) -> bool:
        return self._connected

    def _on_connect(self, client, userdata, flags, rc, properties=None):
        """Callback de conexión."""
        if rc == 0:
            self._connected = True
            logger.info("[MQTT_BUS] Connected to broker")
        else:
            self._connected = False
            logger.error("[MQTT_BUS] Connection failed: rc=%s", rc)

    def _on_disconnect(self, client, userdata, flags, rc, properties=None):
        """Callback de desconexión."""
        self._connected = False
        logger.warning("[MQTT_BUS] Disconnected (rc=%s)", rc)
