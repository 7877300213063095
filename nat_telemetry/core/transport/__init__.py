"""Transport layer - Publicación al broker MQTT."""

from .mqtt_bus import MQTTBus, subject_to_topic

__all__ = ["MQTTBus", "subject_to_topic"]
