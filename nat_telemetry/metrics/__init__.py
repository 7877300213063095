"""Métricas de reglas NAT: claves, normalización, detección de cambios y publicación."""

from .change_cache import ChangeDetectionCache
from .encoders import (
    STRATEGY_FLATTENED,
    STRATEGY_STRUCTURED,
    TRACKED_FIELDS,
    Candidate,
    EntityEncoder,
    FlattenedEncoder,
    StructuredEncoder,
    build_rule_value,
    get_encoder,
)
from .keys import derive_key, get_rule_key, slugify
from .normalizer import normalize
from .publisher import MetricPublisher

__all__ = [
    "ChangeDetectionCache",
    "STRATEGY_FLATTENED",
    "STRATEGY_STRUCTURED",
    "TRACKED_FIELDS",
    "Candidate",
    "EntityEncoder",
    "FlattenedEncoder",
    "StructuredEncoder",
    "build_rule_value",
    "get_encoder",
    "derive_key",
    "get_rule_key",
    "slugify",
    "normalize",
    "MetricPublisher",
]
