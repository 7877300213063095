"""Monitoring layer - Métricas y observabilidad."""

from .stats import LogMirrorStats, PublishStats

__all__ = ["PublishStats", "LogMirrorStats"]
