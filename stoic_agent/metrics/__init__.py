"""Metrics module."""

from .metrics_source import IMetricsSource, PsutilMetricsSource

__all__ = ["IMetricsSource", "PsutilMetricsSource"]
