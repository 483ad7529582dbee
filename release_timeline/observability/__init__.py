"""Observability layer - logging and metrics."""

from release_timeline.observability.logging import setup_logging
from release_timeline.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
