"""
Metrics Repository - monthly founder counters.
"""

from contentops.kernel.metrics.months import validate_month
from contentops.kernel.metrics.metrics_repository import MetricsCounters, MetricsRepository

__all__ = [
    "MetricsCounters",
    "MetricsRepository",
    "validate_month",
]
