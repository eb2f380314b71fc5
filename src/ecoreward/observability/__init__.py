"""
Observability components for EcoReward.

Provides Prometheus metrics for settlements and administrative actions.
"""

from .metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
