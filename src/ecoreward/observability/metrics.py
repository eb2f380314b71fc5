"""
Prometheus Metrics Integration.

Provides metrics collection and export for the settlement engine.
"""

from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class MetricsCollector:
    """
    Prometheus metrics collector for EcoReward.

    Exposes metrics:
    - ecoreward_settlements_total{outcome="settled|<error>"}
    - ecoreward_rewards_distributed_total
    - ecoreward_settlement_duration_seconds
    - ecoreward_admin_actions_total{action="...", outcome="success|denied"}
    - ecoreward_paused
    - ecoreward_pending_notifications

    Each collector owns its registry unless one is passed in, so several
    engines can live in one process.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics collector."""
        self.registry = registry if registry is not None else CollectorRegistry()

        self.settlements_total = Counter(
            "ecoreward_settlements_total",
            "Settlement attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.rewards_distributed_total = Counter(
            "ecoreward_rewards_distributed_total",
            "Reward units minted through settlements",
            registry=self.registry,
        )

        self.settlement_duration = Histogram(
            "ecoreward_settlement_duration_seconds",
            "Wall time of settle calls",
            registry=self.registry,
        )

        self.admin_actions_total = Counter(
            "ecoreward_admin_actions_total",
            "Administrative calls by action and outcome",
            ["action", "outcome"],
            registry=self.registry,
        )

        self.paused = Gauge(
            "ecoreward_paused",
            "1 while distribution is paused",
            registry=self.registry,
        )

        self.pending_notifications = Gauge(
            "ecoreward_pending_notifications",
            "Settled submissions whose verification notice has not been delivered",
            registry=self.registry,
        )

    def record_settlement(self, outcome: str, amount: int = 0, duration: Optional[float] = None):
        """Record one settle call."""
        self.settlements_total.labels(outcome=outcome).inc()
        if amount > 0:
            self.rewards_distributed_total.inc(amount)
        if duration is not None:
            self.settlement_duration.observe(duration)

    def record_admin_action(self, action: str, outcome: str):
        """Record an administrative call."""
        self.admin_actions_total.labels(action=action, outcome=outcome).inc()

    def set_paused(self, paused: bool):
        self.paused.set(1 if paused else 0)

    def set_pending_notifications(self, count: int):
        self.pending_notifications.set(count)

    def export(self) -> str:
        """Return the Prometheus text exposition of this registry."""
        return generate_latest(self.registry).decode("utf-8")
