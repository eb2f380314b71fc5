"""Tests for the Prometheus metrics collector."""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from ecoreward.observability import MetricsCollector


class TestMetricsCreation:
    """Verify metrics are created with correct types."""

    def test_types(self):
        """Test each metric has the expected type."""
        m = MetricsCollector()
        assert isinstance(m.settlements_total, Counter)
        assert isinstance(m.settlement_duration, Histogram)
        assert isinstance(m.paused, Gauge)

    def test_collectors_do_not_share_registries(self):
        """Test collectors get separate registries."""
        a, b = MetricsCollector(), MetricsCollector()
        a.record_settlement("settled", amount=5)
        assert b.registry.get_sample_value(
            "ecoreward_settlements_total", {"outcome": "settled"}) is None

    def test_custom_registry(self):
        """Test a caller-supplied registry is used."""
        registry = CollectorRegistry()
        assert MetricsCollector(registry).registry is registry


class TestRecording:
    """Test metric recording helpers."""

    def test_record_settlement(self):
        """Test settlement outcomes, amounts and durations."""
        m = MetricsCollector()
        m.record_settlement("settled", amount=3150, duration=0.01)
        m.record_settlement("ZeroRewardError")

        r = m.registry
        assert r.get_sample_value("ecoreward_settlements_total", {"outcome": "settled"}) == 1.0
        assert r.get_sample_value(
            "ecoreward_settlements_total", {"outcome": "ZeroRewardError"}) == 1.0
        assert r.get_sample_value("ecoreward_rewards_distributed_total") == 3150.0
        assert r.get_sample_value("ecoreward_settlement_duration_seconds_count") == 1.0

    def test_admin_and_gauges(self):
        """Test admin counters and the gauges."""
        m = MetricsCollector()
        m.record_admin_action("pause", "success")
        m.set_paused(True)
        m.set_pending_notifications(3)

        r = m.registry
        assert r.get_sample_value(
            "ecoreward_admin_actions_total", {"action": "pause", "outcome": "success"}) == 1.0
        assert r.get_sample_value("ecoreward_paused") == 1.0
        assert r.get_sample_value("ecoreward_pending_notifications") == 3.0

        m.set_paused(False)
        assert r.get_sample_value("ecoreward_paused") == 0.0

    def test_export(self):
        """Test the text exposition."""
        m = MetricsCollector()
        m.record_settlement("settled", amount=1)
        text = m.export()
        assert "ecoreward_settlements_total" in text
        assert 'outcome="settled"' in text
