"""MetricsCollector tests."""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prediction_arb.monitoring.metrics import MetricsCollector


def test_summary_counts():
    metrics = MetricsCollector()
    metrics.record_scan(3)
    metrics.record_opportunity("poly_only", 20)
    metrics.record_admission_rejected()
    metrics.record_trade(20)
    metrics.record_price_update("kalshi")
    metrics.set_connection_status("polymarket", True)

    summary = metrics.get_summary()

    assert summary["scans"] == 1
    assert summary["opportunities_detected"] == 1
    assert summary["admission_rejected"] == 1
    assert summary["trades_recorded"] == 1
    assert summary["simulated_profit_cents"] == 20
    assert summary["price_updates"] == {"total": 1, "kalshi": 1, "polymarket": 0}
    assert summary["connections"] == {"kalshi": False, "polymarket": True}
    assert metrics.get_gauge("markets_scanned") == 3
    assert metrics.get_counter("opportunities_poly_only") == 1


def test_percentiles_over_bounded_window():
    metrics = MetricsCollector(max_observations=4)
    for profit in [100, 1, 2, 3, 4]:
        metrics.observe_histogram("opportunity_profit_cents", profit)

    assert metrics.get_histogram_percentile("opportunity_profit_cents", 50) == 3
    assert metrics.get_histogram_percentile("opportunity_profit_cents", 100) == 4


def test_empty_histogram():
    assert MetricsCollector().get_histogram_percentile("missing", 90) == 0.0
