"""
Engine counters and gauges.

Counters only grow for the life of the process. Profit observations keep a
bounded window for the p50/p90 figures in get_summary().
"""

import logging
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Deque, Dict

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    In-process metrics shared by the feeds, the detector and the execution stage.

    Tracks:
    - Detection scans, opportunities found and admission rejections
    - Recorded trades and simulated profit
    - Price updates and connection status per venue
    """

    def __init__(self, max_observations: int = 1000):
        self.max_observations = max_observations
        self._counters: Dict[str, float] = defaultdict(float)
        self._gauges: Dict[str, float] = {}
        self._histograms: Dict[str, Deque[float]] = defaultdict(
            lambda: deque(maxlen=self.max_observations)
        )

    def increment(self, name: str, value: float = 1.0):
        self._counters[name] += value

    def set_gauge(self, name: str, value: float):
        self._gauges[name] = value

    def observe_histogram(self, name: str, value: float):
        self._histograms[name].append(value)

    def record_scan(self, markets_scanned: int):
        self.increment("scans")
        self.set_gauge("markets_scanned", markets_scanned)

    def record_opportunity(self, arb_type: str, profit_cents: int):
        self.increment("opportunities_detected")
        self.increment(f"opportunities_{arb_type}")
        self.observe_histogram("opportunity_profit_cents", profit_cents)

    def record_admission_rejected(self):
        self.increment("admission_rejected")

    def record_trade(self, profit_cents: int):
        self.increment("trades_recorded")
        self.increment("simulated_profit_cents", profit_cents)

    def record_price_update(self, venue: str):
        self.increment(f"price_updates_{venue}")
        self.increment("price_updates_total")

    def set_connection_status(self, venue: str, connected: bool):
        self.set_gauge(f"connected_{venue}", 1.0 if connected else 0.0)

    def get_counter(self, name: str) -> float:
        return self._counters.get(name, 0.0)

    def get_gauge(self, name: str) -> float:
        return self._gauges.get(name, 0.0)

    def get_histogram_percentile(self, name: str, percentile: float) -> float:
        """Nearest-rank percentile over the retained observations; 0.0 if empty."""
        values = sorted(self._histograms.get(name, ()))
        if not values:
            return 0.0
        index = int(len(values) * percentile / 100)
        return values[min(index, len(values) - 1)]

    def get_summary(self) -> Dict:
        def count(name: str) -> int:
            return int(self.get_counter(name))

        return {
            "scans": count("scans"),
            "opportunities_detected": count("opportunities_detected"),
            "admission_rejected": count("admission_rejected"),
            "trades_recorded": count("trades_recorded"),
            "simulated_profit_cents": count("simulated_profit_cents"),
            "profit_cents": {
                "p50": self.get_histogram_percentile("opportunity_profit_cents", 50),
                "p90": self.get_histogram_percentile("opportunity_profit_cents", 90),
            },
            "price_updates": {
                "total": count("price_updates_total"),
                "kalshi": count("price_updates_kalshi"),
                "polymarket": count("price_updates_polymarket"),
            },
            "connections": {
                "kalshi": bool(self.get_gauge("connected_kalshi")),
                "polymarket": bool(self.get_gauge("connected_polymarket")),
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
