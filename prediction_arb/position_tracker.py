"""Position tracking and P&L bookkeeping."""

import threading
from typing import Dict


class PositionTracker:
    """
    Open contracts per market, cumulative P&L in cents and trade count.

    Written only by the execution stage; read by the detector (admission
    check) and the risk monitor. Positions only grow: every recorded trade
    opens one YES + NO contract pair and nothing unwinds it.

    can_trade() and record_trade() are separate calls, so a market can pass
    the admission check again before an earlier opportunity is recorded.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._positions: Dict[str, int] = {}
        self._total_pnl = 0
        self._trade_count = 0

    def can_trade(self, market_id: str, max_size: int) -> bool:
        """Check if we are still under the position limit for a market."""
        with self._lock:
            return self._positions.get(market_id, 0) < max_size

    def record_trade(self, market_id: str, profit_cents: int):
        """Record a trade (simulated or actual)."""
        with self._lock:
            self._positions[market_id] = self._positions.get(market_id, 0) + 1
            self._total_pnl += profit_cents
            self._trade_count += 1

    def get_position(self, market_id: str) -> int:
        with self._lock:
            return self._positions.get(market_id, 0)

    def positions(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._positions)

    @property
    def total_pnl(self) -> int:
        with self._lock:
            return self._total_pnl

    @property
    def trade_count(self) -> int:
        with self._lock:
            return self._trade_count

    @property
    def open_market_count(self) -> int:
        with self._lock:
            return len(self._positions)

    def summary(self) -> str:
        with self._lock:
            return (
                f"Trades: {self._trade_count} | "
                f"P&L: ${self._total_pnl / 100:.2f} | "
                f"Positions: {len(self._positions)}"
            )
