"""
Arbitrage detection over the shared market state.

Every scan evaluates four YES + NO hedge combinations per market:
1. Poly YES + Kalshi NO (cross-venue)
2. Kalshi YES + Poly NO (cross-venue)
3. Poly YES + Poly NO (same venue, fee-free)
4. Kalshi YES + Kalshi NO (same venue, Kalshi fee on both legs)

Holding one YES and one NO pays out $1.00 at settlement, so any combination
whose total cost including fees is below the threshold locks in profit.
"""

import asyncio
import logging
from typing import List, Optional

from .config import Config, EngineSettings
from .fees import kalshi_fee_cents
from .market_state import MarketState, MarketStateStore
from .models import ArbOpportunity, ArbType, NO_PRICE
from .monitoring.metrics import MetricsCollector
from .position_tracker import PositionTracker

logger = logging.getLogger(__name__)


def detect_arbitrage(market: MarketState,
                     threshold: int = Config.ARB_THRESHOLD_CENTS) -> Optional[ArbOpportunity]:
    """Return the most profitable combination for one market, if any."""
    kalshi = market.kalshi.snapshot()
    poly = market.poly.snapshot()

    k_yes, k_no = kalshi.yes_ask, kalshi.no_ask
    p_yes, p_no = poly.yes_ask, poly.no_ask

    # Skip if any price is missing
    if NO_PRICE in (k_yes, k_no, p_yes, p_no):
        return None

    combinations = [
        (ArbType.POLY_YES_KALSHI_NO, p_yes, k_no, kalshi_fee_cents(k_no)),
        (ArbType.KALSHI_YES_POLY_NO, k_yes, p_no, kalshi_fee_cents(k_yes)),
        (ArbType.POLY_ONLY, p_yes, p_no, 0),
        (ArbType.KALSHI_ONLY, k_yes, k_no, kalshi_fee_cents(k_yes) + kalshi_fee_cents(k_no)),
    ]

    best: Optional[ArbOpportunity] = None
    for arb_type, yes_price, no_price, fee in combinations:
        total_cost = yes_price + no_price + fee
        if total_cost >= threshold:
            continue

        profit = threshold - total_cost
        # Strictly greater, so the earlier combination wins a tie
        if best is None or profit > best.profit:
            best = ArbOpportunity(
                market_id=market.pair.id,
                description=market.pair.description,
                arb_type=arb_type,
                yes_price=yes_price,
                no_price=no_price,
                total_cost=total_cost,
                fee=fee,
                profit=profit,
            )

    return best


class ArbitrageDetector:
    """
    Periodic scanner feeding the opportunity channel.

    At most one opportunity per market per scan. Opportunities for markets at
    their position limit are logged and dropped rather than queued.
    """

    def __init__(self,
                 store: MarketStateStore,
                 tracker: PositionTracker,
                 channel: "asyncio.Queue[ArbOpportunity]",
                 settings: Optional[EngineSettings] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.tracker = tracker
        self.channel = channel
        self.settings = settings or EngineSettings()
        self.metrics = metrics

    def scan_once(self) -> List[ArbOpportunity]:
        """Scan every market once and queue the admitted opportunities."""
        forwarded = []
        markets = self.store.get_all()

        for market in markets:
            arb = detect_arbitrage(market, self.settings.threshold_cents)
            if arb is None:
                continue

            if self.metrics:
                self.metrics.record_opportunity(arb.arb_type.value, arb.profit)

            if not self.tracker.can_trade(market.pair.id, self.settings.max_position_size):
                logger.warning(f"[ARB] Position limit reached for {market.pair.description}")
                if self.metrics:
                    self.metrics.record_admission_rejected()
                continue

            self.channel.put_nowait(arb)
            forwarded.append(arb)

        if self.metrics:
            self.metrics.record_scan(len(markets))

        return forwarded

    async def run(self):
        """Scan on a fixed cadence until cancelled."""
        interval = self.settings.scan_interval
        logger.info(f"[ARB] Detector running every {interval * 1000:.0f}ms over {len(self.store)} markets")

        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            self.scan_once()
            next_tick += interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
