"""
Execution stage: drains the opportunity channel in arrival order.

Simulation mode records a hypothetical trade for each opportunity. Live
order placement is not implemented; LiveExecutor marks the extension point.
"""

import asyncio
import logging
from typing import Optional

from .models import ArbOpportunity
from .monitoring.metrics import MetricsCollector
from .position_tracker import PositionTracker

logger = logging.getLogger(__name__)


class TradeExecutor:
    """Interface for whatever acts on a detected opportunity."""

    mode = "base"

    async def execute(self, opp: ArbOpportunity) -> bool:
        raise NotImplementedError


class SimulatedExecutor(TradeExecutor):
    """Dry-run executor: every opportunity becomes a recorded trade."""

    mode = "dry_run"

    def __init__(self, tracker: PositionTracker):
        self.tracker = tracker

    async def execute(self, opp: ArbOpportunity) -> bool:
        self.tracker.record_trade(opp.market_id, opp.profit)
        return True


class LiveExecutor(TradeExecutor):
    """Placeholder for real order placement on both venues."""

    mode = "live"

    async def execute(self, opp: ArbOpportunity) -> bool:
        logger.warning("[EXECUTION] Live trading NOT implemented")
        return False


class ExecutionStage:
    """Consumes ArbOpportunity values one at a time, FIFO."""

    def __init__(self,
                 channel: "asyncio.Queue[ArbOpportunity]",
                 executor: TradeExecutor,
                 metrics: Optional[MetricsCollector] = None):
        self.channel = channel
        self.executor = executor
        self.metrics = metrics
        self.processed = 0

    async def process(self, opp: ArbOpportunity) -> bool:
        dry_run = isinstance(self.executor, SimulatedExecutor)
        logger.info(
            f"ARBITRAGE DETECTED | Market: {opp.description} | Strategy: {opp.arb_type.label} | "
            f"YES: {opp.yes_price}¢ | NO: {opp.no_price}¢ | Fee: {opp.fee}¢ | "
            f"Total cost: {opp.total_cost}¢ | Profit: {opp.profit}¢ ({opp.profit_pct:.2f}%) | "
            f"{'[DRY RUN - Not executing]' if dry_run else '[EXECUTING]'}"
        )

        recorded = await self.executor.execute(opp)
        self.processed += 1
        if recorded and self.metrics:
            self.metrics.record_trade(opp.profit)
        return recorded

    async def run(self):
        logger.info(f"[EXECUTION] Execution stage running (mode={self.executor.mode})")
        while True:
            opp = await self.channel.get()
            try:
                await self.process(opp)
            except Exception as e:
                logger.error(f"[EXECUTION] Error processing {opp.market_id}: {e}")
            finally:
                self.channel.task_done()
