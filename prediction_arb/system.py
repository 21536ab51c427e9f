"""
Task wiring for the arbitrage engine.

Five long-running tasks share the store, the tracker and one unbounded
channel: two feed ingestors, the detector, the execution stage and the risk
monitor. None of them waits on another directly.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from .config import Config, EngineSettings
from .detector import ArbitrageDetector
from .execution import ExecutionStage, LiveExecutor, SimulatedExecutor, TradeExecutor
from .feeds import FeedIngestor, KalshiFeed, PolymarketFeed
from .market_state import MarketStateStore
from .models import ArbOpportunity, MarketPair
from .monitoring import AlertManager, MetricsCollector
from .position_tracker import PositionTracker
from .risk_monitor import RiskMonitor

logger = logging.getLogger(__name__)


class ArbitrageSystem:
    """
    Main arbitrage system.

    Coordinates all components: feeds, detector, executor, tracker, monitor.
    """

    def __init__(self,
                 settings: Optional[EngineSettings] = None,
                 markets: Optional[List[MarketPair]] = None,
                 alerts: Optional[AlertManager] = None,
                 websocket_config: Optional[Dict] = None):
        self.settings = settings or EngineSettings.from_env()
        self.metrics = MetricsCollector()
        self.alerts = alerts

        self.store = MarketStateStore(markets if markets is not None else Config.get_markets())
        self.tracker = PositionTracker()
        # Unbounded: the detector never blocks on a slow executor
        self.channel: "asyncio.Queue[ArbOpportunity]" = asyncio.Queue()

        self.detector = ArbitrageDetector(
            self.store, self.tracker, self.channel, self.settings, self.metrics
        )
        self.execution = ExecutionStage(self.channel, self._build_executor(), self.metrics)
        self.risk_monitor = RiskMonitor(self.tracker, self.settings, self.alerts)

        ws_config = websocket_config or Config.WEBSOCKET_CONFIG
        self.feeds: List[FeedIngestor] = [
            KalshiFeed(ws_config['kalshi'], self.store,
                       reconnect_delay=self.settings.reconnect_delay, metrics=self.metrics),
            PolymarketFeed(ws_config['polymarket'], self.store,
                           reconnect_delay=self.settings.reconnect_delay, metrics=self.metrics),
        ]

        self._tasks: List[asyncio.Task] = []
        self.running = False

        logger.info(f"ArbitrageSystem initialized (dry_run={self.settings.dry_run})")

    def _build_executor(self) -> TradeExecutor:
        if self.settings.dry_run:
            return SimulatedExecutor(self.tracker)
        return LiveExecutor()

    def log_startup(self):
        mode = "DRY RUN (simulation only)" if self.settings.dry_run else "LIVE (NOT IMPLEMENTED - will log only)"
        logger.info("Prediction Market Arbitrage Engine")
        logger.info(f"   Mode: {mode}")
        logger.info(f"   Max position size: {self.settings.max_position_size} contracts")
        logger.info(f"   Max daily loss: ${self.settings.max_daily_loss_cents / 100:.2f}")
        logger.info(f"   Tracked markets: {len(self.store)}")

    async def run(self):
        """Start every task and wait on them until cancelled."""
        self.running = True
        self.log_startup()

        if self.alerts:
            await self.alerts.initialize()
            await self.alerts.engine_started(
                "DRY_RUN" if self.settings.dry_run else "LIVE", len(self.store)
            )

        coroutines = [feed.run_forever() for feed in self.feeds] + [
            self.detector.run(),
            self.execution.run(),
            self.risk_monitor.run(),
        ]
        self._tasks = [asyncio.create_task(coro) for coro in coroutines]
        logger.info("All systems operational")

        try:
            await asyncio.gather(*self._tasks)
        finally:
            self.running = False

    async def stop(self):
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self.running = False

        if self.alerts:
            await self.alerts.close()

        logger.info(f"System stopped | {self.tracker.summary()}")

    def get_status(self) -> Dict:
        return {
            "running": self.running,
            "mode": "DRY_RUN" if self.settings.dry_run else "LIVE",
            "markets": len(self.store),
            "summary": self.tracker.summary(),
            "trade_count": self.tracker.trade_count,
            "total_pnl_cents": self.tracker.total_pnl,
            "open_markets": self.tracker.open_market_count,
            "queued_opportunities": self.channel.qsize(),
            "feeds": {feed.venue.value: feed.get_stats() for feed in self.feeds},
            "metrics": self.metrics.get_summary(),
        }
