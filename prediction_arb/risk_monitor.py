"""Periodic heartbeat and advisory daily-loss check."""

import asyncio
import logging
from typing import Optional

from .config import EngineSettings
from .monitoring.alerts import AlertManager
from .position_tracker import PositionTracker

logger = logging.getLogger(__name__)


class RiskMonitor:
    """
    Compares cumulative loss to the configured ceiling.

    The alarm is advisory: it is raised on every check while the ceiling is
    breached and never halts detection, execution or the feeds.
    """

    def __init__(self,
                 tracker: PositionTracker,
                 settings: Optional[EngineSettings] = None,
                 alerts: Optional[AlertManager] = None):
        self.tracker = tracker
        self.settings = settings or EngineSettings()
        self.alerts = alerts
        self.breach_count = 0

    def is_breached(self) -> bool:
        return -self.tracker.total_pnl > self.settings.max_daily_loss_cents

    async def check_once(self) -> bool:
        logger.info(f"System heartbeat | {self.tracker.summary()}")

        if not self.is_breached():
            return False

        loss = -self.tracker.total_pnl
        limit = self.settings.max_daily_loss_cents
        self.breach_count += 1
        logger.warning(
            f"CIRCUIT BREAKER TRIGGERED | Loss: ${loss / 100:.2f} exceeds limit ${limit / 100:.2f}"
        )
        logger.warning("System would halt in production mode")

        if self.alerts:
            try:
                await self.alerts.loss_limit_breached(loss, limit)
            except Exception as e:
                logger.error(f"Failed to send loss limit alert: {e}")
        return True

    async def run(self):
        while True:
            await self.check_once()
            await asyncio.sleep(self.settings.risk_check_interval)
