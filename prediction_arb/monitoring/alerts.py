"""
Operator notifications.

Every alert is written to the log. When ALERT_WEBHOOK_URL is set it is also
posted as a Discord/Slack style embed, and when TELEGRAM_BOT_TOKEN and
TELEGRAM_CHAT_ID are set it is sent as a Telegram message. Delivery failures
are logged and never reach the caller's task.
"""

import asyncio
import logging
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"


class AlertLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def log_level(self) -> int:
        return getattr(logging, self.name)

    def __ge__(self, other: "AlertLevel") -> bool:
        order = list(AlertLevel)
        return order.index(self) >= order.index(other)


_EMBED_COLORS = {
    AlertLevel.DEBUG: 0x808080,
    AlertLevel.INFO: 0x0099FF,
    AlertLevel.WARNING: 0xFFCC00,
    AlertLevel.ERROR: 0xFF6600,
    AlertLevel.CRITICAL: 0xFF0000,
}


@dataclass
class Alert:
    id: str
    level: AlertLevel
    title: str
    message: str
    data: Dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sent_channels: List[str] = field(default_factory=list)

    @property
    def headline(self) -> str:
        return f"[{self.level.value.upper()}] {self.title}"


def webhook_payload(alert: Alert) -> Dict:
    fields = [
        {"name": key, "value": str(value)[:100], "inline": True}
        for key, value in list(alert.data.items())[:5]
    ]
    return {
        "embeds": [{
            "title": alert.headline,
            "description": alert.message,
            "color": _EMBED_COLORS[alert.level],
            "timestamp": alert.timestamp.isoformat(),
            "fields": fields,
        }]
    }


def telegram_text(alert: Alert) -> str:
    lines = [f"*{alert.headline}*", "", alert.message]
    if alert.data:
        lines += ["", "```"] + [f"{k}: {v}" for k, v in alert.data.items()] + ["```"]
    return "\n".join(lines)


class AlertManager:
    """Fans alerts out to the log and any configured remote channel."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        telegram_token: Optional[str] = None,
        telegram_chat_id: Optional[str] = None,
        min_alert_level: AlertLevel = AlertLevel.INFO,
        history_size: int = 100,
    ):
        self.webhook_url = webhook_url or os.getenv("ALERT_WEBHOOK_URL")
        self.telegram_token = telegram_token or os.getenv("TELEGRAM_BOT_TOKEN")
        self.telegram_chat_id = telegram_chat_id or os.getenv("TELEGRAM_CHAT_ID")
        self.min_alert_level = min_alert_level

        self._session: Optional[aiohttp.ClientSession] = None
        self._sequence = 0
        self._history: Deque[Alert] = deque(maxlen=history_size)

    @property
    def remote_channels(self) -> List[str]:
        channels = []
        if self.webhook_url:
            channels.append("webhook")
        if self.telegram_token and self.telegram_chat_id:
            channels.append("telegram")
        return channels

    async def initialize(self):
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10))
            logger.info(f"AlertManager ready (remote channels: {self.remote_channels or 'none'})")

    async def close(self):
        if self._session and not self._session.closed:
            await self._session.close()

    async def send(self, level: AlertLevel, title: str, message: str,
                   data: Optional[Dict[str, str]] = None) -> Optional[Alert]:
        """Deliver one alert; returns None when below the minimum level."""
        if not level >= self.min_alert_level:
            return None

        self._sequence += 1
        alert = Alert(f"alert_{self._sequence:06d}", level, title, message, dict(data or {}))

        logger.log(level.log_level, f"[ALERT] {alert.title}: {alert.message}")
        alert.sent_channels.append("console")

        deliveries = {
            "webhook": lambda: self._post(self.webhook_url, webhook_payload(alert)),
            "telegram": lambda: self._post(
                f"{TELEGRAM_API}/bot{self.telegram_token}/sendMessage",
                {"chat_id": self.telegram_chat_id, "text": telegram_text(alert), "parse_mode": "Markdown"},
            ),
        }
        channels = self.remote_channels
        if channels:
            results = await asyncio.gather(
                *(deliveries[name]() for name in channels), return_exceptions=True
            )
            for name, result in zip(channels, results):
                if result is True:
                    alert.sent_channels.append(name)
                else:
                    logger.error(f"Alert delivery via {name} failed: {result}")

        self._history.append(alert)
        return alert

    async def _post(self, url: str, payload: Dict):
        await self.initialize()
        async with self._session.post(url, json=payload) as response:
            if response.status in (200, 204):
                return True
            return f"HTTP {response.status}"

    async def info(self, title: str, message: str, data: Optional[Dict[str, str]] = None):
        return await self.send(AlertLevel.INFO, title, message, data)

    async def warning(self, title: str, message: str, data: Optional[Dict[str, str]] = None):
        return await self.send(AlertLevel.WARNING, title, message, data)

    async def engine_started(self, mode: str, markets: int):
        return await self.info(
            "Arbitrage engine started",
            f"Watching {markets} matched markets in {mode} mode",
            {"mode": mode, "markets": str(markets)},
        )

    async def loss_limit_breached(self, loss_cents: int, limit_cents: int):
        """Advisory: trading continues after this is sent."""
        return await self.warning(
            "Circuit breaker triggered",
            f"Loss ${loss_cents / 100:.2f} exceeds limit ${limit_cents / 100:.2f} (advisory, trading continues)",
            {"loss": f"${loss_cents / 100:.2f}", "limit": f"${limit_cents / 100:.2f}"},
        )

    def get_recent_alerts(self, limit: int = 20) -> List[Alert]:
        return list(self._history)[-limit:]
