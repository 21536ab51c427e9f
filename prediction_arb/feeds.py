"""
WebSocket feed ingestors for Kalshi and Polymarket.

Each feed decodes its venue's messages into QuoteUpdates and writes them into
the MarketStateStore. A supervisor loop reconnects after a fixed delay on any
failure or close, forever. Quotes missed while disconnected are never
replayed; the store keeps the last known prices until overwritten.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import aiohttp

from .market_state import MarketStateStore
from .models import (
    QuoteUpdate, Side, Venue, NO_PRICE, MAX_PRICE, price_to_cents
)
from .monitoring.metrics import MetricsCollector

logger = logging.getLogger(__name__)


def _as_whole_number(value: Any) -> Optional[int]:
    """A JSON integer or all-digit string, otherwise None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    return None


def _coerce_price_cents(value: Any) -> int:
    """Integer cents in [1, 99], or the no-price sentinel."""
    cents = _as_whole_number(value)
    if cents is None or cents < 1 or cents > MAX_PRICE:
        return NO_PRICE
    return cents


def _coerce_size_cents(value: Any) -> int:
    size = _as_whole_number(value)
    if size is None:
        return 0
    return max(size, 0)


class FeedIngestor:
    """Base class for one venue's WebSocket connection."""

    def __init__(self,
                 venue: Venue,
                 config: Dict,
                 store: MarketStateStore,
                 reconnect_delay: float = 5,
                 metrics: Optional[MetricsCollector] = None):
        self.venue = venue
        self.config = config
        self.endpoint = config.get('endpoint')
        self.store = store
        self.reconnect_delay = reconnect_delay
        self.metrics = metrics
        self.is_connected = False
        self.tag = f"[{venue.value.upper()}]"
        self.stats = {
            'messages_received': 0,
            'messages_ignored_empty': 0,
            'messages_invalid_json': 0,
            'messages_server_errors': 0,
            'message_errors': 0,
            'updates_applied': 0,
            'updates_unrouted': 0,
            'reconnections': 0,
            'last_message_time': None,
        }

    async def run_forever(self):
        """Connect, stream, and reconnect after a fixed delay, indefinitely."""
        while True:
            try:
                await self.connect_and_stream()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"{self.tag} WebSocket error: {e} - reconnecting...")
            finally:
                self._set_connected(False)

            self.stats['reconnections'] += 1
            await asyncio.sleep(self.reconnect_delay)

    async def connect_and_stream(self):
        """Run one connection until the server closes it or it fails."""
        logger.info(f"{self.tag} Connecting to WebSocket: {self.endpoint}")

        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.config.get('connect_timeout', 30))
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.ws_connect(
                self.endpoint,
                heartbeat=self.config.get('heartbeat_interval', 30),
            ) as ws:
                self._set_connected(True)
                logger.info(f"{self.tag} Connected to WebSocket")

                await self.subscribe(ws)

                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self.handle_message(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.error(f"{self.tag} WebSocket error: {ws.exception()}")
                        break
                    elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                        logger.warning(f"{self.tag} WebSocket closed by server")
                        break

        logger.warning(f"{self.tag} WebSocket disconnected")

    async def subscribe(self, ws: aiohttp.ClientWebSocketResponse):
        raise NotImplementedError

    def parse_message(self, data: Any) -> List[QuoteUpdate]:
        """Decode one JSON payload into quote updates. Override in subclasses."""
        raise NotImplementedError

    def handle_message(self, raw_data: str) -> int:
        """Parse a raw text frame and apply its updates; returns updates applied."""
        self.stats['messages_received'] += 1
        self.stats['last_message_time'] = datetime.now()

        text = (raw_data or "").strip()
        if not text:
            self.stats['messages_ignored_empty'] += 1
            return 0

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            if text.isupper():
                self.stats['messages_server_errors'] += 1
                logger.warning(f"{self.tag} Server error text: {text[:200]}")
            else:
                self.stats['messages_invalid_json'] += 1
                logger.debug(f"{self.tag} Invalid JSON: {text[:200]}")
            return 0

        try:
            updates = self.parse_message(data)
        except Exception as e:
            self.stats['message_errors'] += 1
            logger.warning(f"{self.tag} Error handling message: {e}")
            return 0

        applied = 0
        for update in updates:
            if self.store.apply(self.venue, update):
                applied += 1
                if self.metrics:
                    self.metrics.record_price_update(self.venue.value)
            else:
                self.stats['updates_unrouted'] += 1

        self.stats['updates_applied'] += applied
        return applied

    def _set_connected(self, connected: bool):
        self.is_connected = connected
        if self.metrics:
            self.metrics.set_connection_status(self.venue.value, connected)

    def get_stats(self) -> Dict:
        return {
            'venue': self.venue.value,
            'is_connected': self.is_connected,
            **self.stats,
        }


class KalshiFeed(FeedIngestor):
    """Kalshi public orderbook feed. Prices arrive as integer cents."""

    def __init__(self, config: Dict, store: MarketStateStore, **kwargs):
        super().__init__(Venue.KALSHI, config, store, **kwargs)
        self.command_id = 0

    async def subscribe(self, ws: aiohttp.ClientWebSocketResponse):
        tickers = self.store.venue_keys(Venue.KALSHI)
        if not tickers:
            return

        self.command_id += 1
        command = {
            "id": self.command_id,
            "cmd": "subscribe",
            "params": {
                "channels": self.config.get('channels', ['orderbook_delta']),
                "market_tickers": tickers,
            }
        }
        await ws.send_str(json.dumps(command))
        logger.info(f"{self.tag} Subscribed to {len(tickers)} markets")

    def parse_message(self, data: Any) -> List[QuoteUpdate]:
        if not isinstance(data, dict):
            return []

        msg_type = data.get('type', 'unknown')
        # Fields are either top level or nested under "msg"
        body = data.get('msg') if isinstance(data.get('msg'), dict) else data

        if msg_type == 'orderbook_delta':
            ticker = body.get('market_ticker') or body.get('ticker')
            if not ticker:
                raise ValueError("Missing ticker")

            return [
                QuoteUpdate(
                    routing_key=ticker,
                    side=Side.YES,
                    ask_price=_coerce_price_cents(body.get('yes_ask')),
                    ask_size=_coerce_size_cents(body.get('yes_ask_size')),
                ),
                QuoteUpdate(
                    routing_key=ticker,
                    side=Side.NO,
                    ask_price=_coerce_price_cents(body.get('no_ask')),
                    ask_size=_coerce_size_cents(body.get('no_ask_size')),
                ),
            ]
        elif msg_type == 'subscribed':
            logger.debug(f"{self.tag} Subscription confirmed")
        elif msg_type == 'error':
            logger.warning(f"{self.tag} Error message: {data}")
        else:
            logger.debug(f"{self.tag} Unknown message type: {msg_type}")

        return []


class PolymarketFeed(FeedIngestor):
    """Polymarket CLOB market feed. Prices and sizes arrive as dollar strings."""

    def __init__(self, config: Dict, store: MarketStateStore, **kwargs):
        super().__init__(Venue.POLYMARKET, config, store, **kwargs)

    async def subscribe(self, ws: aiohttp.ClientWebSocketResponse):
        token_ids = self.store.venue_keys(Venue.POLYMARKET)
        if not token_ids:
            return

        subscription_message = {
            "assets_ids": token_ids,
            "type": "market",
        }
        await ws.send_str(json.dumps(subscription_message))
        logger.info(f"{self.tag} Subscribed to {len(token_ids)} tokens")

    def parse_message(self, data: Any) -> List[QuoteUpdate]:
        if isinstance(data, list):
            updates = []
            for item in data:
                updates.extend(self.parse_message(item))
            return updates

        if not isinstance(data, dict):
            return []

        event_type = data.get('event_type', 'unknown')
        if event_type == 'book':
            update = self._parse_book(data)
            return [update] if update else []
        elif event_type == 'subscribed':
            logger.debug(f"{self.tag} Subscription confirmed")
        elif event_type == 'error':
            logger.warning(f"{self.tag} Error message: {data}")
        else:
            logger.debug(f"{self.tag} Unhandled event type: {event_type}")

        return []

    def _parse_book(self, data: Dict) -> Optional[QuoteUpdate]:
        token_id = data.get('asset_id') or data.get('market')
        if not token_id:
            raise ValueError("Missing market/token_id")

        market = self.store.find_by_venue_key(token_id, Venue.POLYMARKET)
        if market is None:
            # Not tracked
            self.stats['updates_unrouted'] += 1
            return None

        side = Side.YES if market.pair.poly_yes_token == token_id else Side.NO
        price, size = self._best_ask(data.get('asks') or [])
        return QuoteUpdate(routing_key=token_id, side=side, ask_price=price, ask_size=size)

    @staticmethod
    def _best_ask(asks: List[Dict]) -> tuple:
        """Lowest priced ask level as (price cents, size cents); (0, 0) if none."""
        best = None
        for level in asks:
            if not isinstance(level, dict):
                continue
            try:
                price = float(level.get('price'))
            except (TypeError, ValueError):
                continue
            if best is None or price < best[0]:
                best = (price, level.get('size'))

        if best is None:
            return NO_PRICE, 0

        try:
            size = max(int(float(best[1]) * 100), 0)
        except (TypeError, ValueError):
            size = 0
        return price_to_cents(best[0]), size
