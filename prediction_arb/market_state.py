"""
In-memory market state shared by the feed ingestors and the detector.

Each venue's Orderbook carries its own lock, so a writer on one market (or
one venue of a market) never stalls readers of another. The two venues of a
market are never updated together; cross-venue staleness is expected.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, Iterator, List, Optional, Tuple

from .models import (
    MarketPair, PriceCents, QuoteUpdate, Side, SizeCents, Venue, NO_PRICE
)

logger = logging.getLogger(__name__)


@dataclass
class OrderbookSnapshot:
    """Point-in-time copy of one venue's best asks."""
    yes_ask: PriceCents = NO_PRICE
    no_ask: PriceCents = NO_PRICE
    yes_size: SizeCents = 0
    no_size: SizeCents = 0


class Orderbook:
    """Best ask price and size for the YES and NO side on one venue."""

    def __init__(self):
        self._lock = threading.Lock()
        self._book = OrderbookSnapshot()

    def snapshot(self) -> OrderbookSnapshot:
        with self._lock:
            return replace(self._book)

    def update(self, side: Side, ask_price: PriceCents, ask_size: SizeCents):
        with self._lock:
            if side is Side.YES:
                self._book.yes_ask = ask_price
                self._book.yes_size = ask_size
            else:
                self._book.no_ask = ask_price
                self._book.no_size = ask_size

    @property
    def yes_ask(self) -> PriceCents:
        return self.snapshot().yes_ask

    @property
    def no_ask(self) -> PriceCents:
        return self.snapshot().no_ask

    def __repr__(self) -> str:
        book = self.snapshot()
        return (f"Orderbook(yes_ask={book.yes_ask}, no_ask={book.no_ask}, "
                f"yes_size={book.yes_size}, no_size={book.no_size})")


class MarketState:
    """A matched market with one independently locked Orderbook per venue."""

    def __init__(self, pair: MarketPair):
        self.pair = pair
        self.kalshi = Orderbook()
        self.poly = Orderbook()

    def book(self, venue: Venue) -> Orderbook:
        return self.kalshi if venue is Venue.KALSHI else self.poly

    def __repr__(self) -> str:
        return f"MarketState({self.pair.id!r}, kalshi={self.kalshi!r}, poly={self.poly!r})"


class MarketStateStore:
    """
    Fixed set of MarketStates built from the static catalog.

    Markets are never added or removed after construction, so the index
    dictionaries are read-only and need no lock of their own.
    """

    def __init__(self, pairs: List[MarketPair]):
        self._markets: Dict[str, MarketState] = {}
        # (venue, routing key) -> (market, side or None when the key covers both sides)
        self._venue_index: Dict[Tuple[Venue, str], Tuple[MarketState, Optional[Side]]] = {}

        for pair in pairs:
            if pair.id in self._markets:
                raise ValueError(f"Duplicate market id in catalog: {pair.id}")
            state = MarketState(pair)
            self._markets[pair.id] = state
            self._index(Venue.KALSHI, pair.kalshi_ticker, state, None)
            self._index(Venue.POLYMARKET, pair.poly_yes_token, state, Side.YES)
            self._index(Venue.POLYMARKET, pair.poly_no_token, state, Side.NO)

        logger.info(f"MarketStateStore initialized with {len(self._markets)} markets")

    def _index(self, venue: Venue, key: str, state: MarketState, side: Optional[Side]):
        if (venue, key) in self._venue_index:
            raise ValueError(f"Duplicate {venue.value} routing key in catalog: {key}")
        self._venue_index[(venue, key)] = (state, side)

    def get_all(self) -> List[MarketState]:
        return list(self._markets.values())

    def get(self, market_id: str) -> Optional[MarketState]:
        return self._markets.get(market_id)

    def find_by_venue_key(self, key: str, venue: Optional[Venue] = None) -> Optional[MarketState]:
        """Resolve a Kalshi ticker or Polymarket token id to its market."""
        venues = [venue] if venue else list(Venue)
        for v in venues:
            entry = self._venue_index.get((v, key))
            if entry:
                return entry[0]
        return None

    def venue_keys(self, venue: Venue) -> List[str]:
        return [key for (v, key) in self._venue_index if v is venue]

    def apply(self, venue: Venue, update: QuoteUpdate) -> bool:
        """
        Write a quote into the matching Orderbook.

        Returns False for routing keys outside the catalog; those are dropped.
        A Polymarket token fixes the side on its own, overriding update.side.
        """
        entry = self._venue_index.get((venue, update.routing_key))
        if entry is None:
            logger.debug(f"[{venue.value.upper()}] Ignoring untracked key {update.routing_key}")
            return False

        state, token_side = entry
        side = token_side or update.side
        state.book(venue).update(side, update.ask_price, update.ask_size)

        logger.debug(
            f"[{venue.value.upper()}] {state.pair.description} | {side.value.upper()} ask: "
            f"{update.ask_price}¢ ({update.ask_size}¢)"
        )
        return True

    def __len__(self) -> int:
        return len(self._markets)

    def __iter__(self) -> Iterator[MarketState]:
        return iter(self.get_all())
