"""
Core types shared by the feeds, the detector and the execution stage.

Prices and sizes are integer cents. A price of 0 is the "no quote yet"
sentinel; valid quotes lie in [1, 99].
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict

PriceCents = int
SizeCents = int

NO_PRICE: PriceCents = 0
MAX_PRICE: PriceCents = 99


class Venue(Enum):
    """Quote sources. Kalshi is the only venue that charges a taker fee."""
    KALSHI = "kalshi"
    POLYMARKET = "polymarket"


class Side(Enum):
    YES = "yes"
    NO = "no"


class MarketType(Enum):
    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"

    def __str__(self) -> str:
        return self.value


class ArbType(Enum):
    """The four YES + NO hedge combinations, in evaluation order."""
    POLY_YES_KALSHI_NO = "poly_yes_kalshi_no"
    KALSHI_YES_POLY_NO = "kalshi_yes_poly_no"
    POLY_ONLY = "poly_only"
    KALSHI_ONLY = "kalshi_only"

    @property
    def label(self) -> str:
        return _ARB_LABELS[self]

    def __str__(self) -> str:
        return self.label


_ARB_LABELS = {
    ArbType.POLY_YES_KALSHI_NO: "Poly YES + Kalshi NO",
    ArbType.KALSHI_YES_POLY_NO: "Kalshi YES + Poly NO",
    ArbType.POLY_ONLY: "Poly YES + Poly NO",
    ArbType.KALSHI_ONLY: "Kalshi YES + Kalshi NO",
}


@dataclass(frozen=True)
class MarketPair:
    """A market matched across both venues, with its routing keys."""
    id: str
    description: str
    market_type: MarketType
    kalshi_ticker: str
    poly_slug: str
    poly_yes_token: str
    poly_no_token: str


@dataclass(frozen=True)
class QuoteUpdate:
    """One best-ask observation for one side of a market on one venue."""
    routing_key: str
    side: Side
    ask_price: PriceCents
    ask_size: SizeCents


@dataclass(frozen=True)
class ArbOpportunity:
    """Winning hedge combination for one market in one detection cycle."""
    market_id: str
    description: str
    arb_type: ArbType
    yes_price: PriceCents
    no_price: PriceCents
    total_cost: int
    fee: int
    profit: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def profit_pct(self) -> float:
        if self.total_cost <= 0:
            return 0.0
        return self.profit / self.total_cost * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            'market_id': self.market_id,
            'description': self.description,
            'arb_type': self.arb_type.value,
            'yes_price': self.yes_price,
            'no_price': self.no_price,
            'total_cost': self.total_cost,
            'fee': self.fee,
            'profit': self.profit,
            'profit_pct': self.profit_pct,
            'timestamp': self.timestamp.isoformat(),
        }


def price_to_cents(price: float) -> PriceCents:
    """Convert a dollar price (0.01-0.99) to cents, halves rounded up, clamped to [0, 99]."""
    if not math.isfinite(price):
        return NO_PRICE
    cents = int(Decimal(str(price)).scaleb(2).to_integral_value(rounding=ROUND_HALF_UP))
    return max(NO_PRICE, min(cents, MAX_PRICE))


def cents_to_price(cents: PriceCents) -> float:
    return cents / 100.0
