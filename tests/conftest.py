"""
Shared fixtures: a small market catalog and a helper for seeding quotes.
All tests run offline; nothing here opens a network connection.
"""

import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prediction_arb.market_state import MarketStateStore
from prediction_arb.models import MarketPair, MarketType, Side


def make_pair(market_id: str = "lakers-celtics") -> MarketPair:
    return MarketPair(
        id=market_id,
        description=f"{market_id} (test)",
        market_type=MarketType.MONEYLINE,
        kalshi_ticker=f"KX-{market_id.upper()}",
        poly_slug=market_id,
        poly_yes_token=f"{market_id}-yes",
        poly_no_token=f"{market_id}-no",
    )


def set_prices(state, k_yes=0, k_no=0, p_yes=0, p_no=0, size=100):
    state.kalshi.update(Side.YES, k_yes, size)
    state.kalshi.update(Side.NO, k_no, size)
    state.poly.update(Side.YES, p_yes, size)
    state.poly.update(Side.NO, p_no, size)


@pytest.fixture
def pair():
    return make_pair()


@pytest.fixture
def store():
    return MarketStateStore([make_pair("lakers-celtics"), make_pair("bitcoin-100k")])
