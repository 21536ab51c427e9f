"""
Prediction Market Arbitrage Engine
Cross-venue YES/NO arbitrage detection for Kalshi and Polymarket
"""

from .config import Config, EngineSettings
from .detector import ArbitrageDetector, detect_arbitrage
from .fees import kalshi_fee_cents
from .market_state import MarketState, MarketStateStore, Orderbook
from .models import ArbOpportunity, ArbType, MarketPair, cents_to_price, price_to_cents
from .position_tracker import PositionTracker
from .system import ArbitrageSystem

__version__ = "0.1.0"
__all__ = [
    "Config",
    "EngineSettings",
    "ArbitrageDetector",
    "detect_arbitrage",
    "kalshi_fee_cents",
    "MarketState",
    "MarketStateStore",
    "Orderbook",
    "ArbOpportunity",
    "ArbType",
    "MarketPair",
    "cents_to_price",
    "price_to_cents",
    "PositionTracker",
    "ArbitrageSystem",
]
