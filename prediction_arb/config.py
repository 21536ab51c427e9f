import os
import logging
from dataclasses import dataclass
from typing import List
from dotenv import load_dotenv

from .models import MarketPair, MarketType

load_dotenv()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value.strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 0 else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip() == "1" or value.strip().lower() == "true"


class Config:
    """Static configuration for the arbitrage engine."""
    
    # Detection Parameters
    ARB_THRESHOLD_CENTS = 100  # Guaranteed payout of one YES + NO pair
    SCAN_INTERVAL_SECONDS = 0.5
    RISK_CHECK_INTERVAL_SECONDS = 60
    
    # Risk defaults (overridable through the environment)
    DEFAULT_MAX_POSITION_SIZE = 10  # contracts per market
    DEFAULT_MAX_DAILY_LOSS_CENTS = 5000  # $50.00
    
    # WebSocket Configuration
    WS_RECONNECT_DELAY_SECONDS = 5
    WEBSOCKET_CONFIG = {
        'kalshi': {
            'endpoint': os.getenv('KALSHI_WS_URL', 'wss://demo-api.kalshi.co/trade-api/ws/v2'),
            'heartbeat_interval': 30,
            'connect_timeout': 30,
            'channels': ['orderbook_delta'],
        },
        'polymarket': {
            'endpoint': os.getenv('POLYMARKET_WS_URL', 'wss://ws-subscriptions-clob.polymarket.com/ws/market'),
            'heartbeat_interval': 30,
            'connect_timeout': 30,
        }
    }
    
    # Data Storage
    DATA_DIR = "market_data"
    
    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = "arbitrage.log"
    
    @classmethod
    def setup_logging(cls, level: str = None):
        """Configure logging for the application."""
        os.makedirs(cls.DATA_DIR, exist_ok=True)
        
        logging.basicConfig(
            level=getattr(logging, (level or cls.LOG_LEVEL).upper(), logging.INFO),
            format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(os.path.join(cls.DATA_DIR, cls.LOG_FILE))
            ]
        )
    
    @staticmethod
    def get_markets() -> List[MarketPair]:
        """Matched market catalog. Token ids are placeholders until discovery exists."""
        return [
            MarketPair(
                id="chelsea-arsenal",
                description="Chelsea vs Arsenal (EPL)",
                market_type=MarketType.MONEYLINE,
                kalshi_ticker="KXEPLGAME-25DEC27CFCARS-CFC",
                poly_slug="chelsea-vs-arsenal",
                poly_yes_token="0x123...abc",
                poly_no_token="0x456...def",
            ),
            MarketPair(
                id="lakers-celtics",
                description="Lakers vs Celtics (NBA)",
                market_type=MarketType.MONEYLINE,
                kalshi_ticker="KXNBAGAME-25JAN15LALCEL-LAL",
                poly_slug="lakers-vs-celtics",
                poly_yes_token="0x789...ghi",
                poly_no_token="0xabc...jkl",
            ),
            MarketPair(
                id="bitcoin-100k",
                description="Bitcoin > $100k (Feb 2025)",
                market_type=MarketType.TOTAL,
                kalshi_ticker="KXBTC-25FEB01-100K",
                poly_slug="bitcoin-100k-feb-2025",
                poly_yes_token="0xdef...mno",
                poly_no_token="0xghi...pqr",
            ),
        ]


@dataclass(frozen=True)
class EngineSettings:
    """Runtime limits, read once at startup and never mutated."""
    max_position_size: int = Config.DEFAULT_MAX_POSITION_SIZE
    max_daily_loss_cents: int = Config.DEFAULT_MAX_DAILY_LOSS_CENTS
    dry_run: bool = True
    threshold_cents: int = Config.ARB_THRESHOLD_CENTS
    scan_interval: float = Config.SCAN_INTERVAL_SECONDS
    risk_check_interval: float = Config.RISK_CHECK_INTERVAL_SECONDS
    reconnect_delay: float = Config.WS_RECONNECT_DELAY_SECONDS
    
    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            max_position_size=_env_int("MAX_POSITION_SIZE", Config.DEFAULT_MAX_POSITION_SIZE),
            max_daily_loss_cents=_env_int("MAX_DAILY_LOSS", Config.DEFAULT_MAX_DAILY_LOSS_CENTS),
            dry_run=_env_bool("DRY_RUN", True),
        )
