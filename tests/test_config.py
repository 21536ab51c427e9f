"""Tests for environment-driven settings and the market catalog."""

import os
import sys

import pytest
from dataclasses import FrozenInstanceError

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prediction_arb.config import Config, EngineSettings
from prediction_arb.market_state import MarketStateStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MAX_POSITION_SIZE", "MAX_DAILY_LOSS", "DRY_RUN"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = EngineSettings.from_env()

    assert settings.max_position_size == 10
    assert settings.max_daily_loss_cents == 5000
    assert settings.dry_run is True
    assert settings.threshold_cents == 100
    assert settings.scan_interval == 0.5
    assert settings.risk_check_interval == 60
    assert settings.reconnect_delay == 5


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MAX_POSITION_SIZE", "3")
    monkeypatch.setenv("MAX_DAILY_LOSS", "2500")
    monkeypatch.setenv("DRY_RUN", "0")

    settings = EngineSettings.from_env()

    assert settings.max_position_size == 3
    assert settings.max_daily_loss_cents == 2500
    assert settings.dry_run is False


def test_unparseable_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("MAX_POSITION_SIZE", "lots")
    monkeypatch.setenv("MAX_DAILY_LOSS", "")

    settings = EngineSettings.from_env()

    assert settings.max_position_size == 10
    assert settings.max_daily_loss_cents == 5000


@pytest.mark.parametrize("name", ["MAX_POSITION_SIZE", "MAX_DAILY_LOSS"])
def test_negative_numbers_fall_back(monkeypatch, name):
    monkeypatch.setenv(name, "-1")

    settings = EngineSettings.from_env()

    assert settings.max_position_size == 10
    assert settings.max_daily_loss_cents == 5000


def test_zero_is_accepted(monkeypatch):
    monkeypatch.setenv("MAX_POSITION_SIZE", "0")

    assert EngineSettings.from_env().max_position_size == 0


@pytest.mark.parametrize("value,expected", [
    ("1", True),
    ("true", True),
    ("TRUE", True),
    ("false", False),
    ("yes", False),
    ("", False),
])
def test_dry_run_parsing(monkeypatch, value, expected):
    monkeypatch.setenv("DRY_RUN", value)

    assert EngineSettings.from_env().dry_run is expected


def test_settings_are_immutable():
    settings = EngineSettings()

    with pytest.raises(FrozenInstanceError):
        settings.max_position_size = 99


def test_catalog_builds_a_store():
    markets = Config.get_markets()
    store = MarketStateStore(markets)

    assert len(store) == len(markets) == 3
    for pair in markets:
        assert store.find_by_venue_key(pair.kalshi_ticker) is store.get(pair.id)
        assert store.find_by_venue_key(pair.poly_yes_token) is store.get(pair.id)
        assert store.find_by_venue_key(pair.poly_no_token) is store.get(pair.id)


def test_websocket_config_has_both_venues():
    assert Config.WEBSOCKET_CONFIG['kalshi']['channels'] == ['orderbook_delta']
    assert Config.WEBSOCKET_CONFIG['polymarket']['endpoint'].startswith("wss://")
