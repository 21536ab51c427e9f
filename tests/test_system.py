"""Wiring tests for ArbitrageSystem. Feeds are never started."""

import asyncio
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from conftest import make_pair, set_prices

from prediction_arb.config import EngineSettings
from prediction_arb.execution import LiveExecutor, SimulatedExecutor
from prediction_arb.feeds import KalshiFeed, PolymarketFeed
from prediction_arb.system import ArbitrageSystem


@pytest.fixture
def markets():
    return [make_pair("lakers-celtics"), make_pair("bitcoin-100k")]


@pytest.mark.asyncio
async def test_dry_run_wiring(markets):
    system = ArbitrageSystem(settings=EngineSettings(dry_run=True), markets=markets)

    assert isinstance(system.execution.executor, SimulatedExecutor)
    assert system.execution.executor.tracker is system.tracker
    assert system.detector.channel is system.channel
    assert system.execution.channel is system.channel
    assert system.risk_monitor.tracker is system.tracker
    assert [type(f) for f in system.feeds] == [KalshiFeed, PolymarketFeed]
    assert all(f.store is system.store for f in system.feeds)


@pytest.mark.asyncio
async def test_live_mode_uses_live_executor(markets):
    system = ArbitrageSystem(settings=EngineSettings(dry_run=False), markets=markets)

    assert isinstance(system.execution.executor, LiveExecutor)
    assert system.get_status()["mode"] == "LIVE"


@pytest.mark.asyncio
async def test_reconnect_delay_passed_to_feeds(markets):
    system = ArbitrageSystem(settings=EngineSettings(reconnect_delay=1), markets=markets)

    assert [f.reconnect_delay for f in system.feeds] == [1, 1]


@pytest.mark.asyncio
async def test_detection_to_execution_pipeline(markets):
    system = ArbitrageSystem(settings=EngineSettings(max_position_size=1), markets=markets)
    set_prices(system.store.get("lakers-celtics"), k_yes=60, k_no=60, p_yes=40, p_no=40)

    system.detector.scan_once()
    system.detector.scan_once()
    assert system.channel.qsize() == 2

    while not system.channel.empty():
        await system.execution.process(system.channel.get_nowait())

    # Both were admitted before either was recorded
    assert system.tracker.get_position("lakers-celtics") == 2
    assert system.tracker.total_pnl == 40

    system.detector.scan_once()
    assert system.channel.empty()


@pytest.mark.asyncio
async def test_get_status(markets):
    system = ArbitrageSystem(markets=markets)
    system.tracker.record_trade("bitcoin-100k", 12)

    status = system.get_status()

    assert status["running"] is False
    assert status["mode"] == "DRY_RUN"
    assert status["markets"] == 2
    assert status["summary"] == "Trades: 1 | P&L: $0.12 | Positions: 1"
    assert status["trade_count"] == 1
    assert status["total_pnl_cents"] == 12
    assert status["open_markets"] == 1
    assert status["queued_opportunities"] == 0
    assert set(status["feeds"]) == {"kalshi", "polymarket"}
    assert "opportunities_detected" in status["metrics"]


@pytest.mark.asyncio
async def test_stop_cancels_running_tasks(markets):
    system = ArbitrageSystem(markets=markets)

    async def idle():
        await asyncio.sleep(3600)

    system._tasks = [asyncio.create_task(idle()), asyncio.create_task(idle())]
    tasks = list(system._tasks)

    await system.stop()

    assert all(t.cancelled() for t in tasks)
    assert system.running is False
