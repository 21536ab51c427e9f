#!/usr/bin/env python3
"""
Prediction Market Arbitrage Engine

Streams Kalshi and Polymarket best asks, scans matched markets every 500ms
for YES + NO combinations costing less than $1.00, and records simulated
trades with position limits and an advisory daily-loss alarm.

Usage:
    python main.py                        # Dry run (default)
    python main.py --max-position 5       # Cap open contracts per market
    python main.py --max-daily-loss 2500  # Loss ceiling in cents
    python main.py --live                 # Live mode (logs only, no orders)
"""

import asyncio
import argparse
import logging
import os
import signal
from dataclasses import replace

from dotenv import load_dotenv

from prediction_arb.config import Config, EngineSettings
from prediction_arb.monitoring import AlertManager
from prediction_arb.system import ArbitrageSystem

load_dotenv()

logger = logging.getLogger(__name__)


def print_banner(dry_run: bool):
    mode_display = "DRY RUN" if dry_run else "LIVE (NOT IMPLEMENTED)"
    print(f"""
+------------------------------------------------------------------+
|           PREDICTION MARKET ARBITRAGE ENGINE                     |
|           {mode_display:^42}             |
+------------------------------------------------------------------+
|  Combinations:                                                   |
|    - Poly YES + Kalshi NO     - Kalshi YES + Poly NO             |
|    - Poly YES + Poly NO       - Kalshi YES + Kalshi NO           |
+------------------------------------------------------------------+
    """)


def build_settings(args: argparse.Namespace) -> EngineSettings:
    settings = EngineSettings.from_env()
    overrides = {}
    if args.live:
        overrides["dry_run"] = False
    if args.max_position is not None:
        overrides["max_position_size"] = args.max_position
    if args.max_daily_loss is not None:
        overrides["max_daily_loss_cents"] = args.max_daily_loss
    return replace(settings, **overrides) if overrides else settings


async def main():
    parser = argparse.ArgumentParser(
        description="Prediction Market Arbitrage Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  MAX_POSITION_SIZE   contracts per market (default: 10)
  MAX_DAILY_LOSS      loss ceiling in cents (default: 5000)
  DRY_RUN             1/true for simulation (default: true)
  LOG_LEVEL           logging level (default: INFO)
        """,
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Disable dry run (live order placement is not implemented)",
    )
    parser.add_argument(
        "--max-position",
        type=int,
        default=None,
        help="Maximum open contracts per market",
    )
    parser.add_argument(
        "--max-daily-loss",
        type=int,
        default=None,
        help="Maximum cumulative loss in cents before the advisory alarm",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()
    Config.setup_logging(args.log_level)

    settings = build_settings(args)
    print_banner(settings.dry_run)

    system = ArbitrageSystem(settings=settings, alerts=AlertManager())

    # Setup shutdown handler
    shutdown_event = asyncio.Event()

    def handle_shutdown(sig, frame):
        print("\n\nShutdown requested...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    run_task = asyncio.create_task(system.run())
    print("System running. Press Ctrl+C to stop.\n")

    try:
        while not shutdown_event.is_set() and not run_task.done():
            await asyncio.sleep(1)
    finally:
        await system.stop()
        if run_task.done() and not run_task.cancelled() and run_task.exception():
            logger.error(f"System exited with error: {run_task.exception()}")

    status = system.get_status()
    print("\n" + "=" * 60)
    print("SESSION SUMMARY")
    print("=" * 60)
    print(f"Mode:                   {status['mode']}")
    print(f"Opportunities detected: {status['metrics']['opportunities_detected']}")
    print(f"Admission rejections:   {status['metrics']['admission_rejected']}")
    print(f"Trades recorded:        {status['trade_count']}")
    print(f"P&L:                    ${status['total_pnl_cents'] / 100:.2f}")
    print(f"Markets with positions: {status['open_markets']}")
    print("=" * 60)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
