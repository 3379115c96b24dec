"""Opening and subscribing the spot and futures trade feeds."""

from __future__ import annotations

import json
import queue

from .callbacks import binance_callback_futures, binance_callback_spot
from .timesync import compute_time_offset
from .websocket import MarketDataFeed

FUTURES_HOST = "fstream.binance.com"
FUTURES_PORT = "443"
SPOT_HOST = "stream.binance.com"
SPOT_PORT = "9443"
STREAM_TARGET = "/ws"

INITIAL_FUNDING_RATE = -1.0


def _subscription(streams: list[str]) -> str:
    return json.dumps(
        {"method": "SUBSCRIBE", "params": streams, "id": 1}, separators=(",", ":")
    )


def spot_subscription(symbol: str) -> str:
    """The subscribe request for a symbol's spot trade stream."""
    return _subscription([f"{symbol}@aggTrade"])


def futures_subscription(symbol: str) -> str:
    """The subscribe request for a symbol's futures trade and mark-price streams."""
    return _subscription([f"{symbol}@aggTrade", f"{symbol}@markPrice"])


def start_feeds(
    symbol: str, spot_queue: queue.Queue, perp_queue: queue.Queue
) -> tuple[MarketDataFeed, MarketDataFeed]:
    """Connect and subscribe both feeds; returns ``(spot_feed, futures_feed)``.

    The feeds are connected but not yet reading: call ``run`` on each.
    """
    funding_rates = {symbol.upper(): INITIAL_FUNDING_RATE}
    offset_ms = compute_time_offset()

    futures_feed = MarketDataFeed(
        "binance_futures_feed",
        FUTURES_HOST,
        FUTURES_PORT,
        STREAM_TARGET,
        binance_callback_futures(perp_queue, funding_rates, offset_ms),
    )
    futures_feed.connect()

    spot_feed = MarketDataFeed(
        "binance_spot_feed",
        SPOT_HOST,
        SPOT_PORT,
        STREAM_TARGET,
        binance_callback_spot(spot_queue, offset_ms),
    )
    try:
        spot_feed.connect()
        spot_feed.send(spot_subscription(symbol))
        futures_feed.send(futures_subscription(symbol))
    except BaseException:
        spot_feed.close()
        futures_feed.close()
        raise

    return spot_feed, futures_feed