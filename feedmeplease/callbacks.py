"""Message handlers that turn exchange stream messages into ticks."""

from __future__ import annotations

import json
import logging
import math
import queue
import time
from collections.abc import Callable, MutableMapping

from .tick import InstrumentType, TickData, Venue

logger = logging.getLogger(__name__)

Callback = Callable[[str], None]


def _parse(message: str) -> dict | None:
    try:
        document = json.loads(message)
    except json.JSONDecodeError:
        logger.warning("Failed to parse JSON: %s", message)
        return None
    if not isinstance(document, dict):
        logger.warning("Unexpected JSON message: %s", message)
        return None
    return document


def _is_subscription_ack(document: dict) -> bool:
    return "result" in document and document["result"] is None


def _enqueue(tick_queue: queue.Queue, tick: TickData, kind: str) -> None:
    try:
        tick_queue.put_nowait(tick)
    except queue.Full:
        logger.warning(
            "tick queue full, dropped %s message %d", kind, tick.received_time_ns
        )


def binance_callback_spot(tick_queue: queue.Queue, offset_ms: int) -> Callback:
    """Build a handler for the spot trade stream that queues SPOT ticks."""

    def handle(message: str) -> None:
        received_ns = time.time_ns()
        document = _parse(message)
        if document is None:
            return
        if _is_subscription_ack(document):
            logger.info("Subscription confirmed for binance spot stream.")
            return

        tick = TickData(
            venue=Venue.BINANCE,
            symbol=document.get("s", ""),
            type=InstrumentType.SPOT,
            price=float(document.get("p", "0")),
            event_time_ms=int(document["E"]) + offset_ms,
            received_time_ns=received_ns,
        )
        _enqueue(tick_queue, tick, "SPOT")

    return handle


def binance_callback_futures(
    tick_queue: queue.Queue,
    funding_rates: MutableMapping[str, float],
    offset_ms: int,
) -> Callback:
    """Build a handler for the futures stream.

    Mark-price updates record the funding rate per upper-case symbol; trades
    are queued as PERP ticks carrying the latest recorded rate.
    """

    def handle(message: str) -> None:
        received_ns = time.time_ns()
        document = _parse(message)
        if document is None:
            return
        if _is_subscription_ack(document):
            logger.info("Subscription confirmed for binance futures stream.")
            return

        event_type = document.get("e", "")
        symbol = document.get("s", "")
        key = symbol.upper()

        if event_type == "markPriceUpdate":
            funding_rates[key] = float(document.get("r", "nan"))
        elif event_type == "aggTrade":
            tick = TickData(
                venue=Venue.BINANCE,
                symbol=symbol,
                type=InstrumentType.PERP,
                price=float(document.get("p", "0")),
                event_time_ms=int(document["E"]) + offset_ms,
                received_time_ns=received_ns,
                funding_rate=funding_rates.get(key, math.nan),
            )
            _enqueue(tick_queue, tick, "PERP")

    return handle