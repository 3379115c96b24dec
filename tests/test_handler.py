import queue
import threading
import time
import urllib.error
from unittest.mock import patch

import pytest
import websocket

from feedmeplease.handler import MarketDataFeedHandler
from feedmeplease.tick import InstrumentType, TickData, Venue

SPOT_URL = "wss://stream.binance.com:9443/ws"
FUTURES_URL = "wss://fstream.binance.com:443/ws"


class FakeConnection:
    def __init__(self, messages=()):
        self.messages = list(messages)
        self.sent = []
        self.closed = False
        self.connected = True

    def recv(self):
        if self.closed or not self.messages:
            raise websocket.WebSocketConnectionClosedException("closed")
        return self.messages.pop(0)

    def send(self, message):
        self.sent.append(message)

    def close(self):
        self.closed = True
        self.connected = False


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def make_handler(frequency_ms=500):
    return MarketDataFeedHandler("btcusdt", frequency_ms, queue.Queue(), queue.Queue())


def test_rejects_non_positive_frequency():
    with pytest.raises(ValueError):
        make_handler(0)


def test_process_tick_routes_by_type():
    handler = make_handler()
    spot = TickData(venue=Venue.BINANCE, symbol="BTCUSDT", type=InstrumentType.SPOT, price=1.5)
    perp = TickData(venue=Venue.BINANCE, symbol="BTCUSDT", type=InstrumentType.PERP, price=2.5)
    handler.process_tick(spot)
    handler.process_tick(perp)
    assert handler.snapshot() == (spot, perp)


def test_process_tick_ignores_unknown_type():
    handler = make_handler()
    handler.process_tick(TickData(symbol="BTCUSDT", type="FUT", price=3.0))
    assert handler.spot_buffer.version == 0
    assert handler.perp_buffer.version == 0
    assert handler.snapshot() == (TickData(), TickData())


def test_record_jitter_measures_deviation_from_interval():
    handler = make_handler(500)
    start = 1_000
    assert handler.record_jitter(start) is None
    second = start + 500_000_000 + 250
    assert handler.record_jitter(second) == 250
    assert handler.record_jitter(second + 500_000_000 - 50) == -50
    assert handler.jitter_count == 2
    assert handler.average_jitter_ns == 150.0


def test_poll_queue_moves_ticks_until_stopped():
    handler = make_handler()
    ticks = [TickData(symbol="BTCUSDT", type=InstrumentType.SPOT, price=p) for p in (1.0, 2.0, 3.0)]
    for tick in ticks:
        handler.spot_queue.put(tick)
    handler.running.set()
    worker = threading.Thread(target=handler.poll_queue, args=(handler.spot_queue,))
    worker.start()
    assert wait_until(lambda: handler.spot_buffer.version == 3)
    handler.kill_feeds()
    worker.join(5)
    assert not worker.is_alive()
    assert handler.spot_buffer.read() == ticks[-1]


def test_poll_queue_returns_when_not_running():
    handler = make_handler()
    handler.spot_queue.put(TickData(type=InstrumentType.SPOT))
    handler.poll_queue(handler.spot_queue)
    assert handler.spot_buffer.version == 0
    assert handler.spot_queue.qsize() == 1


def test_process_snapshots_prints_latest_ticks(capsys):
    handler = make_handler(1)
    tick = TickData(venue=Venue.BINANCE, symbol="BTCUSDT", type=InstrumentType.SPOT, price=7.0)
    handler.process_tick(tick)
    handler.running.set()
    worker = threading.Thread(target=handler.process_snapshots)
    worker.start()
    assert wait_until(lambda: handler.jitter_count >= 2)
    handler.kill_feeds()
    worker.join(5)
    assert not worker.is_alive()
    out = capsys.readouterr().out
    assert "LATEST SNAPSHOT" in out
    assert str(tick) in out
    assert str(TickData()) in out


def test_start_feeds_runs_until_killed():
    spot = FakeConnection(['{"e":"aggTrade","E":5,"s":"BTCUSDT","p":"10.0"}'])
    futures = FakeConnection(
        [
            '{"e":"markPriceUpdate","E":6,"s":"BTCUSDT","r":"0.0002"}',
            '{"e":"aggTrade","E":7,"s":"BTCUSDT","p":"20.0"}',
        ]
    )
    connections = {SPOT_URL: spot, FUTURES_URL: futures}
    handler = make_handler(5)

    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")), patch(
        "websocket.create_connection", side_effect=lambda url, **kwargs: connections[url]
    ):
        runner = threading.Thread(target=handler.start_feeds)
        runner.start()
        ready = wait_until(
            lambda: handler.spot_buffer.version >= 1 and handler.perp_buffer.version >= 1
        )
        handler.kill_feeds()
        runner.join(5)

    assert ready
    assert not runner.is_alive()
    assert not handler.running.is_set()
    spot_tick, perp_tick = handler.snapshot()
    assert (spot_tick.price, spot_tick.type) == (10.0, "SPOT")
    assert (perp_tick.price, perp_tick.funding_rate) == (20.0, 0.0002)
    assert spot.closed and futures.closed


def test_start_feeds_failure_leaves_handler_stopped():
    handler = make_handler()
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")), patch(
        "websocket.create_connection", side_effect=ConnectionRefusedError("refused")
    ):
        with pytest.raises(ConnectionError):
            handler.start_feeds()
    assert not handler.running.is_set()