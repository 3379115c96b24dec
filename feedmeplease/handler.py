"""Consumes tick queues into latest-value buffers and prints periodic snapshots."""

from __future__ import annotations

import logging
import queue
import threading
import time

from .concurrency import set_affinity, spin_wait
from .feeds import start_feeds as _open_feeds
from .tick import InstrumentType, TickData, TickDataBuffer
from .websocket import MarketDataFeed

logger = logging.getLogger(__name__)

_POLL_TIMEOUT_S = 0.05


class MarketDataFeedHandler:
    """Runs the feeds, the queue consumers and the snapshot printer for a symbol."""

    def __init__(
        self,
        symbol: str,
        snapshot_frequency_ms: int,
        spot_queue: queue.Queue,
        perp_queue: queue.Queue,
    ) -> None:
        if snapshot_frequency_ms <= 0:
            raise ValueError("snapshot_frequency_ms must be positive")
        self.symbol = symbol
        self.snapshot_frequency_ms = snapshot_frequency_ms
        self.spot_queue = spot_queue
        self.perp_queue = perp_queue
        self.spot_buffer = TickDataBuffer()
        self.perp_buffer = TickDataBuffer()
        self.running = threading.Event()
        self._feeds: tuple[MarketDataFeed, ...] = ()
        self._last_snapshot_ns = 0
        self._total_jitter_ns = 0
        self._jitter_count = 0

    @property
    def jitter_count(self) -> int:
        """Number of snapshot intervals measured."""
        return self._jitter_count

    @property
    def average_jitter_ns(self) -> float:
        """Mean absolute deviation from the snapshot interval, in ns."""
        if self._jitter_count == 0:
            return 0.0
        return self._total_jitter_ns / self._jitter_count

    def process_tick(self, tick: TickData) -> None:
        """Store a tick in the buffer for its instrument type; others are ignored."""
        kind = tick.type[:4]
        if kind == InstrumentType.SPOT.value:
            self.spot_buffer.write(tick)
        elif kind == InstrumentType.PERP.value:
            self.perp_buffer.write(tick)

    def snapshot(self) -> tuple[TickData, TickData]:
        """The latest spot and perpetual ticks."""
        return self.spot_buffer.read(), self.perp_buffer.read()

    def record_jitter(self, now_ns: int) -> int | None:
        """Record a snapshot taken at ``now_ns`` on the monotonic clock.

        Returns the deviation from the expected interval, or None for the
        first snapshot.
        """
        last_ns, self._last_snapshot_ns = self._last_snapshot_ns, now_ns
        if last_ns == 0:
            return None
        expected_ns = self.snapshot_frequency_ms * 1_000_000
        jitter = (now_ns - last_ns) - expected_ns
        self._total_jitter_ns += abs(jitter)
        self._jitter_count += 1
        return jitter

    def poll_queue(self, tick_queue: queue.Queue) -> None:
        """Move ticks from a queue into the buffers while running."""
        while self.running.is_set():
            try:
                tick = tick_queue.get(timeout=_POLL_TIMEOUT_S)
            except queue.Empty:
                continue
            self.process_tick(tick)
        logger.info("shutting down feed polling")

    def process_snapshots(self) -> None:
        """Print the latest ticks every snapshot interval while running."""
        interval_s = self.snapshot_frequency_ms / 1000
        while self.running.is_set():
            spin_wait(interval_s)
            jitter = self.record_jitter(time.monotonic_ns())
            if jitter is not None:
                logger.info(
                    "Snapshot jitter (ns): current=%d avg=%s",
                    jitter,
                    self.average_jitter_ns,
                )
            spot, perp = self.snapshot()
            print("LATEST SNAPSHOT", str(spot), str(perp), sep="\n", flush=True)

    def start_feeds(self) -> None:
        """Open the feeds and run every worker until ``kill_feeds`` is called."""
        self.running.set()
        try:
            self._feeds = _open_feeds(self.symbol, self.spot_queue, self.perp_queue)
        except BaseException:
            self.running.clear()
            raise

        io_threads = [
            threading.Thread(target=feed.run, name=feed.name, daemon=True)
            for feed in self._feeds
        ]
        spot_consumer = threading.Thread(
            target=self.poll_queue, args=(self.spot_queue,), name="spot-consumer", daemon=True
        )
        perp_consumer = threading.Thread(
            target=self.poll_queue, args=(self.perp_queue,), name="perp-consumer", daemon=True
        )
        snapshotter = threading.Thread(
            target=self.process_snapshots, name="snapshot", daemon=True
        )

        workers = [spot_consumer, perp_consumer, snapshotter]
        for thread in (*io_threads, *workers):
            thread.start()
        set_affinity(spot_consumer, 0)
        set_affinity(perp_consumer, 1)
        set_affinity(snapshotter, 2)

        try:
            for thread in (*workers, *io_threads):
                thread.join()
        finally:
            self.kill_feeds()

    def kill_feeds(self) -> None:
        """Stop every worker and close the feeds."""
        self.running.clear()
        for feed in self._feeds:
            feed.close()