# feedmeplease

A small market-data feed handler. For one symbol it opens WebSocket streams
to Binance's spot and futures markets, listens to aggregate trades and, on
the futures stream, mark-price updates, which carry the funding rate. It
keeps the latest spot and perpetual tick in a versioned double buffer and
prints a snapshot of both at a fixed interval.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
feedmeplease
```

By default this subscribes to `btcusdt` and prints a snapshot every 500 ms:

```
LATEST SNAPSHOT
Venue: BN, Symbol: BTCUSDT, Type: SPOT, Price: 65000.10000000, EventTime(ms): ..., ReceivedTime(ns): ..., FundingRate: N/A, NextFundingTime(ms): N/A
Venue: BN, Symbol: BTCUSDT, Type: PERP, Price: 64990.50000000, EventTime(ms): ..., ReceivedTime(ns): ..., FundingRate: 0.00010000, NextFundingTime(ms): N/A
```

Options:

- `--symbol SYMBOL`: the trading pair, e.g. `ethusdt` (lower-cased before
  use; default `btcusdt`).
- `--frequency-ms N`: the snapshot interval in milliseconds, a positive
  integer (default `500`).

Until a tick of a kind has arrived, its line shows an empty tick. Until the
first mark-price update arrives, perpetual ticks carry a funding rate of
`-1.00000000`.

Log messages, such as connection status and snapshot jitter, go to standard
error in the form `[HH:MM:SS] [LEVEL] message`. Press Ctrl+C to stop. If a
feed cannot be connected the command logs the error and exits with status 1.

At start-up the local clock is compared with Binance's server time
(`feedmeplease.timesync.compute_time_offset`). The difference is added to
every event time, so event times are on the local clock. If the server time
cannot be fetched, the offset is 0.

## Using it as a library

```python
import queue

from feedmeplease.handler import MarketDataFeedHandler

spot_queue = queue.Queue(maxsize=1024)
perp_queue = queue.Queue(maxsize=1024)

handler = MarketDataFeedHandler("btcusdt", 500, spot_queue, perp_queue)
handler.start_feeds()  # blocks until kill_feeds() is called from another thread
```

The modules:

- `feedmeplease.tick`: the `TickData` record (its `str()` is the snapshot
  line shown above), the `Venue` and `InstrumentType` enums, and
  `TickDataBuffer`, a double buffer with `write(tick)` and `read()`.
- `feedmeplease.callbacks`: `binance_callback_spot(tick_queue, offset_ms)`
  and `binance_callback_futures(tick_queue, funding_rates, offset_ms)` build
  handlers that turn raw stream messages into `TickData` on a queue. Messages
  that are not JSON objects are logged and skipped; ticks that do not fit in
  a full queue are dropped with a warning.
- `feedmeplease.websocket`: `WebSocketClient` (`connect`, `send`, `run`,
  `close`, `handle_response`) and `MarketDataFeed`, a client that passes each
  incoming message to a callback. Connection and write failures raise
  `ConnectionError`.
- `feedmeplease.feeds`: `start_feeds(symbol, spot_queue, perp_queue)`
  connects both streams, sends the requests built by `spot_subscription` and
  `futures_subscription`, and returns `(spot_feed, futures_feed)`.
- `feedmeplease.timesync`: `get_server_time_ms`, `get_system_time_ms` and
  `compute_time_offset`; `get_server_time_ms` raises `TimeSyncError` on
  failure.
- `feedmeplease.concurrency`: `spin_wait(duration_s)` and
  `set_affinity(thread, core)`, which pins a thread to a core where
  `os.sched_setaffinity` exists and otherwise returns `False`.
- `feedmeplease.handler`: `MarketDataFeedHandler` takes ticks off the queues,
  keeps the latest of each kind, records snapshot jitter
  (`record_jitter`, `jitter_count`, `average_jitter_ns`) and prints the
  snapshots.
- `feedmeplease.main`: `main(argv=None)`, the `feedmeplease` command.

## What it does not do

- It reads from Binance only. `Venue.HYPERLIQUID` exists as a value, but
  there is no feed for it.
- The next funding time is never filled in, so it always shows `N/A`.
- Ticks are not stored or recorded anywhere; only the latest spot and
  perpetual tick are kept, and snapshots go to standard output.
- A dropped connection is not re-established; its feed stops reading while
  the snapshots go on showing the last ticks received.