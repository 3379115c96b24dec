"""Command line entry point: stream a symbol's spot and perpetual prices."""

from __future__ import annotations

import argparse
import logging
import queue
import sys

from .handler import MarketDataFeedHandler

logger = logging.getLogger(__name__)

QUEUE_CAPACITY = 1024
DEFAULT_SYMBOL = "btcusdt"
DEFAULT_FREQUENCY_MS = 500


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedmeplease",
        description="Print periodic snapshots of spot and perpetual trade prices.",
    )
    parser.add_argument("--symbol", default=DEFAULT_SYMBOL, help="trading pair, e.g. btcusdt")
    parser.add_argument(
        "--frequency-ms",
        type=_positive_int,
        default=DEFAULT_FREQUENCY_MS,
        help="snapshot interval in milliseconds",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the feed handler until interrupted; returns the exit status."""
    args = _parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logger.info("logger initialised.")

    spot_queue: queue.Queue = queue.Queue(maxsize=QUEUE_CAPACITY)
    perp_queue: queue.Queue = queue.Queue(maxsize=QUEUE_CAPACITY)
    handler = MarketDataFeedHandler(
        args.symbol.lower(), args.frequency_ms, spot_queue, perp_queue
    )

    try:
        handler.start_feeds()
    except ConnectionError as exc:
        logger.error("could not start feeds: %s", exc)
        return 1
    except KeyboardInterrupt:
        handler.kill_feeds()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())