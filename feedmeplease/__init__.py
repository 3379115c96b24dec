"""Binance spot and perpetual market-data feed handler with periodic snapshots."""

__version__ = "1.0.0"