"""Tick records and the double-slot buffer that holds the latest one."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

_VENUE_LEN = 15
_SYMBOL_LEN = 31
_TYPE_LEN = 7


class Venue(str, Enum):
    """Trading venues, valued by their short code."""

    BINANCE = "BN"
    HYPERLIQUID = "HYP"

    def __str__(self) -> str:
        return self.value


class InstrumentType(str, Enum):
    """Kinds of instrument a tick can describe."""

    SPOT = "SPOT"
    PERP = "PERP"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TickData:
    """A single market-data tick.

    Text fields are cut to the widths used on the wire: 15 characters for the
    venue, 31 for the symbol and 7 for the instrument type.
    """

    venue: str = ""
    symbol: str = ""
    type: str = ""
    price: float = 0.0
    event_time_ms: int = 0
    received_time_ns: int = 0
    funding_rate: float = math.nan
    next_funding_time_ms: int = -1

    def __post_init__(self) -> None:
        object.__setattr__(self, "venue", str(self.venue)[:_VENUE_LEN])
        object.__setattr__(self, "symbol", str(self.symbol)[:_SYMBOL_LEN])
        object.__setattr__(self, "type", str(self.type)[:_TYPE_LEN])

    def __str__(self) -> str:
        funding = "N/A" if math.isnan(self.funding_rate) else f"{self.funding_rate:.8f}"
        next_funding = (
            "N/A" if self.next_funding_time_ms == -1 else str(self.next_funding_time_ms)
        )
        return (
            f"Venue: {self.venue}, Symbol: {self.symbol}, Type: {self.type}, "
            f"Price: {self.price:.8f}, EventTime(ms): {self.event_time_ms}, "
            f"ReceivedTime(ns): {self.received_time_ns}, FundingRate: {funding}, "
            f"NextFundingTime(ms): {next_funding}"
        )


class TickDataBuffer:
    """Holds the latest tick in one of two slots selected by a version counter.

    One thread writes; any number of threads read. A reader retries until the
    version it saw before reading a slot is still current afterwards.
    """

    def __init__(self) -> None:
        self._version = 0
        self._slots = [TickData(), TickData()]

    @property
    def version(self) -> int:
        """Number of ticks written so far."""
        return self._version

    def write(self, tick: TickData) -> None:
        """Store a tick as the newest one."""
        new_version = self._version + 1
        self._slots[new_version % 2] = tick
        self._version = new_version

    def read(self) -> TickData:
        """Return the newest tick, or an empty tick if none was written."""
        while True:
            before = self._version
            tick = self._slots[before % 2]
            if self._version == before:
                return tick