"""Clock offset between the local system and the exchange server."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request

logger = logging.getLogger(__name__)

SERVER_TIME_URL = "https://api.binance.com/api/v3/time"


class TimeSyncError(Exception):
    """The server time could not be obtained."""


def get_server_time_ms(url: str = SERVER_TIME_URL, timeout: float = 5.0) -> int:
    """Fetch the server time in milliseconds from a ``serverTime`` JSON field."""
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
    except (urllib.error.URLError, OSError, ValueError) as exc:
        logger.error("request for server time failed: %s", exc)
        raise TimeSyncError(f"request failed: {exc}") from exc

    try:
        document = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("JSON parse error: %s", exc)
        raise TimeSyncError(f"JSON parse error: {exc}") from exc

    if not isinstance(document, dict) or "serverTime" not in document:
        logger.error("No serverTime field in response")
        raise TimeSyncError("no serverTime field in response")

    server_time = document["serverTime"]
    if not isinstance(server_time, int) or isinstance(server_time, bool):
        raise TimeSyncError(f"serverTime is not an integer: {server_time!r}")
    return server_time


def get_system_time_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def compute_time_offset(url: str = SERVER_TIME_URL) -> int:
    """Return system time minus server time in ms, or 0 if the server fails."""
    system_time = get_system_time_ms()
    try:
        server_time = get_server_time_ms(url)
    except TimeSyncError:
        logger.warning("Failed to get server time. Using offset = 0")
        return 0
    offset = system_time - server_time
    logger.info(
        "System time: %d ms, server time: %d ms, offset: %d ms",
        system_time,
        server_time,
        offset,
    )
    return offset