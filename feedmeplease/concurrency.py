"""Busy waiting and thread-to-core pinning."""

from __future__ import annotations

import logging
import os
import threading
import time

logger = logging.getLogger(__name__)


def spin_wait(duration_s: float) -> None:
    """Busy-wait for ``duration_s`` seconds on the monotonic clock."""
    target_ns = int(duration_s * 1_000_000_000)
    start = time.monotonic_ns()
    while time.monotonic_ns() - start < target_ns:
        pass


def set_affinity(thread: threading.Thread, core: int) -> bool:
    """Pin a started thread to one CPU core where the platform allows it.

    Returns True when the thread was pinned. Failures are logged, not raised.
    """
    setter = getattr(os, "sched_setaffinity", None)
    if setter is None:
        return False
    native_id = thread.native_id
    if native_id is None:
        logger.warning("cannot pin thread %s: not started", thread.name)
        return False
    try:
        setter(native_id, {core})
    except (OSError, ValueError, OverflowError) as exc:
        logger.warning("sched_setaffinity failed for core %s: %s", core, exc)
        return False
    return True