"""Runtime observability helpers."""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Deque, Dict, Optional

from ..core.tick_scheduler import TickScheduler

logger = logging.getLogger(__name__)

# Rolling history length for drive durations and frame deltas
_HISTORY_LEN = 1000

# Drives slower than this are reported as over budget
_DRIVE_BUDGET_S = 0.1


class DriveStats:
    """Rolling history of drive durations and the frame deltas that fed them."""

    def __init__(self, maxlen: int = _HISTORY_LEN) -> None:
        self.durations: Deque[float] = deque(maxlen=maxlen)
        self.deltas: Deque[float] = deque(maxlen=maxlen)
        self.invocations: int = 0

    def record(self, duration: float, delta: float, invocations: int = 0) -> None:
        """Append one drive ``duration`` and its frame ``delta`` in seconds."""

        self.durations.append(duration)
        self.deltas.append(delta)
        self.invocations += invocations
        if duration > _DRIVE_BUDGET_S:
            logger.warning("[Observer] drive took %.1f ms - over budget", duration * 1000)

    def average_fps(self) -> float:
        """Return the average frame rate implied by the recorded deltas."""

        if not self.deltas:
            return 0.0
        avg = sum(self.deltas) / len(self.deltas)
        return 1.0 / avg if avg > 0 else float("inf")

    def average_drive_ms(self) -> float:
        if not self.durations:
            return 0.0
        return sum(self.durations) / len(self.durations) * 1000

    def summary(self) -> Dict[str, float]:
        return {
            "frames": float(len(self.durations)),
            "fps": self.average_fps(),
            "drive_ms": self.average_drive_ms(),
            "invocations": float(self.invocations),
        }

    def clear(self) -> None:
        self.durations.clear()
        self.deltas.clear()
        self.invocations = 0


def _recorded_delta(elapsed_seconds: float) -> float:
    try:
        delta = float(elapsed_seconds)
    except OverflowError:
        return 0.0
    return delta if math.isfinite(delta) and delta > 0 else 0.0


def install_drive_observer(
    scheduler: TickScheduler, stats: Optional[DriveStats] = None
) -> DriveStats:
    """Wrap ``scheduler.drive`` to record timings and return the stats."""

    existing = getattr(scheduler, "_drive_stats", None)
    if existing is not None:
        return existing

    stats = stats if stats is not None else DriveStats()
    original = scheduler.drive

    def wrapper(elapsed_seconds: float) -> int:
        start = time.perf_counter()
        invocations = original(elapsed_seconds)
        stats.record(time.perf_counter() - start, _recorded_delta(elapsed_seconds), invocations)
        return invocations

    scheduler.drive = wrapper  # type: ignore[method-assign]
    setattr(scheduler, "_drive_stats", stats)
    return stats


__all__ = ["DriveStats", "install_drive_observer"]
