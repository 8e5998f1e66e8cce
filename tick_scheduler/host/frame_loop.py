"""Host-side frame loop that drives a :class:`TickScheduler`."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from ..core.tick_scheduler import TickScheduler

logger = logging.getLogger(__name__)

FrameListener = Callable[[float], None]


class FrameLoop:
    """Measure frame deltas, notify listeners and drive the scheduler.

    ``clock`` and ``sleep`` default to :func:`time.perf_counter` and
    :func:`time.sleep`; tests pass fakes to step through frames manually.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        target_fps: float = 60.0,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if target_fps <= 0:
            raise ValueError("target_fps must be > 0")
        self.scheduler = scheduler
        self.target_fps: float = target_fps
        self.frame_counter: int = 0
        self.running: bool = False
        self._clock = clock
        self._sleep = sleep
        self._listeners: List[FrameListener] = []
        self._last_step: float = clock()
        self._last_frame: float = self._last_step

    # ------------------------------------------------------------------
    # Per-frame listeners
    # ------------------------------------------------------------------
    def subscribe(self, listener: FrameListener) -> None:
        """Call ``listener(delta)`` once per frame, before the scheduler runs."""

        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: FrameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Frame dispatch
    # ------------------------------------------------------------------
    def step(self) -> float:
        """Run one frame and return the elapsed time it covered."""

        now = self._clock()
        delta = max(0.0, now - self._last_step)
        self._last_step = now

        for listener in list(self._listeners):
            try:
                listener(delta)
            except Exception:
                logger.exception("[FrameLoop] Frame listener %r failed", listener)

        self.scheduler.drive(delta)
        self.frame_counter += 1
        return delta

    def sleep_until_next_frame(self) -> None:
        """Block until the next frame should start."""

        interval = 1.0 / self.target_fps
        target = self._last_frame + interval
        now = self._clock()
        remaining = target - now
        if remaining > 0:
            self._sleep(remaining)
            self._last_frame = target
        else:
            # Behind schedule; restart the cadence from now
            self._last_frame = now

    def run(self, max_frames: Optional[int] = None) -> int:
        """Step frames until :meth:`stop` is called or ``max_frames`` ran.

        Returns the number of frames stepped by this call.
        """

        self.running = True
        frames = 0
        logger.info("[FrameLoop] Running at %.1f FPS", self.target_fps)
        try:
            while self.running and (max_frames is None or frames < max_frames):
                self.step()
                frames += 1
                if self.running:
                    self.sleep_until_next_frame()
        except KeyboardInterrupt:
            logger.info("[FrameLoop] KeyboardInterrupt caught. Stopping...")
            self.stop()
        self.running = False
        return frames

    def stop(self) -> None:
        """Leave the running state and reset the scheduler."""

        self.running = False
        self._listeners.clear()
        self.scheduler.reset()
        logger.info("[FrameLoop] Stopped after %s frames", self.frame_counter)


__all__ = ["FrameLoop", "FrameListener"]
