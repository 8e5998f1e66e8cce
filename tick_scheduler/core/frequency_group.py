"""Per-rate bookkeeping for the tick scheduler."""

from __future__ import annotations

import math
from types import MethodType
from typing import Callable, List

Action = Callable[[], None]

# Absorbs float error so that ``k / rate`` seconds always yields ``k`` ticks.
_TICK_EPSILON = 1e-9


def same_action(a: Action, b: Action) -> bool:
    """Return ``True`` if ``a`` and ``b`` are the same action.

    Plain callables compare by identity. Bound methods are recreated on every
    attribute access, so two bound methods match when they wrap the same
    function on the same object.
    """

    if a is b:
        return True
    if isinstance(a, MethodType) and isinstance(b, MethodType):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


class FrequencyGroup:
    """Actions sharing one tick rate, plus their timing and cursor state."""

    __slots__ = (
        "rate",
        "seconds_per_tick",
        "actions",
        "accumulated_time",
        "cursor",
        "wraps",
    )

    def __init__(self, rate: int) -> None:
        self.rate: int = rate
        self.seconds_per_tick: float = 1.0 / rate
        self.actions: List[Action] = []
        self.accumulated_time: float = 0.0
        self.cursor: int = 0
        # Times the cursor went back to 0, by advance or by removal
        self.wraps: int = 0

    # ------------------------------------------------------------------
    # Action list
    # ------------------------------------------------------------------
    def index_of(self, action: Action) -> int:
        """Return the index of ``action`` or ``-1`` if it is not registered."""

        for idx, existing in enumerate(self.actions):
            if same_action(existing, action):
                return idx
        return -1

    def add(self, action: Action) -> bool:
        """Append ``action`` unless already present. Returns ``True`` if added."""

        if self.index_of(action) >= 0:
            return False
        self.actions.append(action)
        return True

    def remove(self, action: Action) -> bool:
        """Remove the first match of ``action``. Returns ``True`` if removed."""

        idx = self.index_of(action)
        if idx < 0:
            return False
        del self.actions[idx]
        # Keep the cursor on the action that was due next
        if idx < self.cursor:
            self.cursor -= 1
        if self.cursor >= len(self.actions):
            self._wrap()
        return True

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------
    def consume(self, elapsed: float) -> int:
        """Add ``elapsed`` seconds and drain every whole tick from it.

        Returns the number of ticks drained. The fractional remainder stays in
        :attr:`accumulated_time` for the next call.
        """

        self.accumulated_time += elapsed
        ticks = math.floor(self.accumulated_time * self.rate + _TICK_EPSILON)
        if ticks <= 0:
            return 0
        self.accumulated_time = max(0.0, self.accumulated_time - ticks / self.rate)
        return ticks

    def slice_size(self, ticks: int) -> int:
        """Number of actions to run per tick when ``ticks`` are due."""

        return max(1, len(self.actions) // ticks)

    def advance(self) -> None:
        """Move the cursor to the next action, wrapping at the end."""

        self.cursor += 1
        if self.cursor >= len(self.actions):
            self._wrap()

    def _wrap(self) -> None:
        self.cursor = 0
        self.wraps += 1

    def __len__(self) -> int:
        return len(self.actions)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (
            f"FrequencyGroup(rate={self.rate}, actions={len(self.actions)}, "
            f"accumulated_time={self.accumulated_time:.6f}, cursor={self.cursor})"
        )


__all__ = ["Action", "FrequencyGroup", "same_action"]
