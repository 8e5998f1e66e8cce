"""Frequency-based action scheduler driven by a per-frame time delta."""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterator, List, Optional, Set

from .errors import MissingActionError, NonPositiveRateError
from .frequency_group import Action, FrequencyGroup
from .reporting import FailureReporter, describe_action, log_action_failure

logger = logging.getLogger(__name__)

ELAPSED_POLICIES = ("clamp", "reject")


class TickScheduler:
    """Run registered actions at fixed rates, spread round-robin over ticks.

    Actions are grouped by tick rate (ticks per second). Each call to
    :meth:`drive` adds the elapsed time to every group, works out how many
    whole ticks passed and runs a slice of the group's actions per tick, so a
    backlog of ticks rotates through the list instead of running every action
    at once.

    The scheduler is not thread safe. All calls must come from the thread
    that drives it.
    """

    def __init__(
        self,
        reporter: Optional[FailureReporter] = None,
        negative_elapsed: str = "clamp",
    ) -> None:
        if negative_elapsed not in ELAPSED_POLICIES:
            raise ValueError(f"Unknown elapsed time policy: {negative_elapsed!r}")
        self.reporter: FailureReporter = (
            reporter if reporter is not None else log_action_failure
        )
        self.negative_elapsed = negative_elapsed
        self._groups: Dict[int, FrequencyGroup] = {}
        self._pending_removals: Set[int] = set()
        self._driving = False

    # ------------------------------------------------------------------
    # Registration API
    # ------------------------------------------------------------------
    def register(self, rate: int, action: Action) -> None:
        """Run ``action`` ``rate`` times per second.

        Registering the same action twice under one rate is a no-op. The same
        action may be registered under several rates.
        """

        if action is None or not callable(action):
            raise MissingActionError("action must be a callable")
        if isinstance(rate, bool) or not isinstance(rate, int) or rate <= 0:
            raise NonPositiveRateError(
                f"Ticks per second must be a positive integer, got {rate!r}"
            )

        group = self._groups.get(rate)
        if group is None:
            group = FrequencyGroup(rate)
            self._groups[rate] = group
            logger.debug("[TickScheduler] Created group for %s Hz", rate)
        group.add(action)

    def unregister(self, rate: int, action: Action) -> None:
        """Stop running ``action`` at ``rate``. Unknown pairs are ignored."""

        group = self._groups.get(rate)
        if group is None or not group.remove(action):
            return
        if not group.actions:
            self._pending_removals.add(rate)

    def reset(self) -> None:
        """Drop every group and all pending removals."""

        self._groups.clear()
        self._pending_removals.clear()

    # ------------------------------------------------------------------
    # Tick dispatch
    # ------------------------------------------------------------------
    def drive(self, elapsed_seconds: float) -> int:
        """Advance all groups by ``elapsed_seconds`` and run due actions.

        Returns the number of action invocations, failed ones included.
        Failures raised by actions are passed to :attr:`reporter` and never
        escape this method.
        """

        if self._driving:
            logger.warning("[TickScheduler] drive() called re-entrantly; ignoring")
            return 0

        elapsed = self._sanitize_elapsed(elapsed_seconds)
        self._sweep_pending_removals()

        executed = 0
        self._driving = True
        try:
            for group in list(self._groups.values()):
                if self._groups.get(group.rate) is not group:
                    continue
                ticks = group.consume(elapsed)
                if ticks == 0 or not group.actions:
                    continue
                executed += self._run_ticks(group, ticks)
        finally:
            self._driving = False
        return executed

    def _run_ticks(self, group: FrequencyGroup, ticks: int) -> int:
        executed = 0
        per_tick = group.slice_size(ticks)
        for _ in range(ticks):
            wraps = group.wraps
            for _ in range(min(per_tick, len(group.actions) - group.cursor)):
                # Actions may reset the scheduler or empty their own group
                if self._groups.get(group.rate) is not group or not group.actions:
                    return executed
                action = group.actions[group.cursor]
                group.advance()
                self._invoke(group.rate, action)
                executed += 1
                # End of the list, reached by advancing or by a removal
                if group.wraps != wraps:
                    break
        return executed

    def _invoke(self, rate: int, action: Action) -> None:
        try:
            action()
        except Exception as exc:
            self._report(rate, action, exc)

    def _report(self, rate: int, action: Action, error: Exception) -> None:
        try:
            self.reporter(rate, describe_action(action), error)
        except Exception:
            logger.exception("[TickScheduler] Failure reporter raised for %s Hz", rate)

    def _sweep_pending_removals(self) -> None:
        for rate in self._pending_removals:
            group = self._groups.get(rate)
            # Re-registered since it was emptied
            if group is not None and not group.actions:
                del self._groups[rate]
                logger.debug("[TickScheduler] Removed empty group for %s Hz", rate)
        self._pending_removals.clear()

    def _sanitize_elapsed(self, elapsed_seconds: float) -> float:
        try:
            elapsed = float(elapsed_seconds)
        except OverflowError:
            elapsed = math.inf
        if math.isfinite(elapsed) and elapsed >= 0.0:
            return elapsed
        if self.negative_elapsed == "reject":
            raise ValueError(
                f"elapsed_seconds must be finite and non-negative, got {elapsed_seconds!r}"
            )
        logger.warning(
            "[TickScheduler] Ignoring invalid elapsed time %r; treating as 0.0",
            elapsed_seconds,
        )
        return 0.0

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def rates(self) -> List[int]:
        """Return the rates that currently have a group."""

        return list(self._groups)

    def group(self, rate: int) -> Optional[FrequencyGroup]:
        """Return the live group for ``rate`` if there is one."""

        return self._groups.get(rate)

    def action_count(self, rate: int) -> int:
        group = self._groups.get(rate)
        return len(group) if group is not None else 0

    @property
    def pending_removals(self) -> Set[int]:
        return set(self._pending_removals)

    def __contains__(self, rate: object) -> bool:
        return rate in self._groups

    def __iter__(self) -> Iterator[FrequencyGroup]:
        return iter(list(self._groups.values()))

    def __len__(self) -> int:
        return len(self._groups)


__all__ = ["TickScheduler", "ELAPSED_POLICIES"]
