"""Exceptions raised by the tick scheduler."""

from __future__ import annotations

from dataclasses import dataclass


class InvalidArgumentError(ValueError):
    """Registration arguments were rejected; no state was changed."""


class MissingActionError(InvalidArgumentError):
    """``register`` was called without a callable action."""


class NonPositiveRateError(InvalidArgumentError):
    """``register`` was called with a tick rate that is not a positive int."""


@dataclass(slots=True)
class ActionFailure:
    """Record of an action that raised while being driven."""

    rate: int
    action_id: str
    error: Exception


__all__ = [
    "InvalidArgumentError",
    "MissingActionError",
    "NonPositiveRateError",
    "ActionFailure",
]
