"""Failure reporters for actions that raise during ``drive``."""

from __future__ import annotations

import logging
from typing import Any, Callable, List

from .errors import ActionFailure

logger = logging.getLogger(__name__)

FailureReporter = Callable[[int, str, Exception], None]


def describe_action(action: Any) -> str:
    """Return an opaque diagnostic identifier for ``action``."""

    name = getattr(action, "__qualname__", None) or type(action).__qualname__
    return f"{name}@{id(action):#x}"


def log_action_failure(rate: int, action_id: str, error: Exception) -> None:
    """Default reporter: log the failure with its traceback and carry on."""

    logger.error(
        "[TickScheduler] Error executing tick action %s at %s Hz: %s",
        action_id,
        rate,
        error,
        exc_info=(type(error), error, error.__traceback__),
    )


class FailureCollector:
    """Reporter that keeps every failure it is given."""

    def __init__(self) -> None:
        self.failures: List[ActionFailure] = []

    def __call__(self, rate: int, action_id: str, error: Exception) -> None:
        self.failures.append(ActionFailure(rate, action_id, error))

    def clear(self) -> None:
        self.failures.clear()


__all__ = [
    "FailureReporter",
    "FailureCollector",
    "describe_action",
    "log_action_failure",
]
