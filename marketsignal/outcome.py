"""Explicit result wrapper for best-effort side calls.

Persistence and commentary calls must never abort the signal pipeline.
Instead of a bare try/except at each call site, callers run them through
`attempt` and decide visibly what to do with `Outcome.error`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value


def attempt(label: str, fn: Callable[..., T], *args, **kwargs) -> Outcome[T]:
    """Run fn and capture any exception as an Outcome.

    The failure is logged as a warning under `label`; whether to act on it
    is the caller's decision.
    """
    try:
        return Outcome(value=fn(*args, **kwargs))
    except Exception as exc:
        logger.warning(f"{label} failed: {exc}")
        return Outcome(error=exc)
