"""Explicit request context: cancellation and deadline for remote calls."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from gsreconcile.errors import CancelledError, DeadlineExceededError


@dataclass(frozen=True)
class RequestContext:
    """
    Carries cancellation and an optional deadline down the call chain.

    Notes:
        - deadline is a time.monotonic() value.
        - Cancelling stops further operations; applied ones are not undone.
    """

    deadline: Optional[float] = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def background(cls) -> "RequestContext":
        """A context that never expires unless cancelled."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None when there is no deadline)."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """
        Raises:
            CancelledError: if cancel() was called.
            DeadlineExceededError: if the deadline has passed.
        """
        if self.cancelled:
            raise CancelledError("Reconciliation cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError("Reconciliation deadline exceeded")
