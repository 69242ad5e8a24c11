"""Cancellation signal handed to model callers.

A CancellationToken can be cancelled from another thread and can carry
a deadline. The repair loop checks it between steps; model callers may
check it, or use remaining() as their own request timeout.
"""

from __future__ import annotations

import threading
import time

from mend.exceptions import RepairCancelledError


class CancellationToken:
    """Thread-safe cancel flag with an optional monotonic deadline.

    Usage::

        token = CancellationToken.with_timeout(30.0)
        outcome = attempt_repair(schema, text, config, caller, cancel=token)

        # from another thread
        token.cancel()
    """

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize the token.

        Args:
            deadline: Absolute ``time.monotonic()`` value after which the
                token counts as cancelled, or None for no deadline.
        """
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> CancellationToken:
        """Create a token that expires ``seconds`` from now."""
        if seconds < 0:
            raise ValueError(f"timeout must be non-negative, got {seconds}")
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def never(cls) -> CancellationToken:
        """Create a token with no deadline that is only cancelled explicitly."""
        return cls()

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None if there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, attempts_started: int = 0) -> None:
        """Raise RepairCancelledError if the token has fired."""
        if self._event.is_set():
            raise RepairCancelledError(attempts_started, "cancelled")
        if self.expired:
            raise RepairCancelledError(attempts_started, "timed out")

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationToken({state})"
