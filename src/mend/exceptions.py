"""Mend exception hierarchy.

All Mend-specific exceptions inherit from MendError.

Repair failures themselves (disabled, exhausted, invalid output) are
returned as values from attempt_repair(), not raised. RepairFailedError
exists only for callers that opt into exceptions via repair_or_raise().
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mend.models.repair import RepairError


class MendError(Exception):
    """Base exception for all Mend errors."""


class SchemaDefinitionError(MendError):
    """Raised when a schema node is itself malformed.

    A caller programming error, never retried by the orchestrator.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid schema at {path}: {reason}")


class RepairConfigError(MendError):
    """Raised when repair configuration is out of range or malformed."""


class RepairCancelledError(MendError):
    """Raised when a repair session is cancelled or its deadline expires.

    Partial attempt history is discarded; the session never reached a
    terminal state.
    """

    def __init__(self, attempts_started: int, reason: str = "cancelled") -> None:
        self.attempts_started = attempts_started
        self.reason = reason
        super().__init__(
            f"Repair session {reason} after {attempts_started} attempt(s)"
        )


class RepairFailedError(MendError):
    """A repair session ended in a RepairError.

    Raised by repair_or_raise(); the typed error value is kept on
    ``error`` so callers can still branch on ``error.kind``.
    """

    def __init__(self, error: RepairError) -> None:
        self.error = error
        super().__init__(
            f"Repair failed ({error.kind.value}) after "
            f"{len(error.attempts)} attempt(s)"
        )
