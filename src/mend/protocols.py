"""Protocol definitions for Mend.

Defines the pluggable collaborators the repair loop depends on:
ModelCaller (produces a new candidate from a repair prompt) and
RepairLogger (observes attempts and terminal outcomes).

Both are injected per call; nothing here holds state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mend.cancellation import CancellationToken
    from mend.models.repair import RepairAttempt, RepairOutcome


@runtime_checkable
class ModelCaller(Protocol):
    """Protocol for model invocation.

    Any callable taking the prompt text and a keyword ``cancel`` token
    and returning raw model text works. Transport failures should be
    raised as-is; the repair loop propagates them unchanged.
    """

    def __call__(self, prompt_text: str, *, cancel: CancellationToken) -> str:
        """Send prompt_text to a model and return its raw output."""
        ...


@runtime_checkable
class RepairLogger(Protocol):
    """Protocol for repair session observers.

    Called synchronously by the repair loop: log_attempt() once per
    completed repair attempt, log_result() once per terminal outcome.
    Exceptions raised here are logged and otherwise ignored.

    An attempt is reported only once the model has answered. If the model
    caller raises, or the session is cancelled while an attempt is in
    flight, that attempt never reaches log_attempt() and no log_result()
    follows; the exception is the caller's only signal.
    """

    def log_attempt(self, attempt: RepairAttempt) -> None:
        ...

    def log_result(self, outcome: RepairOutcome) -> None:
        ...
