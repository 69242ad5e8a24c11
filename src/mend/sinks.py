"""Built-in RepairLogger sinks.

Provides ready-made observers for common setups:
NullRepairLogger, StdlibRepairLogger, ConsoleRepairLogger (Rich),
JsonLinesRepairLogger, and CompositeRepairLogger for fan-out.
"""

from __future__ import annotations

import json
import logging
from typing import IO, TYPE_CHECKING, Iterable

from mend.models.repair import RepairAttempt, RepairOutcome, RepairResult

if TYPE_CHECKING:
    from rich.console import Console

    from mend.protocols import RepairLogger

logger = logging.getLogger(__name__)


class NullRepairLogger:
    """Discard every event."""

    def log_attempt(self, attempt: RepairAttempt) -> None:
        pass

    def log_result(self, outcome: RepairOutcome) -> None:
        pass


class StdlibRepairLogger:
    """Forward events to a stdlib ``logging.Logger``.

    Attempts log at INFO, successes at INFO and failures at WARNING.
    """

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logging.getLogger("mend.repair.session")

    def log_attempt(self, attempt: RepairAttempt) -> None:
        self._logger.info(
            "Repair attempt %d: %d violation(s) before, succeeded=%s",
            attempt.attempt_number,
            len(attempt.violations_before_attempt),
            attempt.succeeded,
        )

    def log_result(self, outcome: RepairOutcome) -> None:
        if isinstance(outcome, RepairResult):
            self._logger.info(
                "Repair session succeeded: repaired=%s, attempts=%d",
                outcome.repaired,
                len(outcome.attempts),
            )
            return
        self._logger.warning(
            "Repair session failed: %s after %d attempt(s), %d violation(s) outstanding",
            outcome.kind.value,
            len(outcome.attempts),
            len(outcome.violations),
        )


class ConsoleRepairLogger:
    """Print events to a Rich console.

    Requires the ``cli`` extra (rich).
    """

    def __init__(self, console: Console | None = None) -> None:
        try:
            from rich.console import Console
        except ImportError:
            raise ImportError(
                "ConsoleRepairLogger requires rich. Install with: pip install mend[cli]"
            ) from None
        self._console = console or Console(stderr=True)

    def log_attempt(self, attempt: RepairAttempt) -> None:
        from rich.markup import escape

        status = "[green]valid[/green]" if attempt.succeeded else "[yellow]still invalid[/yellow]"
        self._console.print(
            f"[cyan]attempt {attempt.attempt_number}[/cyan] "
            f"fixing {len(attempt.violations_before_attempt)} violation(s): {status}",
            highlight=False,
        )
        for violation in attempt.violations_before_attempt:
            self._console.print(f"  [dim]{escape(str(violation))}[/dim]", highlight=False)

    def log_result(self, outcome: RepairOutcome) -> None:
        if isinstance(outcome, RepairResult):
            verb = "repaired" if outcome.repaired else "valid as given"
            self._console.print(
                f"[green]ok[/green] {verb} ({len(outcome.attempts)} attempt(s))",
                highlight=False,
            )
            return
        self._console.print(
            f"[red]{outcome.kind.value}[/red] after {len(outcome.attempts)} attempt(s)",
            highlight=False,
        )


class JsonLinesRepairLogger:
    """Write one JSON object per event to a text stream.

    Prompt text is omitted by default since it repeats the schema and
    output on every attempt; pass ``include_prompts=True`` to keep it.
    """

    def __init__(self, stream: IO[str], *, include_prompts: bool = False) -> None:
        self._stream = stream
        self._include_prompts = include_prompts

    def _write(self, record: dict) -> None:
        self._stream.write(json.dumps(record, ensure_ascii=False) + "\n")
        self._stream.flush()

    def log_attempt(self, attempt: RepairAttempt) -> None:
        record = {"event": "attempt", **attempt.to_dict()}
        if self._include_prompts:
            record["prompt_text"] = attempt.prompt_text
        self._write(record)

    def log_result(self, outcome: RepairOutcome) -> None:
        record = {"event": "result", **outcome.to_dict()}
        if self._include_prompts:
            for entry, attempt in zip(record["attempts"], outcome.attempts):
                entry["prompt_text"] = attempt.prompt_text
        self._write(record)


class CompositeRepairLogger:
    """Fan events out to several sinks in order.

    A failing sink does not stop the others from receiving the event.
    """

    def __init__(self, sinks: Iterable[RepairLogger]) -> None:
        self._sinks = tuple(sinks)

    def _each(self, method_name: str, payload: object) -> None:
        for sink in self._sinks:
            try:
                getattr(sink, method_name)(payload)
            except Exception:
                logger.warning(
                    "Sink %s.%s failed", type(sink).__name__, method_name, exc_info=True
                )

    def log_attempt(self, attempt: RepairAttempt) -> None:
        self._each("log_attempt", attempt)

    def log_result(self, outcome: RepairOutcome) -> None:
        self._each("log_result", outcome)

