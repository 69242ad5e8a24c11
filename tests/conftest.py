"""Shared test fixtures for Mend.

Provides canonical schemas, a scripted model caller, and a recording
repair logger.
"""

from __future__ import annotations

import pytest

from mend.cancellation import CancellationToken
from mend.models.repair import RepairAttempt, RepairOutcome
from mend.models.schema import SchemaNode


@pytest.fixture
def person_schema() -> SchemaNode:
    """Object schema requiring ``name`` (string) and ``age`` (number)."""
    return SchemaNode.object(
        {"name": SchemaNode.string(), "age": SchemaNode.number()},
        required=["name", "age"],
    )


@pytest.fixture
def order_schema() -> SchemaNode:
    """Nested schema with arrays, enums and closed objects."""
    item = SchemaNode.object(
        {"sku": SchemaNode.string(), "qty": SchemaNode.number()},
        required=["sku", "qty"],
        additional_properties=False,
    )
    return SchemaNode.object(
        {
            "id": SchemaNode.string("Order id"),
            "status": SchemaNode.enum(["open", "shipped", "closed"]),
            "items": SchemaNode.array(item),
            "gift": SchemaNode.boolean(),
        },
        required=["id", "status", "items"],
        additional_properties=False,
    )


# ------------------------------------------------------------------
# Shared test helpers
# ------------------------------------------------------------------


class ScriptedCaller:
    """Model caller that returns canned outputs in order and records prompts.

    The last output repeats once the script runs out. Items that are
    exceptions are raised instead of returned.
    """

    def __init__(self, *outputs: object) -> None:
        self.outputs = list(outputs) or ["{}"]
        self.prompts: list[str] = []
        self.tokens: list[CancellationToken] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def __call__(self, prompt_text: str, *, cancel: CancellationToken) -> str:
        idx = min(len(self.prompts), len(self.outputs) - 1)
        self.prompts.append(prompt_text)
        self.tokens.append(cancel)
        out = self.outputs[idx]
        if isinstance(out, BaseException):
            raise out
        return out  # type: ignore[return-value]


class RecordingLogger:
    """RepairLogger that keeps every event in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def log_attempt(self, attempt: RepairAttempt) -> None:
        self.events.append(("attempt", attempt))

    def log_result(self, outcome: RepairOutcome) -> None:
        self.events.append(("result", outcome))

    @property
    def attempts(self) -> list[RepairAttempt]:
        return [p for kind, p in self.events if kind == "attempt"]  # type: ignore[misc]

    @property
    def results(self) -> list[RepairOutcome]:
        return [p for kind, p in self.events if kind == "result"]  # type: ignore[misc]


class BrokenLogger:
    """RepairLogger whose every method raises."""

    def __init__(self) -> None:
        self.calls = 0

    def log_attempt(self, attempt: RepairAttempt) -> None:
        self.calls += 1
        raise RuntimeError("sink unavailable")

    def log_result(self, outcome: RepairOutcome) -> None:
        self.calls += 1
        raise RuntimeError("sink unavailable")


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()
