"""Repair session models.

Provides ValidationViolation, RepairAttempt, RepairResult, the RepairError
variants, and RepairContext for the validate -> repair -> re-validate loop.

Everything returned to callers is frozen. RepairContext is the only
mutable type and never leaves the orchestrator call that created it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, Union

from mend.models.schema import SchemaNode

# A path step is a property name or an array index.
PathStep = Union[str, int]


class ViolationKind(str, enum.Enum):
    """Kinds of structural violation the validator reports."""

    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"
    MALFORMED_STRUCTURE = "malformed_structure"
    UNEXPECTED_ADDITIONAL_FIELD = "unexpected_additional_field"


def render_path(path: tuple[PathStep, ...]) -> str:
    """Render a path as ``$.name[0].field``."""
    parts = ["$"]
    for step in path:
        if isinstance(step, int):
            parts.append(f"[{step}]")
        else:
            parts.append(f".{step}")
    return "".join(parts)


@dataclass(frozen=True)
class ValidationViolation:
    """One structural violation found in a candidate output.

    Attributes:
        path: Steps from the root to the offending value.
        kind: Which structural rule was broken.
        message: Human-readable explanation.
    """

    path: tuple[PathStep, ...]
    kind: ViolationKind
    message: str

    def __post_init__(self) -> None:
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))

    def render_path(self) -> str:
        return render_path(self.path)

    def __str__(self) -> str:
        return f"{self.render_path()} [{self.kind.value}] {self.message}"

    def to_dict(self) -> dict:
        return {"path": self.render_path(), "kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class RepairAttempt:
    """Record of one Repairing transition.

    Attributes:
        attempt_number: 1-based position in the session.
        violations_before_attempt: Violations the prompt asked to fix.
        prompt_text: Exact prompt sent to the model caller.
        candidate_output: Raw text the model caller returned.
        succeeded: Whether the candidate validated cleanly.
    """

    attempt_number: int
    violations_before_attempt: tuple[ValidationViolation, ...]
    prompt_text: str
    candidate_output: str
    succeeded: bool = False

    def to_dict(self) -> dict:
        return {
            "attempt_number": self.attempt_number,
            "violations_before_attempt": [v.to_dict() for v in self.violations_before_attempt],
            "candidate_output": self.candidate_output,
            "succeeded": self.succeeded,
        }


@dataclass(frozen=True)
class RepairResult:
    """Successful end of a repair session.

    ``repaired`` is False when the original output already validated
    and no attempt was made.
    """

    repaired: bool
    attempts: tuple[RepairAttempt, ...]
    final_output: str

    def to_dict(self) -> dict:
        return {
            "status": "success",
            "repaired": self.repaired,
            "attempts": [a.to_dict() for a in self.attempts],
            "final_output": self.final_output,
        }


class RepairErrorKind(str, enum.Enum):
    """Failure kinds a repair session can end in."""

    DISABLED = "repair_disabled"
    EXHAUSTED = "repair_exhausted"
    INVALID_OUTPUT = "repair_invalid_output"


@dataclass(frozen=True)
class RepairError:
    """Base of the failed-session variants.

    Never instantiated directly; match on the subclass or on ``kind``.

    Attributes:
        last_invalid_output: Most recent candidate that did not validate
            (or could not be parsed).
        attempts: Attempt history accumulated before the failure.
        violations: Violations outstanding at failure time. Empty for
            RepairInvalidOutput, whose candidate never reached the
            validator.
    """

    kind: ClassVar[RepairErrorKind]

    last_invalid_output: str
    attempts: tuple[RepairAttempt, ...] = ()
    violations: tuple[ValidationViolation, ...] = ()

    def to_exception(self):
        """Wrap this value in a raisable RepairFailedError."""
        from mend.exceptions import RepairFailedError

        return RepairFailedError(self)

    def to_dict(self) -> dict:
        return {
            "status": self.kind.value,
            "attempts": [a.to_dict() for a in self.attempts],
            "violations": [v.to_dict() for v in self.violations],
            "last_invalid_output": self.last_invalid_output,
        }


@dataclass(frozen=True)
class RepairDisabled(RepairError):
    """Repair was needed but configuration does not permit it."""

    kind: ClassVar[RepairErrorKind] = RepairErrorKind.DISABLED


@dataclass(frozen=True)
class RepairExhausted(RepairError):
    """Violations persisted after the configured number of attempts."""

    kind: ClassVar[RepairErrorKind] = RepairErrorKind.EXHAUSTED


@dataclass(frozen=True)
class RepairInvalidOutput(RepairError):
    """The model's repair output could not be parsed at all."""

    kind: ClassVar[RepairErrorKind] = RepairErrorKind.INVALID_OUTPUT

    parse_error: str = ""

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["parse_error"] = self.parse_error
        return d


RepairOutcome = Union[RepairResult, RepairError]


@dataclass
class RepairContext:
    """Transient state of one repair session.

    Owned by a single attempt_repair() call. The attempt list is only
    ever appended to.
    """

    schema: SchemaNode
    original_output: str
    attempts: list[RepairAttempt] = field(default_factory=list)

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    def record(self, attempt: RepairAttempt) -> None:
        if attempt.attempt_number != self.attempt_count + 1:
            raise ValueError(
                f"Attempt {attempt.attempt_number} recorded out of order "
                f"(expected {self.attempt_count + 1})"
            )
        self.attempts.append(attempt)

    def history(self) -> tuple[RepairAttempt, ...]:
        return tuple(self.attempts)
