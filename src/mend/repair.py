"""Bounded self-healing repair loop.

Provides attempt_repair() -- validates a model's structured output and,
while it does not conform, re-prompts the model with a deterministic
repair prompt until the output validates or the attempt budget runs out.

Flow:
    1. Validate the current candidate.
    2. No violations: return RepairResult.
    3. Repair disabled: return RepairDisabled.
    4. Budget used up: return RepairExhausted.
    5. Build the repair prompt, call the model, decode its output.
       Undecodable output: return RepairInvalidOutput.
    6. Record the attempt, goto 1 with the new candidate.

Repair failures are returned as values. Exceptions only escape for
problems outside the repair loop's own semantics: a malformed schema,
a model caller failure, or cancellation.
"""

from __future__ import annotations

import logging
from typing import Callable

from mend.cancellation import CancellationToken
from mend.models.config import RepairConfig
from mend.models.repair import (
    RepairAttempt,
    RepairContext,
    RepairDisabled,
    RepairError,
    RepairExhausted,
    RepairInvalidOutput,
    RepairOutcome,
    RepairResult,
)
from mend.models.schema import SchemaNode
from mend.prompts.repair import build_repair_prompt
from mend.protocols import ModelCaller, RepairLogger
from mend.sinks import NullRepairLogger
from mend.validation import decode_candidate, validate, validate_value

logger = logging.getLogger(__name__)


def _notify(method: Callable[[object], None], payload: object) -> None:
    """Invoke a sink method; sink failures never abort the session."""
    try:
        method(payload)
    except Exception:
        logger.warning(
            "Repair logger %s failed; continuing session",
            getattr(method, "__qualname__", method),
            exc_info=True,
        )


def _finish(sink: RepairLogger, outcome: RepairOutcome) -> RepairOutcome:
    _notify(sink.log_result, outcome)
    return outcome


def attempt_repair(
    schema: SchemaNode,
    output: str,
    config: RepairConfig,
    model_caller: ModelCaller,
    repair_logger: RepairLogger | None = None,
    *,
    cancel: CancellationToken | None = None,
) -> RepairOutcome:
    """Validate output and repair it within the configured bound.

    Args:
        schema: Shape the output must conform to. Only read, never changed.
        output: Raw model output to validate.
        config: Repair settings for this call.
        model_caller: Called as ``model_caller(prompt, cancel=token)`` to
            produce each repaired candidate.
        repair_logger: Observer for attempts and the final outcome.
        cancel: Cancellation token handed to the model caller. A token
            that never fires is used if omitted.

    Returns:
        RepairResult when the output validates (possibly after zero
        attempts), otherwise RepairDisabled, RepairExhausted or
        RepairInvalidOutput carrying the attempt history.

    Raises:
        SchemaDefinitionError: If the schema is malformed.
        RepairCancelledError: If the token fires before the session
            reaches a terminal state.
        TypeError: If config is not a RepairConfig or the model caller
            returns something other than text.
        Exception: Anything the model caller raises, unchanged.
    """
    if not isinstance(config, RepairConfig):
        raise TypeError(f"config must be a RepairConfig, got {type(config).__name__}")

    sink = repair_logger if repair_logger is not None else NullRepairLogger()
    token = cancel if cancel is not None else CancellationToken.never()
    ctx = RepairContext(schema=schema, original_output=output)

    candidate = output
    violations = validate(schema, output)

    while True:
        if not violations:
            logger.debug("Output valid after %d repair attempt(s)", ctx.attempt_count)
            return _finish(sink, RepairResult(
                repaired=ctx.attempt_count > 0,
                attempts=ctx.history(),
                final_output=candidate,
            ))

        if not config.enabled:
            logger.debug("Output invalid and repair disabled (%d violation(s))", len(violations))
            return _finish(sink, RepairDisabled(
                last_invalid_output=candidate,
                violations=tuple(violations),
            ))

        if ctx.attempt_count >= config.max_attempts:
            logger.debug(
                "Repair budget exhausted after %d attempt(s), %d violation(s) remain",
                ctx.attempt_count, len(violations),
            )
            return _finish(sink, RepairExhausted(
                last_invalid_output=candidate,
                attempts=ctx.history(),
                violations=tuple(violations),
            ))

        token.raise_if_cancelled(ctx.attempt_count)

        attempt_number = ctx.attempt_count + 1
        prompt = build_repair_prompt(schema, candidate, violations)
        logger.debug(
            "Repair attempt %d/%d for %d violation(s)",
            attempt_number, config.max_attempts, len(violations),
        )

        raw = model_caller(prompt, cancel=token)
        token.raise_if_cancelled(attempt_number)
        if not isinstance(raw, str):
            raise TypeError(
                f"model caller must return str, got {type(raw).__name__}"
            )

        decoded = decode_candidate(raw)
        if not decoded.ok:
            attempt = RepairAttempt(
                attempt_number=attempt_number,
                violations_before_attempt=tuple(violations),
                prompt_text=prompt,
                candidate_output=raw,
                succeeded=False,
            )
            ctx.record(attempt)
            _notify(sink.log_attempt, attempt)
            logger.debug("Repair attempt %d returned unparseable output", attempt_number)
            return _finish(sink, RepairInvalidOutput(
                last_invalid_output=raw,
                attempts=ctx.history(),
                parse_error=decoded.error or "",
            ))

        next_violations = validate_value(schema, decoded.value)
        attempt = RepairAttempt(
            attempt_number=attempt_number,
            violations_before_attempt=tuple(violations),
            prompt_text=prompt,
            candidate_output=raw,
            succeeded=not next_violations,
        )
        ctx.record(attempt)
        _notify(sink.log_attempt, attempt)

        candidate = raw
        violations = next_violations


def repair_or_raise(
    schema: SchemaNode,
    output: str,
    config: RepairConfig,
    model_caller: ModelCaller,
    repair_logger: RepairLogger | None = None,
    *,
    cancel: CancellationToken | None = None,
) -> RepairResult:
    """Like attempt_repair(), but raise instead of returning a RepairError.

    Raises:
        RepairFailedError: Carrying the RepairError value on ``.error``.
    """
    outcome = attempt_repair(
        schema, output, config, model_caller, repair_logger, cancel=cancel
    )
    if isinstance(outcome, RepairError):
        raise outcome.to_exception()
    return outcome
