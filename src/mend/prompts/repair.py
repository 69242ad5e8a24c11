"""Repair prompts for structurally invalid model output.

Provides the REPAIR_SYSTEM_PROMPT constant and build_repair_prompt(),
which composes the user prompt for one repair attempt from the schema,
the invalid output and its violations.

The prompt text is a pure function of its inputs: no timestamps, ids or
attempt counters, so the same failure always produces the same prompt.
"""

from __future__ import annotations

import json
from typing import Sequence

from mend.models.repair import ValidationViolation
from mend.models.schema import SchemaNode

REPAIR_SYSTEM_PROMPT: str = (
    "You are a structured-output repair tool. "
    "You receive data that failed validation against a schema, together "
    "with the list of violations. Your job is to return the same data "
    "corrected so that it satisfies the schema.\n\n"
    "Respond with ONLY the corrected data. No markdown fences, no "
    "explanation, no commentary."
)

REPAIR_INSTRUCTIONS: str = (
    "Instructions:\n"
    "1. Output ONLY the corrected structured data as a single JSON value.\n"
    "2. Do NOT introduce any field that is not declared in the schema.\n"
    "3. Do NOT change any value beyond what is needed to resolve the "
    "listed violations; keep every other field exactly as it is.\n"
    "4. Do NOT add explanations, apologies, questions, or any other "
    "conversational or exploratory text."
)


def format_violations(violations: Sequence[ValidationViolation]) -> str:
    """Render violations as a numbered list, one per line."""
    if not violations:
        return "(none reported)"
    return "\n".join(
        f"{i}. {v.render_path()} [{v.kind.value}] {v.message}"
        for i, v in enumerate(violations, start=1)
    )


def format_schema(schema: SchemaNode) -> str:
    """Serialize a schema as indented JSON in declaration order."""
    return json.dumps(schema.to_dict(), indent=2, ensure_ascii=False)


def build_repair_prompt(
    schema: SchemaNode,
    invalid_output: str,
    violations: Sequence[ValidationViolation],
) -> str:
    """Build the user prompt for one repair attempt.

    Args:
        schema: The schema the output must satisfy.
        invalid_output: The failing output, included verbatim.
        violations: Violations reported by the validator.

    Returns:
        Prompt text containing the violation list, the serialized schema,
        the invalid output and the repair instructions.
    """
    return (
        "The output below does not conform to the required schema.\n\n"
        f"Violations ({len(violations)}):\n"
        f"{format_violations(violations)}\n\n"
        "Schema:\n"
        f"{format_schema(schema)}\n\n"
        "Invalid output (verbatim, between the markers):\n"
        "<<<OUTPUT\n"
        f"{invalid_output}\n"
        "OUTPUT>>>\n\n"
        f"{REPAIR_INSTRUCTIONS}"
    )
