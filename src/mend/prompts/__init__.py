"""Prompt text used by the repair loop."""

from mend.prompts.repair import (
    REPAIR_INSTRUCTIONS,
    REPAIR_SYSTEM_PROMPT,
    build_repair_prompt,
    format_schema,
    format_violations,
)

__all__ = [
    "REPAIR_INSTRUCTIONS",
    "REPAIR_SYSTEM_PROMPT",
    "build_repair_prompt",
    "format_schema",
    "format_violations",
]
