"""Repair Basics (attempt_repair, offline)

The repair loop is a standalone primitive: validate -> prompt -> call model ->
re-validate. It has no network dependency of its own; the model is any callable
taking the prompt and a cancellation token. This file drives it with scripted
callers so every outcome can be shown without an API key.

Demonstrates: SchemaNode, validate(), build_repair_prompt(), attempt_repair(),
              RepairResult, RepairDisabled, RepairExhausted, RepairInvalidOutput
"""

from mend import (
    RepairConfig,
    RepairDisabled,
    RepairExhausted,
    RepairInvalidOutput,
    RepairResult,
    SchemaNode,
    StdlibRepairLogger,
    attempt_repair,
    build_repair_prompt,
    validate,
)

PERSON = SchemaNode.object(
    {
        "name": SchemaNode.string("Full name"),
        "age": SchemaNode.number(),
        "hobbies": SchemaNode.array(SchemaNode.string()),
    },
    required=["name", "age"],
    additional_properties=False,
)


def scripted(*outputs):
    """A model caller that replays canned outputs."""
    remaining = list(outputs)

    def call(prompt_text, *, cancel):
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]

    return call


# =============================================================================
# Part 1: Validation and the repair prompt
# =============================================================================

def part1_validate_and_prompt():
    raw = '{"name": "Alice", "nickname": "Al"}'
    violations = validate(PERSON, raw)
    for v in violations:
        print(f"  {v}")

    print()
    print(build_repair_prompt(PERSON, raw, violations))


# =============================================================================
# Part 2: One outcome per terminal state
# =============================================================================

def part2_outcomes():
    raw = '{"name": "Alice"}'
    fixed = '{"name": "Alice", "age": 30}'

    cases = [
        ("repaired", RepairConfig(max_attempts=1), scripted(fixed)),
        ("disabled", RepairConfig.disabled(), scripted(fixed)),
        ("exhausted", RepairConfig(max_attempts=2), scripted(raw)),
        ("unparseable", RepairConfig(max_attempts=3), scripted('{"name": "Ali')),
    ]
    for label, config, caller in cases:
        outcome = attempt_repair(PERSON, raw, config, caller, StdlibRepairLogger())
        if isinstance(outcome, RepairResult):
            print(f"{label}: ok, {len(outcome.attempts)} attempt(s) -> {outcome.final_output}")
        elif isinstance(outcome, RepairDisabled):
            print(f"{label}: {outcome.kind.value}, {len(outcome.violations)} violation(s)")
        elif isinstance(outcome, RepairExhausted):
            print(f"{label}: {outcome.kind.value}, last output {outcome.last_invalid_output}")
        elif isinstance(outcome, RepairInvalidOutput):
            print(f"{label}: {outcome.kind.value}, {outcome.parse_error}")


def main():
    print("=== Part 1: validate + repair prompt ===\n")
    part1_validate_and_prompt()
    print("\n=== Part 2: outcomes ===\n")
    part2_outcomes()


if __name__ == "__main__":
    main()
