"""Mend: bounded self-healing repair for structured LLM output.

Validates a model's structured output against a declared schema and,
when it does not conform, re-prompts the model with a deterministic
repair prompt a bounded number of times.
"""

from mend._version import __version__

# Core entry points
from mend.repair import attempt_repair, repair_or_raise

# Schema and validation
from mend.models.schema import SchemaKind, SchemaNode
from mend.validation import Candidate, check_schema, decode_candidate, validate, validate_value

# Prompts
from mend.prompts.repair import REPAIR_SYSTEM_PROMPT, build_repair_prompt

# Configuration
from mend.models.config import (
    DEFAULT_REPAIR_ATTEMPTS,
    MAX_REPAIR_ATTEMPTS,
    RepairConfig,
    load_repair_config,
)

# Session records and outcomes
from mend.models.repair import (
    RepairAttempt,
    RepairContext,
    RepairDisabled,
    RepairError,
    RepairErrorKind,
    RepairExhausted,
    RepairInvalidOutput,
    RepairOutcome,
    RepairResult,
    ValidationViolation,
    ViolationKind,
)

# Protocols, cancellation and sinks
from mend.protocols import ModelCaller, RepairLogger
from mend.cancellation import CancellationToken
from mend.sinks import (
    CompositeRepairLogger,
    ConsoleRepairLogger,
    JsonLinesRepairLogger,
    NullRepairLogger,
    StdlibRepairLogger,
)

# Exceptions
from mend.exceptions import (
    MendError,
    RepairCancelledError,
    RepairConfigError,
    RepairFailedError,
    SchemaDefinitionError,
)

__all__ = [
    "__version__",
    "attempt_repair",
    "repair_or_raise",
    "SchemaKind",
    "SchemaNode",
    "Candidate",
    "check_schema",
    "decode_candidate",
    "validate",
    "validate_value",
    "REPAIR_SYSTEM_PROMPT",
    "build_repair_prompt",
    "DEFAULT_REPAIR_ATTEMPTS",
    "MAX_REPAIR_ATTEMPTS",
    "RepairConfig",
    "load_repair_config",
    "RepairAttempt",
    "RepairContext",
    "RepairDisabled",
    "RepairError",
    "RepairErrorKind",
    "RepairExhausted",
    "RepairInvalidOutput",
    "RepairOutcome",
    "RepairResult",
    "ValidationViolation",
    "ViolationKind",
    "ModelCaller",
    "RepairLogger",
    "CancellationToken",
    "CompositeRepairLogger",
    "ConsoleRepairLogger",
    "JsonLinesRepairLogger",
    "NullRepairLogger",
    "StdlibRepairLogger",
    "MendError",
    "RepairCancelledError",
    "RepairConfigError",
    "RepairFailedError",
    "SchemaDefinitionError",
]
