"""Mend data models: schema, configuration, and repair session records."""

from mend.models.config import (
    DEFAULT_REPAIR_ATTEMPTS,
    MAX_REPAIR_ATTEMPTS,
    RepairConfig,
    load_repair_config,
)
from mend.models.repair import (
    PathStep,
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
    render_path,
)
from mend.models.schema import SchemaKind, SchemaNode

__all__ = [
    "DEFAULT_REPAIR_ATTEMPTS",
    "MAX_REPAIR_ATTEMPTS",
    "RepairConfig",
    "load_repair_config",
    "PathStep",
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
    "render_path",
    "SchemaKind",
    "SchemaNode",
]
