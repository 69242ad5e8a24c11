"""Configuration models for Mend.

RepairConfig holds the per-call repair settings. It is validated at
construction and frozen afterwards, so an out-of-range value can never
reach the orchestrator.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mend.exceptions import RepairConfigError

# Hard ceiling on repair attempts per session.
MAX_REPAIR_ATTEMPTS: int = 3

DEFAULT_REPAIR_ATTEMPTS: int = 1

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


class RepairConfig(BaseModel):
    """Per-call repair configuration.

    Attributes:
        enabled: When False, any invalid output ends the session with
            RepairDisabled and the model is never called.
        max_attempts: Upper bound on repair attempts, 0-3 inclusive.
            0 validates without ever repairing.

    Example::

        from mend import RepairConfig
        config = RepairConfig(max_attempts=2)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    enabled: bool = True
    max_attempts: int = Field(default=DEFAULT_REPAIR_ATTEMPTS, ge=0, le=MAX_REPAIR_ATTEMPTS)

    @classmethod
    def disabled(cls) -> RepairConfig:
        return cls(enabled=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RepairConfig:
        """Build a config from MEND_REPAIR_ENABLED / MEND_MAX_REPAIR_ATTEMPTS.

        Unset variables fall back to the field defaults.

        Raises:
            RepairConfigError: If a variable is set to an unusable value.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}

        raw_enabled = env.get("MEND_REPAIR_ENABLED")
        if raw_enabled is not None:
            lowered = raw_enabled.strip().lower()
            if lowered in _TRUE_STRINGS:
                data["enabled"] = True
            elif lowered in _FALSE_STRINGS:
                data["enabled"] = False
            else:
                raise RepairConfigError(
                    f"MEND_REPAIR_ENABLED must be a boolean, got {raw_enabled!r}"
                )

        raw_attempts = env.get("MEND_MAX_REPAIR_ATTEMPTS")
        if raw_attempts is not None:
            try:
                data["max_attempts"] = int(raw_attempts.strip())
            except ValueError:
                raise RepairConfigError(
                    f"MEND_MAX_REPAIR_ATTEMPTS must be an integer, got {raw_attempts!r}"
                ) from None

        return load_repair_config(data)


def load_repair_config(data: Mapping[str, Any] | None = None) -> RepairConfig:
    """Validate a mapping into a RepairConfig.

    Out-of-range values are rejected, never clamped.

    Raises:
        RepairConfigError: If the mapping does not describe a valid config.
    """
    try:
        return RepairConfig.model_validate(dict(data or {}))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise RepairConfigError(f"Invalid repair configuration: {problems}") from exc
