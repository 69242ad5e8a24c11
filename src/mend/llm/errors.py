"""Errors raised while asking a model for a repair candidate.

The repair loop never catches these. They reach whoever called
attempt_repair() unchanged, so each one says which side is at fault:
the endpoint being unavailable, the request being refused, or the
answer being unusable.
"""

from __future__ import annotations

from mend.exceptions import MendError


class ModelCallError(MendError):
    """A model call made on behalf of a repair attempt failed.

    Attributes:
        status_code: HTTP status of the failing response, if there was one.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ModelConfigError(ModelCallError):
    """No usable endpoint settings (e.g., no API key)."""


class ModelUnavailableError(ModelCallError):
    """The endpoint stayed unreachable or overloaded after retrying.

    Attributes:
        retry_after: Server's Retry-After hint in seconds from the last
            response, or None.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(message, status_code=status_code)


class ModelRejectedError(ModelCallError):
    """The endpoint refused the request (bad key, unknown model, bad payload)."""


class ModelResponseError(ModelCallError):
    """The endpoint answered, but not with a chat completion."""
