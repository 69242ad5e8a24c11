"""Chat-completions transport for repair attempts.

ChatCompletionsClient sends one request per repair attempt to an
OpenAI-compatible endpoint and returns a Completion. Transient failures
(429, 5xx, refused connections) are retried with tenacity inside that
one call, never past the caller's timeout, so the repair loop sees a
single answer or a single ModelCallError per attempt.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Sequence

import httpx
import tenacity

from mend.llm.errors import (
    ModelConfigError,
    ModelRejectedError,
    ModelResponseError,
    ModelUnavailableError,
)

logger = logging.getLogger(__name__)

API_KEY_ENV = "MEND_OPENAI_API_KEY"
BASE_URL_ENV = "MEND_OPENAI_BASE_URL"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

_TRANSIENT_STATUS = frozenset({429, 500, 502, 503, 504})

# Longest server-requested pause honoured between retries, in seconds.
_MAX_RETRY_AFTER = 30.0

_backoff = tenacity.wait_exponential(multiplier=0.5, max=8)


@dataclass(frozen=True)
class Completion:
    """The part of a chat completion the repair loop cares about."""

    content: str
    finish_reason: str | None = None
    model: str | None = None

    @property
    def truncated(self) -> bool:
        """True when generation stopped at the token limit."""
        return self.finish_reason == "length"


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except ValueError:
        return None


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ModelUnavailableError):
        return True
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


def _wait(retry_state: tenacity.RetryCallState) -> float:
    """Honour Retry-After when the server sent one, else back off."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    hint = getattr(exc, "retry_after", None)
    if hint is not None:
        return min(hint, _MAX_RETRY_AFTER)
    return _backoff(retry_state)


def parse_completion(body: Any) -> Completion:
    """Pull content and finish reason out of a chat completion body.

    A message without content (e.g. a tool-call reply) yields ``""``,
    which the validator then reports as malformed.

    Raises:
        ModelResponseError: If ``body`` is not a chat completion.
    """
    try:
        choice = body["choices"][0]
        content = choice["message"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise ModelResponseError(f"Not a chat completion: {body!r:.200}") from exc
    return Completion(
        content=content,
        finish_reason=choice.get("finish_reason"),
        model=body.get("model"),
    )


class ChatCompletionsClient:
    """Sync httpx client for an OpenAI-compatible ``/chat/completions``.

    Usage::

        with ChatCompletionsClient(model="gpt-4o-mini") as client:
            caller = LLMModelCaller(client)
            outcome = attempt_repair(schema, raw, RepairConfig(), caller)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        max_retries: int = 3,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Bearer token. Falls back to MEND_OPENAI_API_KEY.
            base_url: Endpoint root. Falls back to MEND_OPENAI_BASE_URL,
                then to the OpenAI API.
            model: Model used when a request names none.
            timeout: Request timeout when the caller gives none.
            max_retries: Total tries per request for transient failures.

        Raises:
            ModelConfigError: If no API key is given or set.
        """
        key = api_key or os.environ.get(API_KEY_ENV, "")
        if not key:
            raise ModelConfigError(f"No API key: pass api_key= or set {API_KEY_ENV}")
        root = base_url or os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL
        self.url = root.rstrip("/") + "/chat/completions"
        self.model = model
        self._max_retries = max_retries
        self._http = httpx.Client(
            timeout=timeout,
            headers={"Authorization": f"Bearer {key}"},
        )

    def complete(
        self,
        messages: Sequence[dict[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Completion:
        """Request one completion, retrying transient failures.

        Args:
            messages: Chat messages, ``{"role": ..., "content": ...}``.
            model: Overrides the client's model.
            temperature: Sampling temperature, omitted when None.
            max_tokens: Output limit, omitted when None.
            response_format: e.g. ``{"type": "json_object"}``.
            timeout: Budget in seconds for this call. Bounds each HTTP
                request and stops further retries once spent.

        Raises:
            ModelUnavailableError: Transient failures outlasted the retries.
            ModelRejectedError: Any other 4xx response.
            ModelResponseError: The body is not a chat completion.
        """
        payload: dict[str, Any] = {"model": model or self.model, "messages": list(messages)}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if response_format is not None:
            payload["response_format"] = response_format

        stop = tenacity.stop_after_attempt(self._max_retries)
        if timeout is not None:
            stop = stop | tenacity.stop_after_delay(timeout)
        retrying = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_transient),
            wait=_wait,
            stop=stop,
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            response = retrying(self._post, payload, timeout)
        except httpx.TransportError as exc:
            raise ModelUnavailableError(f"Request to {self.url} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ModelResponseError(f"Response body is not JSON: {response.text[:200]}") from exc
        return parse_completion(body)

    def _post(self, payload: dict[str, Any], timeout: float | None) -> httpx.Response:
        response = self._http.post(
            self.url,
            json=payload,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        status = response.status_code
        if status in _TRANSIENT_STATUS:
            raise ModelUnavailableError(
                f"HTTP {status} from {self.url}",
                status_code=status,
                retry_after=_retry_after(response),
            )
        if status >= 400:
            raise ModelRejectedError(
                f"HTTP {status} from {self.url}: {response.text[:200]}",
                status_code=status,
            )
        return response

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ChatCompletionsClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
