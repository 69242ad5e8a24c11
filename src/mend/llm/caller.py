"""ModelCaller adapter over a ChatClient.

LLMModelCaller turns a repair prompt into one chat completion request
and returns the raw assistant text for the repair loop to validate.
"""

from __future__ import annotations

import logging

from mend.cancellation import CancellationToken
from mend.llm.protocols import ChatClient
from mend.prompts.repair import REPAIR_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_JSON_OBJECT = {"type": "json_object"}


class LLMModelCaller:
    """Implements the ModelCaller protocol on top of a ChatClient.

    Sends the repair system prompt plus the repair prompt as a user
    message. The token's remaining time, when it has a deadline, is
    forwarded as the request timeout; cancellation itself is checked by
    the repair loop before and after the call.

    Usage::

        from mend import RepairConfig, attempt_repair
        from mend.llm import ChatCompletionsClient, LLMModelCaller

        with ChatCompletionsClient() as client:
            caller = LLMModelCaller(client, model="gpt-4o-mini")
            outcome = attempt_repair(schema, raw, RepairConfig(), caller)
    """

    def __init__(
        self,
        client: ChatClient,
        *,
        model: str | None = None,
        temperature: float = 0.0,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        json_mode: bool = True,
    ) -> None:
        """Initialize the caller.

        Args:
            client: Sends the chat request.
            model: Model to use. Falls back to the client's model.
            temperature: Sampling temperature. Defaults to 0 so repairs
                stay as close to the input as the model allows.
            max_tokens: Maximum tokens for the repaired output.
            system_prompt: Custom system prompt. Falls back to
                REPAIR_SYSTEM_PROMPT.
            json_mode: Request ``response_format={"type": "json_object"}``.
        """
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt or REPAIR_SYSTEM_PROMPT
        self._json_mode = json_mode

    def build_messages(self, prompt_text: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": prompt_text},
        ]

    def __call__(self, prompt_text: str, *, cancel: CancellationToken) -> str:
        completion = self._client.complete(
            self.build_messages(prompt_text),
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format=dict(_JSON_OBJECT) if self._json_mode else None,
            timeout=cancel.remaining(),
        )
        if completion.truncated:
            logger.warning(
                "Repair candidate stopped at the token limit after %d characters; "
                "expect it to fail parsing",
                len(completion.content),
            )
        logger.debug("Model returned %d characters", len(completion.content))
        return completion.content
