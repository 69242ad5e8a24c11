"""Client protocol LLMModelCaller talks to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from mend.llm.client import Completion


@runtime_checkable
class ChatClient(Protocol):
    """Anything that turns chat messages into one Completion.

    ChatCompletionsClient is the bundled implementation; tests and other
    providers can supply their own.
    """

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
        ...
