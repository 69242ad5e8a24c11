"""Model access for repair attempts.

ChatCompletionsClient talks to an OpenAI-compatible endpoint;
LLMModelCaller adapts any ChatClient to the ModelCaller protocol the
repair loop expects.
"""

from mend.llm.caller import LLMModelCaller
from mend.llm.client import ChatCompletionsClient, Completion, parse_completion
from mend.llm.errors import (
    ModelCallError,
    ModelConfigError,
    ModelRejectedError,
    ModelResponseError,
    ModelUnavailableError,
)
from mend.llm.protocols import ChatClient

__all__ = [
    "ChatClient",
    "ChatCompletionsClient",
    "Completion",
    "LLMModelCaller",
    "ModelCallError",
    "ModelConfigError",
    "ModelRejectedError",
    "ModelResponseError",
    "ModelUnavailableError",
    "parse_completion",
]
