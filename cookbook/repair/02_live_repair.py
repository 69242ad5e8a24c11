"""Live Repair (LLMModelCaller + ChatCompletionsClient)

Asks a live model for JSON, then hands whatever comes back to attempt_repair()
with an LLMModelCaller so the same model fixes its own violations. The session
is bounded by RepairConfig and by a CancellationToken deadline.

Demonstrates: ChatCompletionsClient, LLMModelCaller, CancellationToken.with_timeout(),
              ConsoleRepairLogger, repair_or_raise(), RepairFailedError
"""

import os

from dotenv import load_dotenv

from mend import (
    CancellationToken,
    ConsoleRepairLogger,
    RepairConfig,
    RepairFailedError,
    SchemaNode,
    repair_or_raise,
)
from mend.llm import ChatCompletionsClient, LLMModelCaller

load_dotenv()

MEND_OPENAI_API_KEY = os.environ["MEND_OPENAI_API_KEY"]
MEND_OPENAI_BASE_URL = os.environ["MEND_OPENAI_BASE_URL"]
MODEL_ID = "gpt-oss-120b"

PERSON = SchemaNode.object(
    {
        "name": SchemaNode.string(),
        "age": SchemaNode.number(),
        "hobbies": SchemaNode.array(SchemaNode.string()),
    },
    required=["name", "age", "hobbies"],
    additional_properties=False,
)


def main():
    with ChatCompletionsClient(
        api_key=MEND_OPENAI_API_KEY,
        base_url=MEND_OPENAI_BASE_URL,
        model=MODEL_ID,
    ) as client:
        # Deliberately vague request so the first answer usually misses a field
        first = client.complete(
            [{"role": "user", "content": "Describe a fictional person as JSON."}]
        )
        raw = first.content
        print(f"Initial output:\n{raw}\n")

        caller = LLMModelCaller(client)
        try:
            result = repair_or_raise(
                PERSON,
                raw,
                RepairConfig(max_attempts=2),
                caller,
                ConsoleRepairLogger(),
                cancel=CancellationToken.with_timeout(60),
            )
        except RepairFailedError as e:
            print(f"{e}\nLast invalid output:\n{e.error.last_invalid_output}")
            return

        print(f"\nFinal output ({len(result.attempts)} repair attempt(s)):")
        print(result.final_output)


if __name__ == "__main__":
    main()
