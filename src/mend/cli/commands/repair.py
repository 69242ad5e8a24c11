"""mend repair -- run a bounded repair session against a model."""

from __future__ import annotations

import sys
from typing import IO

import click

from mend.cli.formatting import format_error, format_outcome, get_console


def _offline_caller(prompt_text: str, *, cancel: object) -> str:
    """Stand-in model caller for sessions that can never reach Repairing."""
    raise RuntimeError("no model configured for a session with repair turned off")


@click.command()
@click.argument("schema_file", type=click.File("r", encoding="utf-8"))
@click.argument("output_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--max-attempts",
    type=int,
    default=None,
    help="Repair attempts allowed (0-3). Defaults to MEND_MAX_REPAIR_ATTEMPTS or 1.",
)
@click.option("--no-repair", is_flag=True, default=False, help="Validate only; fail if invalid.")
@click.option("--model", default=None, help="Model used for repairs.")
@click.option("--api-key", default=None, envvar="MEND_OPENAI_API_KEY", help="API key.")
@click.option("--base-url", default=None, envvar="MEND_OPENAI_BASE_URL", help="API base URL.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Session deadline in seconds.",
)
@click.option(
    "--json-log",
    is_flag=True,
    default=False,
    help="Log attempts to stderr as JSON lines instead of rich text.",
)
@click.option(
    "--emit-invalid",
    is_flag=True,
    default=False,
    help="On failure, still print the last invalid output to stdout.",
)
@click.pass_context
def repair(
    ctx: click.Context,
    schema_file: IO[str],
    output_file: IO[str],
    max_attempts: int | None,
    no_repair: bool,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
    timeout: float | None,
    json_log: bool,
    emit_invalid: bool,
) -> None:
    """Repair OUTPUT_FILE (default: stdin) until it matches SCHEMA_FILE.

    The repaired output is printed to stdout. Exits with status 1 if the
    session ends in any repair failure.
    """
    from mend.cancellation import CancellationToken
    from mend.cli import _load_schema, _read_output
    from mend.exceptions import MendError, RepairConfigError
    from mend.models.config import RepairConfig, load_repair_config
    from mend.models.repair import RepairResult
    from mend.repair import attempt_repair
    from mend.sinks import ConsoleRepairLogger, JsonLinesRepairLogger

    err_console = get_console(stderr=True)
    schema = _load_schema(schema_file)
    text = _read_output(output_file)

    try:
        settings = RepairConfig.from_env().model_dump()
        if max_attempts is not None:
            settings["max_attempts"] = max_attempts
        if no_repair:
            settings["enabled"] = False
        config = load_repair_config(settings)
    except RepairConfigError as e:
        format_error(str(e), err_console)
        raise SystemExit(1) from None

    if json_log:
        sink = JsonLinesRepairLogger(sys.stderr)
    else:
        sink = ConsoleRepairLogger(err_console)

    client = None
    caller = ctx.obj.get("model_caller") if ctx.obj else None
    try:
        if caller is None and not (config.enabled and config.max_attempts > 0):
            caller = _offline_caller
        elif caller is None:
            from mend.llm import ChatCompletionsClient, LLMModelCaller

            client = ChatCompletionsClient(api_key=api_key, base_url=base_url)
            caller = LLMModelCaller(client, model=model)

        token = (
            CancellationToken.with_timeout(timeout)
            if timeout is not None
            else CancellationToken.never()
        )
        outcome = attempt_repair(schema, text, config, caller, sink, cancel=token)
    except MendError as e:
        format_error(str(e), err_console)
        raise SystemExit(1) from None
    finally:
        if client is not None:
            client.close()

    if isinstance(outcome, RepairResult):
        click.echo(outcome.final_output)
        return

    if not json_log:
        format_outcome(outcome, err_console)
    if emit_invalid:
        click.echo(outcome.last_invalid_output)
    raise SystemExit(1)
