"""Mend CLI -- validate and repair structured model output from the terminal.

This module is NEVER imported from mend/__init__.py.
It is only loaded via the ``mend`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install mend[cli]"
    ) from None

from mend.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from mend.models.schema import SchemaNode


@click.group()
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Mend: bounded self-healing repair for structured LLM output."""
    ctx.ensure_object(dict)
    if verbose:
        import logging

        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(show_time=False, show_path=False)],
        )


def _load_schema(schema_file: IO[str]) -> SchemaNode:
    """Read a JSON-schema dict file into a SchemaNode.

    Exits with status 1 on unreadable JSON or an invalid schema.
    """
    from mend.exceptions import SchemaDefinitionError
    from mend.models.schema import SchemaNode
    from mend.validation import check_schema

    try:
        schema = SchemaNode.from_dict(json.load(schema_file))
        check_schema(schema)
    except json.JSONDecodeError as e:
        format_error(f"Schema file is not valid JSON: {e}", get_console(stderr=True))
        raise SystemExit(1) from None
    except UnicodeDecodeError as e:
        format_error(f"Schema file is not valid UTF-8: {e}", get_console(stderr=True))
        raise SystemExit(1) from None
    except SchemaDefinitionError as e:
        format_error(str(e), get_console(stderr=True))
        raise SystemExit(1) from None
    return schema


def _read_output(output_file: IO[str]) -> str:
    """Read the candidate output, exiting with status 1 if it is not text."""
    try:
        return output_file.read()
    except UnicodeDecodeError as e:
        format_error(f"Output file is not valid UTF-8: {e}", get_console(stderr=True))
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from mend.cli.commands.validate import validate  # noqa: E402
from mend.cli.commands.prompt import prompt  # noqa: E402
from mend.cli.commands.repair import repair  # noqa: E402

cli.add_command(validate)
cli.add_command(prompt)
cli.add_command(repair)
