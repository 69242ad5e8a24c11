"""mend prompt -- print the repair prompt for an invalid output."""

from __future__ import annotations

from typing import IO

import click

from mend.cli.formatting import get_console


@click.command()
@click.argument("schema_file", type=click.File("r", encoding="utf-8"))
@click.argument("output_file", type=click.File("r", encoding="utf-8"), default="-")
def prompt(schema_file: IO[str], output_file: IO[str]) -> None:
    """Print the repair prompt Mend would send for OUTPUT_FILE.

    Prints nothing to stdout when the output is already valid.
    """
    from mend.cli import _load_schema, _read_output
    from mend.prompts.repair import build_repair_prompt
    from mend.validation import validate as run_validate

    schema = _load_schema(schema_file)
    text = _read_output(output_file)
    violations = run_validate(schema, text)
    if not violations:
        get_console(stderr=True).print(
            "[green]Output is valid; no repair prompt needed.[/green]", highlight=False
        )
        return
    click.echo(build_repair_prompt(schema, text, violations))
