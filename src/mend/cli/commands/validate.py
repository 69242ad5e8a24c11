"""mend validate -- check an output file against a schema."""

from __future__ import annotations

import json
from typing import IO

import click

from mend.cli.formatting import format_violations, get_console


@click.command()
@click.argument("schema_file", type=click.File("r", encoding="utf-8"))
@click.argument("output_file", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print violations as JSON.")
def validate(schema_file: IO[str], output_file: IO[str], as_json: bool) -> None:
    """Validate OUTPUT_FILE (default: stdin) against SCHEMA_FILE.

    Exits with status 1 when the output has violations.
    """
    from mend.cli import _load_schema, _read_output
    from mend.validation import validate as run_validate

    schema = _load_schema(schema_file)
    violations = run_validate(schema, _read_output(output_file))

    if as_json:
        click.echo(json.dumps([v.to_dict() for v in violations], indent=2))
    else:
        format_violations(violations, get_console())

    if violations:
        raise SystemExit(1)
