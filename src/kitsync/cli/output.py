"""Output helpers with clear intent.

user_output: human-readable progress and results, on stderr
machine_output: structured data (--json), on stdout
"""

import json
from typing import Any

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    click.echo(message, err=True, nl=nl)


def machine_output(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))
