#!/usr/bin/python3
from pathlib import Path

import click

from deployment.registry import normalize_registry


@click.command()
@click.option(
    "--registry",
    "-r",
    help="Filepath to registry file",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)
def cli(registry):
    """Rewrite a Yogi deployment registry in the standard layout (sorted, indented)."""
    normalize_registry(registry)


if __name__ == "__main__":
    cli()
