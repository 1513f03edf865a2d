#!/usr/bin/python3

from itertools import groupby
from pathlib import Path
from typing import List

import click

from deployment.registry import RegistryEntry, read_registry
from deployment.utils import get_chain_name


def _format_chain_name(chain_name: str) -> str:
    """Format the chain name to capitalize each word and join with slashes."""
    return "/".join(word.capitalize() for word in chain_name.split())


def _display_registry_entries(filepath: Path, entries: List[RegistryEntry]) -> None:
    """Display registry entries grouped by chain ID."""
    click.secho(f"\n{filepath.name}", fg="green")
    entries = sorted(entries, key=lambda e: (e.chain_id, e.name))
    for chain_id, chain_entries in groupby(entries, key=lambda e: e.chain_id):
        try:
            chain_name = _format_chain_name(get_chain_name(chain_id))
        except ValueError:
            chain_name = f"Chain {chain_id}"
        click.secho(f"    {chain_name} ({chain_id})", fg="yellow")

        for index, entry in enumerate(chain_entries, start=1):
            click.secho(f"        {index}. {entry.name} {entry.address}", fg="cyan")


@click.command(name="list-contracts")
@click.option(
    "--registry",
    "-r",
    "registry_filepaths",
    help="Filepath of a registry file; repeat to list several.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
    multiple=True,
)
def cli(registry_filepaths):
    """List all contracts in the given registries."""
    for filepath in registry_filepaths:
        entries = read_registry(filepath=filepath)
        _display_registry_entries(filepath, entries)


if __name__ == "__main__":
    cli()
