#!/usr/bin/python3

import click
import requests

from deployment.options import chain_id_option, registry_option
from deployment.registry import contracts_from_registry
from yogi import YogiMultiToken

REQUEST_TIMEOUT = 10  # seconds


def _check_uri(uri: str) -> str:
    """Returns a short status report for a metadata document."""
    try:
        response = requests.get(uri, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        return f"unreachable ({e.__class__.__name__})"
    if not response.ok:
        return f"HTTP {response.status_code}"
    try:
        metadata = response.json()
    except ValueError:
        return f"not JSON (HTTP {response.status_code})"
    name = metadata.get("name", "unnamed") if isinstance(metadata, dict) else "unnamed"
    return f"HTTP {response.status_code} ({name})"


@click.command()
@registry_option
@chain_id_option
def cli(registry_filepath, chain_id):
    """Fetch the metadata document of every YogiMultiToken token type."""
    deployments = contracts_from_registry(filepath=registry_filepath, chain_id=chain_id)
    contract_name = YogiMultiToken.__name__
    if contract_name not in deployments:
        raise click.ClickException(f"No {contract_name} found for chain {chain_id}.")
    multi_token = deployments[contract_name]

    failures = 0
    for token_id in multi_token.token_ids():
        uri = multi_token.uri(token_id)
        report = _check_uri(uri)
        ok = report.startswith("HTTP 2")
        failures += 0 if ok else 1
        click.secho(f"{token_id}: {uri} -> {report}", fg="green" if ok else "red")

    if failures:
        raise click.ClickException(f"{failures} metadata document(s) could not be fetched.")


if __name__ == "__main__":
    cli()
