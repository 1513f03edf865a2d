#!/usr/bin/python3

import click

from deployment.accounts import get_account
from deployment.constants import GITHUB_METADATA_BASE_URI, TOKEN_METADATA
from deployment.options import (
    account_index_option,
    auto_option,
    base_uri_option,
    chain_id_option,
    registry_option,
)
from deployment.params import Transactor
from deployment.registry import contracts_from_registry, update_registry
from deployment.utils import ledger_errors
from yogi import YogiMultiToken


@click.command()
@registry_option
@chain_id_option
@account_index_option
@base_uri_option
@auto_option
def cli(registry_filepath, chain_id, account_index, base_uri, auto):
    """Point every YogiMultiToken token type at its metadata document under a new base."""
    click.echo("Updating token URIs for YogiMultiToken (ERC-1155)...")
    transactor = Transactor(
        account=get_account(chain_id=chain_id, account_index=account_index), autosign=auto
    )
    deployments = contracts_from_registry(filepath=registry_filepath, chain_id=chain_id)
    contract_name = YogiMultiToken.__name__
    if contract_name not in deployments:
        raise click.ClickException(f"No {contract_name} found for chain {chain_id}.")
    multi_token = deployments[contract_name]

    base_uri = base_uri or GITHUB_METADATA_BASE_URI
    click.echo("Setting token URIs...")
    try:
        with ledger_errors():
            for token_id, (name, filename) in TOKEN_METADATA.items():
                uri = f"{base_uri}{filename}"
                transactor.transact(multi_token, "set_token_uri", token_id, uri)
                click.echo(f"Set URI for token ID {token_id} ({name})")
    finally:
        # URIs set before a failure are already applied
        update_registry(filepath=registry_filepath, chain_id=chain_id, deployments=deployments)

    click.echo("All token URIs updated successfully!")
    click.echo(f"URI for token ID 0: {multi_token.uri(0)}")


if __name__ == "__main__":
    cli()
