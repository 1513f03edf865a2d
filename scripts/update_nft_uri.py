#!/usr/bin/python3

import click

from deployment.accounts import get_account
from deployment.constants import GITHUB_METADATA_BASE_URI
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
from yogi import YogiNFTCollection


@click.command()
@registry_option
@chain_id_option
@account_index_option
@base_uri_option
@auto_option
def cli(registry_filepath, chain_id, account_index, base_uri, auto):
    """Set a new base URI for the YogiNFTCollection metadata."""
    click.echo("Updating token URI for YogiNFTCollection (ERC-721)...")
    transactor = Transactor(
        account=get_account(chain_id=chain_id, account_index=account_index), autosign=auto
    )
    deployments = contracts_from_registry(filepath=registry_filepath, chain_id=chain_id)
    contract_name = YogiNFTCollection.__name__
    if contract_name not in deployments:
        raise click.ClickException(f"No {contract_name} found for chain {chain_id}.")
    yogi_nft = deployments[contract_name]

    base_uri = base_uri or GITHUB_METADATA_BASE_URI
    try:
        with ledger_errors():
            transactor.transact(yogi_nft, "set_base_uri", base_uri)
    finally:
        update_registry(filepath=registry_filepath, chain_id=chain_id, deployments=deployments)

    click.echo(f"Base URI updated to: {base_uri}")
    if yogi_nft.total_supply():
        click.echo(f"Token URI for token ID 0: {yogi_nft.token_uri(0)}")
    else:
        click.echo("No tokens minted yet.")


if __name__ == "__main__":
    cli()
