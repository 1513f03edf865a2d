#!/usr/bin/python3

import click

from deployment.constants import CONSTRUCTOR_PARAMS_DIR, IPFS_BASE_URI, SAMPLE_NFT_URI
from deployment.options import auto_option, base_uri_option, params_option
from deployment.params import Deployer
from deployment.types import ChecksumAddress
from deployment.utils import ledger_errors
from yogi import YogiNFTCollection

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "yogi-nft.yml"


@click.command()
@params_option
@base_uri_option
@click.option(
    "--sample-owner",
    "-s",
    help="Receiver of the sample token; defaults to the deployer.",
    type=ChecksumAddress(),
    required=False,
)
@auto_option
def cli(params_filepath, base_uri, sample_owner, auto):
    """Deploy the YogiNFTCollection (ERC-721) ledger and mint a sample token."""
    click.echo("Deploying YogiNFTCollection (ERC-721)...")
    deployer = Deployer.from_yaml(
        filepath=params_filepath or CONSTRUCTOR_PARAMS_FILEPATH, autosign=auto
    )
    yogi_nft = deployer.deploy(YogiNFTCollection)
    click.echo(f"YogiNFTCollection deployed to: {yogi_nft.address}")

    base_uri = base_uri or IPFS_BASE_URI
    sample_owner = sample_owner or deployer.get_account().address
    try:
        with ledger_errors():
            deployer.transact(yogi_nft, "set_base_uri", base_uri)
            click.echo(f"Base URI set to: {base_uri}")
            deployer.transact(yogi_nft, "safe_mint", sample_owner, SAMPLE_NFT_URI)
            click.echo(f"Sample NFT minted to: {sample_owner}")
    finally:
        deployments = [yogi_nft]
        deployer.finalize(deployments=deployments)


if __name__ == "__main__":
    cli()
