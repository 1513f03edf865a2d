#!/usr/bin/python3

import click

from deployment.constants import CONSTRUCTOR_PARAMS_DIR
from deployment.options import auto_option, params_option
from deployment.params import Deployer
from yogi import YogiToken

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "yogi-token.yml"


@click.command()
@params_option
@auto_option
def cli(params_filepath, auto):
    """Deploy the YogiToken (ERC-20) ledger."""
    click.echo("Deploying YogiToken (ERC-20)...")
    deployer = Deployer.from_yaml(
        filepath=params_filepath or CONSTRUCTOR_PARAMS_FILEPATH, autosign=auto
    )
    yogi_token = deployer.deploy(YogiToken)
    click.echo(f"YogiToken deployed to: {yogi_token.address}")
    deployments = [yogi_token]
    deployer.finalize(deployments=deployments)


if __name__ == "__main__":
    cli()
