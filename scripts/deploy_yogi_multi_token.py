#!/usr/bin/python3

import click

from deployment.constants import (
    CONSTRUCTOR_PARAMS_DIR,
    TOKEN_METADATA,
    YOGI_SPECIAL_EDITION,
    YOGI_SPECIAL_EDITION_MAX_SUPPLY,
    YOGI_SPECIAL_EDITION_NAME,
)
from deployment.options import auto_option, params_option
from deployment.params import Deployer
from deployment.utils import ledger_errors
from yogi import YogiMultiToken

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "yogi-multi-token.yml"


@click.command()
@params_option
@auto_option
def cli(params_filepath, auto):
    """
    Deploy the YogiMultiToken (ERC-1155) registry, point every token type at its
    metadata document and create the Yogi Special Edition type.
    """
    click.echo("Deploying YogiMultiToken (ERC-1155)...")
    deployer = Deployer.from_yaml(
        filepath=params_filepath or CONSTRUCTOR_PARAMS_FILEPATH, autosign=auto
    )
    multi_token = deployer.deploy(YogiMultiToken)
    click.echo(f"YogiMultiToken deployed to: {multi_token.address}")

    base_uri = multi_token.base_uri
    try:
        with ledger_errors():
            for token_id, (_, filename) in TOKEN_METADATA.items():
                if token_id == YOGI_SPECIAL_EDITION:
                    continue
                deployer.transact(multi_token, "set_token_uri", token_id, f"{base_uri}{filename}")
            click.echo("Token URIs set for all predefined token types")

            _, filename = TOKEN_METADATA[YOGI_SPECIAL_EDITION]
            deployer.transact(
                multi_token,
                "create_token_type",
                YOGI_SPECIAL_EDITION,
                YOGI_SPECIAL_EDITION_NAME,
                YOGI_SPECIAL_EDITION_MAX_SUPPLY,
            )
            deployer.transact(
                multi_token, "set_token_uri", YOGI_SPECIAL_EDITION, f"{base_uri}{filename}"
            )
            click.echo(f"Created custom token type: {YOGI_SPECIAL_EDITION_NAME}")
    finally:
        deployments = [multi_token]
        deployer.finalize(deployments=deployments)


if __name__ == "__main__":
    cli()
