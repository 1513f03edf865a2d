from pathlib import Path

import click

from deployment.types import MinInt

params_option = click.option(
    "--params",
    "-p",
    "params_filepath",
    help="Filepath of the constructor parameters YAML file.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

registry_option = click.option(
    "--registry",
    "-r",
    "registry_filepath",
    help="Filepath of the registry file of a previous deployment.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=True,
)

chain_id_option = click.option(
    "--chain-id",
    "-c",
    help="Chain ID of the deployment within the registry.",
    type=MinInt(1),
    required=True,
)

account_index_option = click.option(
    "--account-index",
    "-i",
    help="Index of the test account to transact with (local chains only).",
    type=MinInt(0),
    default=0,
    show_default=True,
)

base_uri_option = click.option(
    "--base-uri",
    "-b",
    help="Base location of the metadata documents.",
    type=str,
    required=False,
)

auto_option = click.option(
    "--auto",
    help="Automatically sign transactions.",
    is_flag=True,
)
