#!/usr/bin/python3

import click
from eth_account import Account

from deployment.constants import NUMBER_OF_TEST_ACCOUNTS, TEST_ACCOUNTS_PATH, TEST_MNEMONIC
from deployment.types import MinInt

Account.enable_unaudited_hdwallet_features()


@click.command()
@click.option(
    "--mnemonic-file",
    "-m",
    help="File with mnemonic to use for account derivation; defaults to the test mnemonic",
    type=click.Path(exists=True, dir_okay=False),
    required=False,
)
@click.option(
    "--count",
    "-c",
    help="Number of accounts to derive",
    type=MinInt(1),
    default=NUMBER_OF_TEST_ACCOUNTS,
    show_default=True,
)
@click.option("--show-keys", help="Also print the private keys.", is_flag=True)
def cli(mnemonic_file, count, show_keys):
    """List the accounts selectable with --account-index on local chains."""
    mnemonic = TEST_MNEMONIC
    if mnemonic_file:
        with open(mnemonic_file, "r") as f:
            # only the first line is used
            mnemonic = f.readline().strip()

    for i in range(count):
        path = TEST_ACCOUNTS_PATH.format(i)
        account = Account.from_mnemonic(mnemonic, account_path=path)
        click.echo(f"Account {i} (Path - {path}):")
        click.echo(f"\tAddress: {account.address}")
        if show_keys:
            click.echo(f"\tPrivate Key: {account.key.hex()}")


if __name__ == "__main__":
    cli()
