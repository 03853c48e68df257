import click

from deployment.constants import STAKING_CONTRACTS, SUPPORTED_ENVIRONMENTS, TESTNET
from deployment.types import MinInt

environment_option = click.option(
    "--env",
    "-e",
    "environment",
    help="localhost | testnet | mainnet",
    type=click.Choice(SUPPORTED_ENVIRONMENTS),
    default=TESTNET,
    show_default=True,
)

account_alias_option = click.option(
    "--account",
    "-a",
    "account_alias",
    help="Alias of the ape account deploying the contracts; defaults to a test account on localhost.",
    type=str,
    required=False,
)

verify_option = click.option(
    "--verify/--no-verify",
    help="Publish contract sources to the block explorer; defaults to on for live networks.",
    default=None,
)

upgrade_option = click.option(
    "--upgrade",
    "-u",
    help="Upgrade the implementation of an already deployed contract.",
    type=click.Choice(STAKING_CONTRACTS),
    multiple=True,
)

confirmations_option = click.option(
    "--confirmations",
    help="Number of confirmations to wait for on each transaction; overrides the config.",
    type=MinInt(0),
    default=None,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation.",
    is_flag=True,
    default=False,
)
