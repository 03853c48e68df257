#!/usr/bin/python3

from itertools import groupby
from typing import List, Optional, Tuple

import click

from deployment.constants import SUPPORTED_ENVIRONMENTS
from deployment.registry import RegistryEntry, read_registry
from deployment.utils import get_chain_name, registry_filepath_from_environment


def _get_registry_entries(
    environment: Optional[str] = None,
) -> List[Tuple[str, List[RegistryEntry]]]:
    """Parse the registry files for the given environment or all supported environments."""
    registry_entries = list()
    for env in SUPPORTED_ENVIRONMENTS:
        if environment and environment != env:
            continue
        entries = read_registry(filepath=registry_filepath_from_environment(env))
        registry_entries.append((env, entries))
    return registry_entries


def _display_registry_entries(registry_entries: List[Tuple[str, List[RegistryEntry]]]) -> None:
    """Display registry entries grouped by chain ID."""
    for environment, entries in registry_entries:
        click.secho(f"\n{environment.capitalize()}", fg="green")
        if not entries:
            click.secho("    No deployments", fg="yellow")
            continue

        for chain_id, chain_entries in groupby(entries, key=lambda e: e.chain_id):
            try:
                chain_name = "/".join(w.capitalize() for w in get_chain_name(chain_id).split())
            except ValueError:
                chain_name = f"Chain {chain_id}"
            click.secho(f"    {chain_name}", fg="yellow")

            for index, entry in enumerate(chain_entries, start=1):
                click.secho(f"        {index}. {entry.name} {entry.address}", fg="cyan")


@click.command(name="list-contracts")
@click.option(
    "--env",
    "-e",
    "environment",
    help="localhost | testnet | mainnet",
    type=click.Choice(SUPPORTED_ENVIRONMENTS),
)
def cli(environment):
    """List all deployed contracts. Optionally filter by environment."""
    registry_entries = _get_registry_entries(environment)
    _display_registry_entries(registry_entries)


if __name__ == "__main__":
    cli()
