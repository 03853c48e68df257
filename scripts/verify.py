import click
from ape import networks

from deployment.constants import ENVIRONMENT_NETWORKS, STAKING_CONTRACTS
from deployment.options import environment_option
from deployment.registry import contracts_from_registry
from deployment.utils import (
    check_plugins,
    get_contract_container,
    registry_filepath_from_environment,
    verify_contracts,
)


@click.command()
@environment_option
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify; defaults to all staking contracts",
    type=click.STRING,
    multiple=True,
)
def cli(environment, contract_names):
    """Verify deployed contracts from the registry of an environment."""
    contract_names = contract_names or STAKING_CONTRACTS
    registry_filepath = registry_filepath_from_environment(environment)

    with networks.parse_network_choice(ENVIRONMENT_NETWORKS[environment]):
        check_plugins()
        chain_id = networks.active_provider.chain_id
        contracts = contracts_from_registry(registry_filepath, chain_id=chain_id)

        contract_instances = []
        for contract_name in contract_names:
            try:
                contract_instance = contracts[contract_name]
            except KeyError:
                raise ValueError(
                    f"Contract '{contract_name}' not found in registry, '{registry_filepath}', "
                    f"for chain {chain_id}"
                )

            # check whether contract is a proxy
            proxy_info = networks.provider.network.ecosystem.get_proxy_info(
                contract_instance.address
            )
            if proxy_info:
                # we have an instance of a proxy contract, but need the underlying implementation
                print(
                    "Proxy contract detected; "
                    f"verifying implementation contract at {proxy_info.target}"
                )
                contract_container = get_contract_container(contract_instance.contract_type.name)
                contract_instance = contract_container.at(proxy_info.target)

            contract_instances.append(contract_instance)

        verify_contracts(contract_instances)


if __name__ == "__main__":
    cli()
