import json
import os
from pathlib import Path
from typing import List, Optional

import yaml
from ape import accounts, networks, project
from ape.api import AccountAPI
from ape.contracts import ContractContainer, ContractInstance

from deployment.constants import (
    ARTIFACTS_DIR,
    LOCALHOST,
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
)
from deployment.networks import is_local_network


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def get_oz_dependency():
    """Returns the OpenZeppelin dependency providing the proxy contracts."""
    return project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check the proxy dependency
        try:
            contract_container = getattr(get_oz_dependency(), contract)
        except AttributeError:
            raise ValueError(f"No contract found with name '{contract}'.")

    return contract_container


def registry_filepath_from_environment(environment: str) -> Path:
    return ARTIFACTS_DIR / f"{environment}.json"


def get_account(environment: str, account_alias: Optional[str] = None) -> AccountAPI:
    """Returns the deployer account for the given environment."""
    if account_alias is not None:
        return accounts.load(account_alias)
    if environment == LOCALHOST:
        return accounts.test_accounts[0]
    raise ValueError(f"Must specify an account alias when deploying to {environment}")


def get_chain_name(chain_id: int) -> str:
    """Returns the name of the chain given its chain ID."""
    for ecosystem_name, ecosystem in networks.ecosystems.items():
        for network_name, network in ecosystem.networks.items():
            if network.chain_id == chain_id:
                return f"{ecosystem_name} {network_name}"
    raise ValueError(f"Chain ID {chain_id} not found in networks.")


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name)
    api_key = os.environ.get(explorer_envvar)
    if not api_key:
        raise ValueError(f"{explorer_envvar} is not set.")


def check_plugins() -> None:
    print("Checking plugins...")
    check_etherscan_plugin()


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    for instance in contracts:
        print(f"(i) Verifying {instance.contract_type.name}...")
        explorer.publish_contract(instance.address)
