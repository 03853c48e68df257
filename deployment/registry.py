import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from ape.api import ReceiptAPI
from ape.contracts import ContractInstance
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from eth_typing import ABI

from deployment.utils import _load_json, get_contract_container

ChainId = int
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed contract of an environment."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str


def _get_abi(contract_instance: ContractInstance) -> ABI:
    """Returns the ABI of a contract instance."""
    contract_abi = list()
    for entry in contract_instance.contract_type.abi:
        contract_abi.append(entry.model_dump(mode="json", by_alias=True))
    return contract_abi


def registry_entry_from_deployment(
    name: ContractName, contract_instance: ContractInstance, receipt: ReceiptAPI
) -> RegistryEntry:
    """
    Builds a registry entry for a deployed contract. For proxied contracts,
    `contract_instance` is the implementation type wrapped at the proxy address
    and `receipt` is the receipt of the proxy deployment.
    """
    txn_hash = receipt.txn_hash
    if not isinstance(txn_hash, str):
        txn_hash = txn_hash.hex()

    return RegistryEntry(
        chain_id=receipt.chain_id,
        name=name,
        address=to_checksum_address(contract_instance.address),
        abi=_get_abi(contract_instance),
        tx_hash=txn_hash,
        block_number=receipt.block_number,
        deployer=receipt.transaction.sender,
    )


def read_registry(filepath: Path) -> List[RegistryEntry]:
    if not filepath.exists():
        return list()

    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                chain_id=int(chain_id),
                name=contract_name,
                address=artifacts["address"],
                abi=artifacts["abi"],
                tx_hash=artifacts["tx_hash"],
                block_number=artifacts["block_number"],
                deployer=artifacts["deployer"],
            )
            registry_entries.append(registry_entry)
    return registry_entries


def write_registry(entries: List[RegistryEntry], filepath: Path, silent: bool = False) -> Path:
    """
    Writes registry entries to a file. Entries already present in the file are kept
    unless a new entry has the same chain ID and name, in which case it is replaced.
    """
    if not entries:
        print("No entries provided.")
        return filepath

    merged = {(entry.chain_id, entry.name): entry for entry in read_registry(filepath)}
    if merged and not silent:
        print(f"Updating existing registry at {filepath}.")
    elif not silent:
        print(f"Creating new registry at {filepath}.")

    for entry in entries:
        merged[(entry.chain_id, entry.name)] = entry

    # common order: chain id, then contract name
    sorted_entries = sorted(merged.values(), key=lambda e: (str(e.chain_id), e.name))

    data = defaultdict(dict)
    for entry in sorted_entries:
        entry_abi = list(entry.abi)
        entry_abi.sort(key=lambda d: (d["type"], d.get("name", "")))

        data[str(entry.chain_id)][entry.name] = {
            "address": entry.address,
            "abi": entry_abi,
            "tx_hash": entry.tx_hash,
            "block_number": int(entry.block_number),
            "deployer": entry.deployer,
        }

    filepath.parent.mkdir(parents=True, exist_ok=True)
    temp_filepath = filepath.with_suffix(".temp.json")
    with open(temp_filepath, "w") as file:
        json.dump(data, file, **STANDARD_REGISTRY_JSON_FORMAT)
    temp_filepath.replace(filepath)

    return filepath


def get_registry_entry(
    filepath: Path, chain_id: ChainId, name: ContractName
) -> Optional[RegistryEntry]:
    """Returns the registry entry of a contract on a chain, or None if it was never deployed."""
    for entry in read_registry(filepath):
        if entry.chain_id == chain_id and entry.name == name:
            return entry
    return None


def contracts_from_registry(filepath: Path, chain_id: ChainId) -> Dict[str, ContractInstance]:
    """Returns a dictionary of contract instances from a registry."""
    registry_entries = read_registry(filepath=filepath)
    deployments = dict()
    for registry_entry in registry_entries:
        if registry_entry.chain_id != chain_id:
            continue
        contract_type = registry_entry.name
        contract_container = get_contract_container(contract_type)
        contract_instance = contract_container.at(registry_entry.address)
        deployments[contract_type] = contract_instance
    return deployments
