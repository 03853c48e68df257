import typing
from collections import OrderedDict
from pathlib import Path
from typing import Any, List, Optional

import click
from ape import chain, networks
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.utils import EMPTY_BYTES32
from ape_accounts import KeyfileAccount
from eth_utils import is_same_address, to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from deployment.config import DeployConfig
from deployment.confirm import _confirm_resolution, _continue
from deployment.constants import EIP1967_ADMIN_SLOT, PROXY_ADMIN, TRANSPARENT_PROXY
from deployment.registry import (
    get_registry_entry,
    registry_entry_from_deployment,
    write_registry,
)
from deployment.utils import get_contract_container, get_oz_dependency


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            try:
                encodable = w3.is_encodable(abi_input.type, arg)
            except Exception:
                # newer web3 raises instead of returning False for some values
                encodable = False
            if not encodable:
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: AccountAPI, autosign: bool = False):
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        if isinstance(account, KeyfileAccount):
            account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args, **kwargs) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account, **kwargs)


class DeploymentHelper(Transactor):
    """
    Deploys upgradeable contracts behind transparent proxies sharing a single ProxyAdmin,
    waits for the configured number of confirmations on every transaction, and keeps
    the registry of the environment up to date so that later runs reuse deployments.
    """

    def __init__(
        self,
        config: DeployConfig,
        account: AccountAPI,
        registry_filepath: Path,
        verify: bool = False,
        autosign: bool = False,
    ):
        super().__init__(account, autosign)
        self.config = config
        self.registry_filepath = registry_filepath
        self.verify = verify

    @property
    def chain_id(self) -> int:
        return networks.provider.network.chain_id

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Returns the transaction kwargs."""
        return {"required_confirmations": self.config.tx_confirmations}

    def send_and_wait(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        """Sends a transaction and waits for the configured number of confirmations."""
        return self.transact(method, *args, **self._get_kwargs())

    def get_deployed(self, contract_name: str) -> Optional[ContractInstance]:
        """Returns the registered contract for the active chain, if any."""
        entry = get_registry_entry(
            filepath=self.registry_filepath, chain_id=self.chain_id, name=contract_name
        )
        if entry is None:
            return None
        return get_contract_container(contract_name).at(entry.address)

    def _record(self, name: str, contract_instance: ContractInstance, receipt: ReceiptAPI):
        entry = registry_entry_from_deployment(name, contract_instance, receipt)
        write_registry(entries=[entry], filepath=self.registry_filepath)

    def _deploy_contract(self, container: ContractContainer, *args) -> ContractInstance:
        contract_name = container.contract_type.name
        if not self._autosign:
            constructor_inputs = container.constructor.abi.inputs
            resolved_params = OrderedDict(
                (abi_input.name, value) for abi_input, value in zip(constructor_inputs, args)
            )
            _confirm_resolution(resolved_params, contract_name)

        return self._account.deploy(
            container,
            *args,
            publish=self.verify,
            **self._get_kwargs(),
        )

    def get_or_deploy_proxy_admin(self) -> ContractInstance:
        """Returns the ProxyAdmin shared by all proxies of the environment."""
        proxy_admin = self.get_deployed(PROXY_ADMIN)
        if proxy_admin is not None:
            print(f"(i) Using previously deployed {PROXY_ADMIN} at {proxy_admin.address}")
            return proxy_admin

        proxy_admin = self._deploy_contract(get_contract_container(PROXY_ADMIN))
        self._record(PROXY_ADMIN, proxy_admin, proxy_admin.receipt)
        return proxy_admin

    def deploy_upgradeable(self, contract_name: str, initializer: str, *args) -> ContractInstance:
        """
        Deploys `contract_name` behind a TransparentUpgradeableProxy initialized with
        `initializer(*args)`, unless the registry already holds it for the active chain.
        """
        existing = self.get_deployed(contract_name)
        if existing is not None:
            print(f"(i) Using previously deployed {contract_name} at {existing.address}")
            return existing

        proxy_admin = self.get_or_deploy_proxy_admin()

        container = get_contract_container(contract_name)
        implementation = self._deploy_contract(container)

        initializer_method = getattr(implementation, initializer)
        _validate_method_args(method_abis=initializer_method.abis, args=args)
        data = initializer_method.encode_input(*args)

        proxy_container = get_oz_dependency().TransparentUpgradeableProxy
        print(f"\nDeploying {TRANSPARENT_PROXY} contract to proxy {contract_name}.")
        proxy = self._deploy_contract(
            proxy_container, implementation.address, proxy_admin.address, data
        )
        print(f"\nWrapping {contract_name} into {TRANSPARENT_PROXY} at {proxy.address}.")
        instance = container.at(proxy.address)
        self._record(contract_name, instance, proxy.receipt)
        return instance

    def prepare_upgrade(self, contract_name: str) -> ContractInstance:
        """Deploys a new implementation of `contract_name` without touching its proxy."""
        print(f"\nPreparing upgrade of {contract_name}.")
        return self._deploy_contract(get_contract_container(contract_name))

    def upgrade(self, contract_name: str, proxy_address) -> ContractInstance:
        """
        Points the proxy at a freshly deployed implementation of `contract_name`.
        When the deployer does not own the proxy admin, the implementation is only
        deployed and the admin wallet has to perform the upgrade.
        """
        proxy_admin = self.get_proxy_admin(proxy_address)
        implementation = self.prepare_upgrade(contract_name)
        admin_owner = proxy_admin.owner()
        if is_same_address(admin_owner, self._account.address):
            self.send_and_wait(proxy_admin.upgrade, proxy_address, implementation.address)
        else:
            click.secho(
                f"(i) {PROXY_ADMIN} at {proxy_admin.address} is owned by {admin_owner}; "
                f"it must call upgrade({proxy_address}, {implementation.address}).",
                fg="yellow",
            )

        return get_contract_container(contract_name).at(proxy_address)

    def get_proxy_admin(self, proxy_address) -> ContractInstance:
        """Returns the ProxyAdmin stored in the EIP1967 admin slot of a proxy."""
        admin_slot = chain.provider.get_storage(address=proxy_address, slot=EIP1967_ADMIN_SLOT)

        if admin_slot == EMPTY_BYTES32:
            raise ValueError(
                f"Admin slot for contract at {proxy_address} is empty. "
                "Are you sure this is an EIP1967-compatible proxy?"
            )

        admin_address = to_checksum_address(admin_slot[-20:])
        return get_contract_container(PROXY_ADMIN).at(admin_address)

    def finalize(self, deployments: List[ContractInstance]) -> None:
        """Prints a summary of the deployments recorded in the registry."""
        click.secho(f"\nDeployments on chain {self.chain_id}:", fg="green")
        for instance in deployments:
            click.secho(f"\t{instance.contract_type.name} {instance.address}", fg="cyan")
        print(f"(i) Registry at {self.registry_filepath}")

    def print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Environment: {self.config.environment}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Confirmations: {self.config.tx_confirmations}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
