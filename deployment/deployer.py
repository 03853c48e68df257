from typing import List, Sequence

import click
from ape.contracts import ContractInstance
from eth_utils import is_same_address

from deployment.config import DeployConfig, DeploymentConfigError
from deployment.constants import (
    PROXY_ADMIN,
    STAKING_CONTRACTS,
    STAKING_INITIALIZER,
    VESTA_GLP_STAKING,
    VESTA_GMX_STAKING,
)
from deployment.helper import DeploymentHelper


class StakingDeployer:
    """
    Deploys the GMX and GLP staking wrappers, registers the active pool as their
    operator and hands ownership of the contracts and of their proxy admin
    over to the admin wallet. Every step is skipped when already done.
    """

    def __init__(
        self, config: DeployConfig, helper: DeploymentHelper, upgrade: Sequence[str] = ()
    ):
        self.config = config
        self.helper = helper
        self.setup = config.require_setup()

        unknown = set(upgrade) - set(STAKING_CONTRACTS)
        if unknown:
            raise DeploymentConfigError(
                f"Cannot upgrade unknown contract(s): {', '.join(sorted(unknown))}"
            )
        self.upgrade = tuple(upgrade)

    def run(self) -> List[ContractInstance]:
        vesta_gmx = self.gmx_staking()
        vesta_glp = self.glp_staking()
        self.try_give_proxy_admin_ownership(vesta_gmx)
        return [vesta_gmx, vesta_glp]

    def gmx_staking(self) -> ContractInstance:
        vesta_gmx = self._deploy_or_upgrade(
            VESTA_GMX_STAKING,
            self.setup.general.vesta_treasury,
            self.setup.gmx_staking.gmx_token,
            self.setup.general.gmx_reward_router_v2,
            self.setup.gmx_staking.staked_gmx_tracker,
            self.setup.gmx_staking.fee_gmx_tracker_rewards,
        )
        self._set_operator(vesta_gmx)
        self.try_give_ownership(vesta_gmx)
        return vesta_gmx

    def glp_staking(self) -> ContractInstance:
        vesta_glp = self._deploy_or_upgrade(
            VESTA_GLP_STAKING,
            self.setup.general.vesta_treasury,
            self.setup.glp_staking.sglp,
            self.setup.general.gmx_reward_router_v2,
            self.setup.glp_staking.fee_glp_tracker_rewards,
        )
        self._set_operator(vesta_glp)
        self.try_give_ownership(vesta_glp)
        return vesta_glp

    def _deploy_or_upgrade(self, contract_name: str, *args) -> ContractInstance:
        if contract_name in self.upgrade:
            existing = self.helper.get_deployed(contract_name)
            if existing is not None:
                return self.helper.upgrade(contract_name, existing.address)
            print(f"(i) {contract_name} was never deployed; deploying instead of upgrading.")

        return self.helper.deploy_upgradeable(contract_name, STAKING_INITIALIZER, *args)

    def _set_operator(self, contract: ContractInstance) -> None:
        active_pool = self.setup.general.active_pool
        if not contract.isOperator(active_pool):
            self.helper.send_and_wait(contract.setOperator, active_pool, True)

    def try_give_ownership(self, contract: ContractInstance) -> None:
        admin_wallet = self.setup.general.admin_wallet
        if not is_same_address(contract.owner(), admin_wallet):
            self.helper.send_and_wait(contract.transferOwnership, admin_wallet)

    def try_give_proxy_admin_ownership(self, proxy: ContractInstance) -> None:
        admin_wallet = self.setup.general.admin_wallet
        proxy_admin = self.helper.get_proxy_admin(proxy.address)
        owner = proxy_admin.owner()
        if is_same_address(owner, admin_wallet):
            return

        if not is_same_address(owner, self.helper.get_account().address):
            click.secho(
                f"(i) {PROXY_ADMIN} at {proxy_admin.address} is owned by {owner}, "
                f"which is neither the deployer nor {admin_wallet}; leaving it as is.",
                fg="yellow",
            )
            return

        self.helper.send_and_wait(proxy_admin.transferOwnership, admin_wallet)
