#!/usr/bin/python3

from typing import Optional, Sequence

import click
from ape import networks

from deployment.config import load_config
from deployment.confirm import confirm_mainnet_deployment
from deployment.constants import ENVIRONMENT_NETWORKS, MAINNET
from deployment.deployer import StakingDeployer
from deployment.helper import DeploymentHelper
from deployment.networks import is_local_network
from deployment.options import (
    account_alias_option,
    autosign_option,
    confirmations_option,
    environment_option,
    upgrade_option,
    verify_option,
)
from deployment.utils import check_plugins, get_account, registry_filepath_from_environment


def run_deployment(
    environment: str,
    account_alias: Optional[str] = None,
    verify: Optional[bool] = None,
    upgrade: Sequence[str] = (),
    confirmations: Optional[int] = None,
    autosign: bool = False,
) -> None:
    with networks.parse_network_choice(ENVIRONMENT_NETWORKS[environment]):
        account = get_account(environment, account_alias)
        config = load_config(environment, deployer_address=account.address)
        if confirmations is not None:
            config = config._replace(tx_confirmations=confirmations)

        if verify is None:
            verify = not is_local_network()
        if verify:
            check_plugins()

        helper = DeploymentHelper(
            config=config,
            account=account,
            registry_filepath=registry_filepath_from_environment(environment),
            verify=verify,
            autosign=autosign,
        )
        deployer = StakingDeployer(config=config, helper=helper, upgrade=upgrade)
        helper.print_deployment_info()

        deployments = deployer.run()
        helper.finalize(deployments=deployments)


@click.command()
@environment_option
@account_alias_option
@verify_option
@upgrade_option
@confirmations_option
@autosign_option
def cli(environment, account_alias, verify, upgrade, confirmations, autosign):
    """
    Deploys VestaGMXStaking and VestaGLPStaking, sets the active pool as operator
    and transfers ownership to the admin wallet.

    ape run deploy --env mainnet --account <ALIAS>
    """
    if environment == MAINNET and not confirm_mainnet_deployment():
        return

    run_deployment(
        environment=environment,
        account_alias=account_alias,
        verify=verify,
        upgrade=upgrade,
        confirmations=confirmations,
        autosign=autosign,
    )


if __name__ == "__main__":
    cli()
