from pathlib import Path

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONFIGS_DIR = DEPLOYMENT_DIR / "configs"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Environments
#

LOCALHOST = "localhost"
TESTNET = "testnet"
MAINNET = "mainnet"

SUPPORTED_ENVIRONMENTS = [LOCALHOST, TESTNET, MAINNET]

ENVIRONMENT_NETWORKS = {
    # environment -> ape network choice
    LOCALHOST: "arbitrum:local:node",
    TESTNET: "arbitrum:sepolia:node",
    MAINNET: "arbitrum:mainnet:node",
}

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]

DEFAULT_TX_CONFIRMATIONS = 1

# resolves to the address of the deployer account
DEPLOYER_VARIABLE = "$deployer"

#
# Contracts
#

VESTA_GMX_STAKING = "VestaGMXStaking"
VESTA_GLP_STAKING = "VestaGLPStaking"

STAKING_CONTRACTS = [VESTA_GMX_STAKING, VESTA_GLP_STAKING]

STAKING_INITIALIZER = "setUp"

PROXY_ADMIN = "ProxyAdmin"
TRANSPARENT_PROXY = "TransparentUpgradeableProxy"

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "4.7.3"

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103
