from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from deployment.config import DeployConfig

# Common addresses
DEPLOYER = to_checksum_address("0x" + "d0" * 20)
ADMIN_WALLET = to_checksum_address("0x" + "a1" * 20)
TREASURY = to_checksum_address("0x" + "a2" * 20)
ACTIVE_POOL = to_checksum_address("0x" + "a3" * 20)
REWARD_ROUTER = to_checksum_address("0x" + "b1" * 20)
GMX_TOKEN = to_checksum_address("0x" + "b2" * 20)
STAKED_GMX_TRACKER = to_checksum_address("0x" + "b3" * 20)
FEE_GMX_TRACKER_REWARDS = to_checksum_address("0x" + "b4" * 20)
SGLP = to_checksum_address("0x" + "c1" * 20)
FEE_GLP_TRACKER_REWARDS = to_checksum_address("0x" + "c2" * 20)
STRANGER = to_checksum_address("0x" + "ee" * 20)

GMX_PROXY = to_checksum_address("0x" + "11" * 20)
GLP_PROXY = to_checksum_address("0x" + "22" * 20)
PROXY_ADMIN_ADDRESS = to_checksum_address("0x" + "33" * 20)


def setup_data():
    return {
        "general": {
            "adminWallet": ADMIN_WALLET,
            "vestaTreasury": TREASURY,
            "gmxRewardRouterV2": REWARD_ROUTER,
            "activePool": ACTIVE_POOL,
        },
        "gmxStaking": {
            "gmxToken": GMX_TOKEN,
            "stakedGmxTracker": STAKED_GMX_TRACKER,
            "feeGmxTrackerRewards": FEE_GMX_TRACKER_REWARDS,
        },
        "glpStaking": {
            "sGLP": SGLP,
            "feeGlpTrackerRewards": FEE_GLP_TRACKER_REWARDS,
        },
    }


class FakeOwnable:
    def __init__(self, name, address, owner):
        self.contract_type = SimpleNamespace(name=name)
        self.address = address
        self._owner = owner

    def owner(self):
        return self._owner

    def transferOwnership(self, new_owner):
        self._owner = new_owner


class FakeStakingContract(FakeOwnable):
    def __init__(self, name, address, owner, operators=()):
        super().__init__(name, address, owner)
        self.operators = set(operators)

    def isOperator(self, address):
        return address in self.operators

    def setOperator(self, address, enabled):
        if enabled:
            self.operators.add(address)
        else:
            self.operators.discard(address)


class FakeHelper:
    """Stands in for DeploymentHelper; transactions are applied to the fake contracts."""

    def __init__(self, contracts, proxy_admin, deployed=None):
        self.contracts = contracts
        self.proxy_admin = proxy_admin
        self.deployed = dict(deployed or {})
        self.deploy_calls = list()
        self.upgrade_calls = list()
        self.transactions = list()

    def get_account(self):
        return SimpleNamespace(address=DEPLOYER)

    def get_deployed(self, contract_name):
        return self.deployed.get(contract_name)

    def deploy_upgradeable(self, contract_name, initializer, *args):
        self.deploy_calls.append((contract_name, initializer, args))
        contract = self.deployed.get(contract_name)
        if contract is None:
            contract = self.contracts[contract_name]
            self.deployed[contract_name] = contract
        return contract

    def upgrade(self, contract_name, proxy_address):
        self.upgrade_calls.append((contract_name, proxy_address))
        return self.deployed[contract_name]

    def get_proxy_admin(self, proxy_address):
        return self.proxy_admin

    def send_and_wait(self, method, *args):
        contract = method.__self__
        self.transactions.append((contract.contract_type.name, method.__name__, args))
        return method(*args)


@pytest.fixture
def deploy_config():
    return DeployConfig.from_dict("localhost", {"tx_confirmations": 2, "setup": setup_data()})


@pytest.fixture
def gmx_staking():
    return FakeStakingContract("VestaGMXStaking", GMX_PROXY, owner=DEPLOYER)


@pytest.fixture
def glp_staking():
    return FakeStakingContract("VestaGLPStaking", GLP_PROXY, owner=DEPLOYER)


@pytest.fixture
def proxy_admin():
    return FakeOwnable("ProxyAdmin", PROXY_ADMIN_ADDRESS, owner=DEPLOYER)


@pytest.fixture
def helper(gmx_staking, glp_staking, proxy_admin):
    contracts = {"VestaGMXStaking": gmx_staking, "VestaGLPStaking": glp_staking}
    return FakeHelper(contracts=contracts, proxy_admin=proxy_admin)
