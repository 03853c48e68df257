import pytest
from eth_utils import to_checksum_address

from deployment.config import DeployConfig, DeploymentConfigError, load_config
from deployment.constants import DEFAULT_TX_CONFIRMATIONS
from tests.conftest import ACTIVE_POOL, ADMIN_WALLET, DEPLOYER, SGLP, setup_data


def test_mainnet_config():
    config = load_config("mainnet")

    assert config.environment == "mainnet"
    assert config.tx_confirmations == 3
    setup = config.require_setup()
    assert setup.general.admin_wallet == "0x4A4651B31d747D1DdbDDADCF1b1E24a5f6dcc7b0"
    assert setup.general.vesta_treasury == "0x4A4651B31d747D1DdbDDADCF1b1E24a5f6dcc7b0"
    assert setup.general.active_pool == "0xBE3dE7fB9Aa09B3Fa931868Fb49d5BA5fEe2eBb1"
    assert setup.gmx_staking.gmx_token == "0xfc5A1A6EB076a2C7aD06eD22C90d7E710E35ad0a"


def test_localhost_config_uses_deployer():
    config = load_config("localhost", deployer_address=DEPLOYER.lower())

    setup = config.require_setup()
    assert setup.general.admin_wallet == DEPLOYER
    assert setup.general.active_pool == DEPLOYER


def test_localhost_config_without_deployer():
    with pytest.raises(DeploymentConfigError, match="no deployer account"):
        load_config("localhost")


def test_testnet_setup_not_configured():
    config = load_config("testnet")

    assert config.setup is None
    with pytest.raises(DeploymentConfigError, match="Setup not configured"):
        config.require_setup()


def test_unsupported_environment():
    with pytest.raises(DeploymentConfigError, match="Unsupported environment"):
        load_config("goerli")


def test_addresses_are_checksummed():
    data = setup_data()
    data["general"]["adminWallet"] = ADMIN_WALLET.lower()

    config = DeployConfig.from_dict("localhost", {"setup": data})

    assert config.setup.general.admin_wallet == ADMIN_WALLET
    assert config.setup.glp_staking.sglp == SGLP
    assert config.tx_confirmations == DEFAULT_TX_CONFIRMATIONS


@pytest.mark.parametrize("value", ["", "   ", None, "0x1234", "not-an-address"])
def test_invalid_address(value):
    data = setup_data()
    data["general"]["activePool"] = value

    with pytest.raises(DeploymentConfigError, match="general.activePool"):
        DeployConfig.from_dict("localhost", {"setup": data})


def test_invalid_address_checksum():
    data = setup_data()
    data["general"]["adminWallet"] = "0x4a4651B31d747D1DdbDDADCF1b1E24a5f6dcc7b0"

    with pytest.raises(DeploymentConfigError, match="general.adminWallet.*checksum"):
        DeployConfig.from_dict("localhost", {"setup": data})


def test_upper_case_address_is_accepted():
    data = setup_data()
    data["general"]["adminWallet"] = "0x" + ADMIN_WALLET[2:].upper()

    config = DeployConfig.from_dict("localhost", {"setup": data})

    assert config.setup.general.admin_wallet == ADMIN_WALLET


def test_missing_address():
    data = setup_data()
    del data["gmxStaking"]["stakedGmxTracker"]

    with pytest.raises(DeploymentConfigError, match="gmxStaking.stakedGmxTracker"):
        DeployConfig.from_dict("localhost", {"setup": data})


def test_unquoted_address():
    data = setup_data()
    data["general"]["adminWallet"] = int(ADMIN_WALLET, 16)

    with pytest.raises(DeploymentConfigError, match="quoted string"):
        DeployConfig.from_dict("localhost", {"setup": data})


def test_unknown_keys():
    data = setup_data()
    data["general"]["vestaTreasruy"] = ADMIN_WALLET

    with pytest.raises(DeploymentConfigError, match="vestaTreasruy"):
        DeployConfig.from_dict("localhost", {"setup": data})

    with pytest.raises(DeploymentConfigError, match="TX_CONFIRMATIONS"):
        DeployConfig.from_dict("localhost", {"TX_CONFIRMATIONS": 3})


def test_missing_section():
    data = setup_data()
    del data["glpStaking"]

    with pytest.raises(DeploymentConfigError, match="setup.glpStaking"):
        DeployConfig.from_dict("localhost", {"setup": data})


@pytest.mark.parametrize("value", [-1, "3", 1.5, True])
def test_invalid_tx_confirmations(value):
    with pytest.raises(DeploymentConfigError, match="tx_confirmations"):
        DeployConfig.from_dict("localhost", {"tx_confirmations": value})


def test_load_config_from_file(tmp_path):
    filepath = tmp_path / "custom.yml"
    filepath.write_text(
        "tx_confirmations: 0\n"
        "setup:\n"
        "  general:\n"
        f"    adminWallet: \"{ADMIN_WALLET}\"\n"
        f"    vestaTreasury: \"{ADMIN_WALLET}\"\n"
        f"    gmxRewardRouterV2: \"{ADMIN_WALLET}\"\n"
        f"    activePool: \"{ACTIVE_POOL.lower()}\"\n"
        "  gmxStaking:\n"
        f"    gmxToken: \"{ADMIN_WALLET}\"\n"
        f"    stakedGmxTracker: \"{ADMIN_WALLET}\"\n"
        f"    feeGmxTrackerRewards: \"{ADMIN_WALLET}\"\n"
        "  glpStaking:\n"
        f"    sGLP: \"{ADMIN_WALLET}\"\n"
        f"    feeGlpTrackerRewards: \"{ADMIN_WALLET}\"\n"
    )

    config = load_config("localhost", filepath=filepath)

    assert config.tx_confirmations == 0
    assert config.setup.general.active_pool == to_checksum_address(ACTIVE_POOL)
