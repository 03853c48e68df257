import typing
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_hex_address, remove_0x_prefix, to_checksum_address

from deployment.constants import (
    CONFIGS_DIR,
    DEFAULT_TX_CONFIRMATIONS,
    DEPLOYER_VARIABLE,
    SUPPORTED_ENVIRONMENTS,
)
from deployment.utils import _load_yaml

SETUP_KEY = "setup"
TX_CONFIRMATIONS_KEY = "tx_confirmations"


class DeploymentConfigError(ValueError):
    pass


def _resolve_address(
    name: str, value: Any, deployer_address: Optional[str] = None
) -> ChecksumAddress:
    """Validates a single configured address and returns it in checksum form."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise DeploymentConfigError(f"Address '{name}' is not set.")
    if not isinstance(value, str):
        # unquoted 0x-prefixed values are read by YAML as integers
        raise DeploymentConfigError(f"Address '{name}' must be a quoted string, got {value!r}.")

    value = value.strip()
    if value == DEPLOYER_VARIABLE:
        if deployer_address is None:
            raise DeploymentConfigError(
                f"Address '{name}' refers to {DEPLOYER_VARIABLE} but no deployer account is known."
            )
        value = deployer_address

    if not is_hex_address(value):
        raise DeploymentConfigError(f"Address '{name}' has an invalid value '{value}'.")
    # mixed case is an EIP-55 checksum and must match
    digits = remove_0x_prefix(value)
    checksummed = to_checksum_address(value)
    if digits not in (digits.lower(), digits.upper()) and remove_0x_prefix(checksummed) != digits:
        raise DeploymentConfigError(f"Address '{name}' has an invalid checksum '{value}'.")
    return checksummed


def _record_from_dict(record_type, section: str, data: Any, deployer_address: Optional[str]):
    """Builds an address record from its YAML section."""
    if not isinstance(data, dict):
        raise DeploymentConfigError(f"Malformed '{section}' section in deployment config.")

    keys = record_type.KEYS
    unknown = set(data) - set(keys)
    if unknown:
        raise DeploymentConfigError(
            f"Unknown key(s) in '{section}' section: {', '.join(sorted(unknown))}"
        )

    values = dict()
    for key, field in keys.items():
        values[field] = _resolve_address(f"{section}.{key}", data.get(key), deployer_address)
    return record_type(**values)


class GeneralConfig(NamedTuple):
    admin_wallet: ChecksumAddress
    vesta_treasury: ChecksumAddress
    gmx_reward_router_v2: ChecksumAddress
    active_pool: ChecksumAddress

    KEYS = {
        "adminWallet": "admin_wallet",
        "vestaTreasury": "vesta_treasury",
        "gmxRewardRouterV2": "gmx_reward_router_v2",
        "activePool": "active_pool",
    }


class GMXStakingConfig(NamedTuple):
    gmx_token: ChecksumAddress
    staked_gmx_tracker: ChecksumAddress
    fee_gmx_tracker_rewards: ChecksumAddress

    KEYS = {
        "gmxToken": "gmx_token",
        "stakedGmxTracker": "staked_gmx_tracker",
        "feeGmxTrackerRewards": "fee_gmx_tracker_rewards",
    }


class GLPStakingConfig(NamedTuple):
    sglp: ChecksumAddress
    fee_glp_tracker_rewards: ChecksumAddress

    KEYS = {
        "sGLP": "sglp",
        "feeGlpTrackerRewards": "fee_glp_tracker_rewards",
    }


class ContractConfig(NamedTuple):
    """On-chain addresses the staking contracts are wired to."""

    general: GeneralConfig
    gmx_staking: GMXStakingConfig
    glp_staking: GLPStakingConfig

    SECTIONS = {
        "general": GeneralConfig,
        "gmxStaking": GMXStakingConfig,
        "glpStaking": GLPStakingConfig,
    }

    @classmethod
    def from_dict(
        cls, data: typing.Dict, deployer_address: Optional[str] = None
    ) -> "ContractConfig":
        if not isinstance(data, dict):
            raise DeploymentConfigError(f"Malformed '{SETUP_KEY}' section in deployment config.")

        unknown = set(data) - set(cls.SECTIONS)
        if unknown:
            raise DeploymentConfigError(
                f"Unknown section(s) in '{SETUP_KEY}': {', '.join(sorted(unknown))}"
            )

        records = list()
        for section, record_type in cls.SECTIONS.items():
            if section not in data:
                raise DeploymentConfigError(f"'{SETUP_KEY}.{section}' is missing.")
            records.append(
                _record_from_dict(
                    record_type, f"{SETUP_KEY}.{section}", data[section], deployer_address
                )
            )
        return cls(*records)


class DeployConfig(NamedTuple):
    """
    Deployment configuration for a single environment.
    Read once per script run; `setup` is None when the environment is not configured.
    """

    environment: str
    tx_confirmations: int
    setup: Optional[ContractConfig]

    def require_setup(self) -> ContractConfig:
        if self.setup is None:
            raise DeploymentConfigError("Setup not configured")
        return self.setup

    @classmethod
    def from_dict(
        cls, environment: str, data: Optional[Dict], deployer_address: Optional[str] = None
    ) -> "DeployConfig":
        data = data or dict()
        if not isinstance(data, dict):
            raise DeploymentConfigError(f"Malformed deployment config for '{environment}'.")

        unknown = set(data) - {SETUP_KEY, TX_CONFIRMATIONS_KEY}
        if unknown:
            raise DeploymentConfigError(
                f"Unknown key(s) in deployment config: {', '.join(sorted(unknown))}"
            )

        tx_confirmations = data.get(TX_CONFIRMATIONS_KEY, DEFAULT_TX_CONFIRMATIONS)
        if (
            isinstance(tx_confirmations, bool)
            or not isinstance(tx_confirmations, int)
            or tx_confirmations < 0
        ):
            raise DeploymentConfigError(
                f"'{TX_CONFIRMATIONS_KEY}' must be a non-negative integer, got {tx_confirmations!r}."
            )

        setup = None
        if data.get(SETUP_KEY) is not None:
            setup = ContractConfig.from_dict(data[SETUP_KEY], deployer_address=deployer_address)

        return cls(environment=environment, tx_confirmations=tx_confirmations, setup=setup)


def config_filepath_from_environment(environment: str) -> Path:
    if environment not in SUPPORTED_ENVIRONMENTS:
        raise DeploymentConfigError(f"Unsupported environment '{environment}'.")
    return CONFIGS_DIR / f"{environment}.yml"


def load_config(
    environment: str,
    deployer_address: Optional[str] = None,
    filepath: Optional[Path] = None,
) -> DeployConfig:
    """Loads the deployment config of an environment from its YAML file."""
    filepath = filepath or config_filepath_from_environment(environment)
    print(f"Loading {environment} deployment config from {filepath}...")
    data = _load_yaml(filepath)
    return DeployConfig.from_dict(environment, data, deployer_address=deployer_address)
