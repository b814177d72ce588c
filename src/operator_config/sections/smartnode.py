"""Settings of the node daemon itself, including the network selection."""

import os
from typing import Final

from operator_config.config import STACK_VERSION
from operator_config.parameter import (
    ChoiceParameter,
    FloatParameter,
    ParameterOption,
    StringParameter,
)
from operator_config.section import Section
from operator_config.types import ContainerID, Network

DEFAULT_PROJECT_NAME: Final = "rocketpool"
"""Prefix attached to every container the stack manages."""

SMARTNODE_TAG: Final = f"rocketpool/smartnode:v{STACK_VERSION}"
"""Image of the node daemon matching this software version."""

POW_PROXY_TAG: Final = f"rocketpool/smartnode-pow-proxy:v{STACK_VERSION}"
"""Image of the proxy that fronts hosted execution providers."""

_CONTAINER_DATA_DIR: Final = "/.rocketpool/data"

_TX_WATCH_URLS: Final = {
    Network.MAINNET: "https://etherscan.io/tx",
    Network.PRATER: "https://goerli.etherscan.io/tx",
}

_STAKE_URLS: Final = {
    Network.MAINNET: "https://stake.rocketpool.net",
    Network.PRATER: "https://testnet.rocketpool.net",
}

_CHAIN_IDS: Final = {
    Network.MAINNET: 1,
    Network.PRATER: 5,
}

_STORAGE_ADDRESSES: Final = {
    Network.MAINNET: "0x1d8f8f00cfa6758d7bE78336684788Fb0ee0Fa46",
    Network.PRATER: "0xd8Cd47263414aFEca62d6e2a3917d6600abDceB3",
}

_ONE_INCH_ORACLE_ADDRESSES: Final = {
    Network.MAINNET: "0x07D91f5fb9Bf7798734C3f606dB065549F6893bb",
    Network.PRATER: "0x4eDC966Df24264C9C817295a0753804EcC46Dd22",
}

_RPL_TOKEN_ADDRESSES: Final = {
    Network.MAINNET: "0xb4efd85c19999d84251304bda99e90b92300bd93",
    Network.PRATER: "0xb4efd85c19999d84251304bda99e90b92300bd93",
}

_RPL_FAUCET_ADDRESSES: Final = {
    Network.MAINNET: "",
    Network.PRATER: "0x95D6b8E2106E3B30a72fC87e2B56ce15E37853F9",
}

_SNAPSHOT_DELEGATION_ADDRESSES: Final = {
    Network.MAINNET: "0x469788fE6E9E9681C6ebF3bF78e7Fd26Fc015446",
    Network.PRATER: "0xD0897D68Cd66A710dDCecDe30F7557972181BEDc",
}

_GAS_CONTAINERS: Final = (ContainerID.NODE, ContainerID.WATCHTOWER)


def default_data_path(directory: str) -> str:
    """The data folder inside the stack's base directory."""
    return os.path.join(directory, "data")


class SmartnodeSection(Section):
    """
    Settings of the node daemon.

    Besides its editable parameters the section exposes derived, read-only values
    (URLs, chain id, contract addresses, data paths) computed from the selected
    network. Paths that differ in native mode take the mode as an argument.
    """

    def __init__(self, directory: str) -> None:
        self.title = "Smartnode Settings"

        self.network = ChoiceParameter[Network](
            id="network",
            name="Network",
            description="The Ethereum network you want to use.",
            defaults={Network.ALL: Network.MAINNET},
            affected_containers=[
                ContainerID.API,
                ContainerID.NODE,
                ContainerID.WATCHTOWER,
                ContainerID.ETH1,
                ContainerID.ETH2,
                ContainerID.VALIDATOR,
            ],
            env_vars=["NETWORK"],
            options=[
                ParameterOption(
                    name="Ethereum Mainnet",
                    description="The real Ethereum network, using real ETH and real RPL.",
                    value=Network.MAINNET,
                ),
                ParameterOption(
                    name="Prater Testnet",
                    description="The Prater test network, using free test ETH and RPL.",
                    value=Network.PRATER,
                ),
            ],
        )

        self.project_name = StringParameter(
            id="projectName",
            name="Project Name",
            description="Prefix attached to all of the containers managed by the stack.",
            defaults={Network.ALL: DEFAULT_PROJECT_NAME},
            affected_containers=[
                ContainerID.API,
                ContainerID.NODE,
                ContainerID.WATCHTOWER,
                ContainerID.ETH1,
                ContainerID.ETH2,
                ContainerID.VALIDATOR,
                ContainerID.GRAFANA,
                ContainerID.PROMETHEUS,
                ContainerID.EXPORTER,
            ],
            env_vars=["COMPOSE_PROJECT_NAME"],
        )

        self.data_path = StringParameter(
            id="dataPath",
            name="Data Path",
            description="Absolute path of the folder holding the node wallet and validator keys.",
            defaults={Network.ALL: default_data_path(directory)},
            affected_containers=[
                ContainerID.API,
                ContainerID.NODE,
                ContainerID.WATCHTOWER,
                ContainerID.VALIDATOR,
            ],
            env_vars=["ROCKETPOOL_DATA_FOLDER"],
        )

        self.manual_max_fee = FloatParameter(
            id="manualMaxFee",
            name="Manual Max Fee",
            description="Max fee in gwei for every transaction; 0 uses the network suggestion.",
            defaults={Network.ALL: 0.0},
            affected_containers=_GAS_CONTAINERS,
            min_value=0.0,
        )

        self.priority_fee = FloatParameter(
            id="priorityFee",
            name="Priority Fee",
            description="Default priority fee in gwei, paid above the base fee.",
            defaults={Network.ALL: 2.0},
            affected_containers=_GAS_CONTAINERS,
            min_value=0.0,
        )

        self.rpl_claim_gas_threshold = FloatParameter(
            id="rplClaimGasThreshold",
            name="RPL Claim Gas Threshold",
            description="Automatic RPL claims wait until the suggested fee (gwei) is below this.",
            defaults={Network.ALL: 150.0},
            affected_containers=_GAS_CONTAINERS,
            min_value=0.0,
        )

        self.minipool_stake_gas_threshold = FloatParameter(
            id="minipoolStakeGasThreshold",
            name="Minipool Stake Gas Threshold",
            description="Minipool stakes wait for the suggested fee (gwei) to drop below this.",
            defaults={Network.ALL: 150.0},
            affected_containers=[ContainerID.NODE],
            min_value=0.0,
        )

    # Network-derived values

    @property
    def tx_watch_url(self) -> str:
        """Block explorer link for submitted transactions."""
        return _TX_WATCH_URLS[self.network.value]

    @property
    def stake_url(self) -> str:
        """Where to stake ETH for rETH."""
        return _STAKE_URLS[self.network.value]

    @property
    def chain_id(self) -> int:
        """Execution chain id of the selected network."""
        return _CHAIN_IDS[self.network.value]

    @property
    def storage_address(self) -> str:
        """Address of the protocol storage contract."""
        return _STORAGE_ADDRESSES[self.network.value]

    @property
    def one_inch_oracle_address(self) -> str:
        """Address of the 1inch price oracle."""
        return _ONE_INCH_ORACLE_ADDRESSES[self.network.value]

    @property
    def rpl_token_address(self) -> str:
        """Address of the RPL token contract."""
        return _RPL_TOKEN_ADDRESSES[self.network.value]

    @property
    def rpl_faucet_address(self) -> str:
        """Empty on networks without a faucet."""
        return _RPL_FAUCET_ADDRESSES[self.network.value]

    @property
    def snapshot_delegation_address(self) -> str:
        """Address of the Snapshot delegation contract."""
        return _SNAPSHOT_DELEGATION_ADDRESSES[self.network.value]

    # Filesystem paths

    def _data_file(self, name: str, is_native_mode: bool) -> str:
        # Containers mount the data folder at a fixed location; native installs read it in place.
        if is_native_mode:
            return os.path.join(self.data_path.value, name)
        return f"{_CONTAINER_DATA_DIR}/{name}"

    def wallet_path(self, is_native_mode: bool) -> str:
        """Location of the encrypted node wallet."""
        return self._data_file("wallet", is_native_mode)

    def password_path(self, is_native_mode: bool) -> str:
        """Location of the node wallet's password file."""
        return self._data_file("password", is_native_mode)

    def validator_keychain_path(self, is_native_mode: bool) -> str:
        """Location of the validator key folder."""
        return self._data_file("validators", is_native_mode)

    def custom_key_path(self, is_native_mode: bool) -> str:
        """Location of imported validator keys not derived from the node wallet."""
        return self._data_file("custom-keys", is_native_mode)

    def custom_key_password_file_path(self, is_native_mode: bool) -> str:
        """Location of the password file for imported validator keys."""
        return self._data_file("custom-key-passwords", is_native_mode)
