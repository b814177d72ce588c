"""
Enumerations shared by every section of the configuration.

All members are string enums so their values are what gets persisted and
projected into the environment.
"""

from enum import StrEnum


class ContainerID(StrEnum):
    """A managed service container that may need a restart when a setting changes."""

    API = "api"
    NODE = "node"
    WATCHTOWER = "watchtower"
    ETH1 = "eth1"
    ETH1_FALLBACK = "eth1-fallback"
    ETH2 = "eth2"
    VALIDATOR = "validator"
    GRAFANA = "grafana"
    PROMETHEUS = "prometheus"
    EXPORTER = "exporter"
    ADDON_GWW = "addon_gww"


class Network(StrEnum):
    """
    The chain a node runs on.

    `ALL` never names a real chain; it is the wildcard key in a parameter's defaults.
    """

    ALL = "all"
    MAINNET = "mainnet"
    PRATER = "prater"


PRIMARY_NETWORK = Network.MAINNET
"""The network selected for fresh configurations and documents that name none."""

SUPPORTED_NETWORKS: tuple[Network, ...] = (Network.MAINNET, Network.PRATER)
"""Every selectable network; each parameter default must resolve for all of them."""


class Mode(StrEnum):
    """Whether a client is managed by the stack (local) or operated by the user (external)."""

    LOCAL = "local"
    EXTERNAL = "external"


class ParameterType(StrEnum):
    """The data type of a parameter's value."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    UINT16 = "uint16"
    FLOAT = "float"
    STRING = "string"
    CHOICE = "choice"


class ExecutionClient(StrEnum):
    """Execution client implementations."""

    GETH = "geth"
    NETHERMIND = "nethermind"
    BESU = "besu"
    INFURA = "infura"
    POCKET = "pocket"


class ConsensusClient(StrEnum):
    """Consensus client implementations."""

    LIGHTHOUSE = "lighthouse"
    NIMBUS = "nimbus"
    PRYSM = "prysm"
    TEKU = "teku"
