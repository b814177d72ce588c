"""
Execution client sections.

Every execution section can be built for the primary or the fallback client.
The fallback variant prefixes its environment variables with `FALLBACK_`,
affects the `eth1-fallback` container and carries a distinct title.
"""

from typing import Final

from operator_config import config
from operator_config.parameter import (
    BoolParameter,
    StringParameter,
    Uint16Parameter,
    UintParameter,
)
from operator_config.section import (
    ExecutionClientSection,
    Section,
    env_prefix,
    execution_container,
)
from operator_config.sections.smartnode import POW_PROXY_TAG
from operator_config.types import ConsensusClient, ContainerID, ExecutionClient, Network

GETH_TAG: Final = "ethereum/client-go:v1.10.17"
NETHERMIND_TAG: Final = "nethermind/nethermind:1.13.4"
BESU_TAG: Final = "hyperledger/besu:22.4.3-openjdk-latest"

DEFAULT_POCKET_GATEWAY_MAINNET: Final = "lb/613bb4ae8c124d00353c40a1"
DEFAULT_POCKET_GATEWAY_PRATER: Final = "lb/6126b4a783e49000343a3a47"

HTTP_PORT_ID: Final = "httpPort"
WS_PORT_ID: Final = "wsPort"


def _title(name: str, is_fallback: bool) -> str:
    return f"Fallback {name} Settings" if is_fallback else f"{name} Settings"


def geth_cache_size(total_memory_gb: int) -> int:
    """Recommended Geth cache in MB for the given amount of system memory."""
    if total_memory_gb == 0:
        return 0
    if total_memory_gb < 9:
        return 256
    if total_memory_gb < 13:
        return 2048
    return 4096


def nethermind_memory_size(total_memory_gb: int) -> int:
    """Recommended Nethermind cache and in-memory pruning size in MB."""
    if total_memory_gb == 0:
        return 0
    for limit, size in ((9, 512), (13, 1024), (17, 2048), (25, 4096), (33, 6144)):
        if total_memory_gb < limit:
            return size
    return 8192


def besu_heap_size(total_memory_gb: int) -> int:
    """Recommended Besu JVM heap in MB; zero lets Besu pick."""
    return 512 if total_memory_gb < 9 else 0


def default_max_peers(arch: str) -> int:
    """Peer limit for clients that are heavier on ARM boards."""
    return 25 if arch == "arm64" else 50


def _max_peers(client: str, default: int, is_fallback: bool) -> Uint16Parameter:
    return Uint16Parameter(
        id="maxPeers",
        name="Max Peers",
        description=f"The maximum number of peers {client} should connect to.",
        defaults={Network.ALL: default},
        affected_containers=[execution_container(is_fallback)],
        env_vars=[env_prefix(is_fallback) + "EC_MAX_PEERS"],
    )


def _container_tag(client: str, tag: str, is_fallback: bool) -> StringParameter:
    return StringParameter(
        id="containerTag",
        name="Container Tag",
        description=f"The container tag of the {client} image to use.",
        defaults={Network.ALL: tag},
        affected_containers=[execution_container(is_fallback)],
        env_vars=[env_prefix(is_fallback) + "EC_CONTAINER_TAG"],
        overwrite_on_upgrade=True,
    )


def _additional_flags(client: str, is_fallback: bool) -> StringParameter:
    return StringParameter(
        id="additionalFlags",
        name="Additional Flags",
        description=f"Additional custom command line flags for {client}.",
        defaults={Network.ALL: ""},
        affected_containers=[execution_container(is_fallback)],
        env_vars=[env_prefix(is_fallback) + "EC_ADDITIONAL_FLAGS"],
        can_be_blank=True,
    )


class ExecutionCommonSection(Section):
    """Settings shared by every locally run execution client."""

    def __init__(self, is_fallback: bool = False) -> None:
        self.title = (
            "Common Fallback Execution Client Settings"
            if is_fallback
            else "Common Execution Client Settings"
        )
        prefix = env_prefix(is_fallback)

        self.http_port = Uint16Parameter(
            id=HTTP_PORT_ID,
            name="HTTP Port",
            description="The port the execution client serves its HTTP API on.",
            defaults={Network.ALL: 8545},
            affected_containers=[
                ContainerID.API,
                ContainerID.NODE,
                ContainerID.WATCHTOWER,
                execution_container(is_fallback),
                ContainerID.ETH2,
            ],
            env_vars=[prefix + "EC_HTTP_PORT"],
        )

        self.ws_port = Uint16Parameter(
            id=WS_PORT_ID,
            name="Websocket Port",
            description="The port the execution client serves its websocket API on.",
            defaults={Network.ALL: 8546},
            affected_containers=[execution_container(is_fallback), ContainerID.ETH2],
            env_vars=[prefix + "EC_WS_PORT"],
        )

        self.open_rpc_ports = BoolParameter(
            id="openRpcPorts",
            name="Expose RPC Ports",
            description="Expose the HTTP and websocket ports to the host machine.",
            defaults={Network.ALL: False},
            affected_containers=[execution_container(is_fallback)],
        )


class GethSection(ExecutionClientSection):
    """Geth, the Go execution client."""

    client = ExecutionClient.GETH
    stop_signal = "SIGINT"

    def __init__(self) -> None:
        self.title = "Geth Settings"

        self.cache_size = UintParameter(
            id="cache",
            name="Cache Size",
            description="The amount of RAM (in MB) Geth uses for its cache.",
            defaults={Network.ALL: geth_cache_size(config.TOTAL_MEMORY_GB)},
            affected_containers=[ContainerID.ETH1],
            env_vars=["EC_CACHE_SIZE"],
        )
        self.max_peers = _max_peers("Geth", default_max_peers(config.OPERATOR_ARCH), False)
        self.container_tag = _container_tag("Geth", GETH_TAG, False)
        self.additional_flags = _additional_flags("Geth", False)


class NethermindSection(ExecutionClientSection):
    """Nethermind, the .NET execution client."""

    client = ExecutionClient.NETHERMIND

    def __init__(self) -> None:
        self.title = "Nethermind Settings"
        memory_size = nethermind_memory_size(config.TOTAL_MEMORY_GB)

        self.cache_size = UintParameter(
            id="cache",
            name="Cache Size",
            description="The amount of RAM (in MB) Nethermind uses for its cache.",
            defaults={Network.ALL: memory_size},
            affected_containers=[ContainerID.ETH1],
            env_vars=["EC_CACHE_SIZE"],
        )
        self.max_peers = _max_peers("Nethermind", default_max_peers(config.OPERATOR_ARCH), False)
        self.prune_mem_size = UintParameter(
            id="pruneMemSize",
            name="In-Memory Pruning Cache Size",
            description="The amount of RAM (in MB) Nethermind uses for in-memory pruning.",
            defaults={Network.ALL: memory_size},
            affected_containers=[ContainerID.ETH1],
            env_vars=["NETHERMIND_PRUNE_MEM_SIZE"],
        )
        self.container_tag = _container_tag("Nethermind", NETHERMIND_TAG, False)
        self.additional_flags = _additional_flags("Nethermind", False)


class BesuSection(ExecutionClientSection):
    """Besu, the Java execution client."""

    client = ExecutionClient.BESU

    def __init__(self) -> None:
        self.title = "Besu Settings"

        self.jvm_heap_size = UintParameter(
            id="jvmHeapSize",
            name="JVM Heap Size",
            description="The max heap size (in MB) of Besu's JVM; 0 lets Besu decide.",
            defaults={Network.ALL: besu_heap_size(config.TOTAL_MEMORY_GB)},
            affected_containers=[ContainerID.ETH1],
            env_vars=["BESU_JVM_HEAP_SIZE"],
        )
        self.max_peers = _max_peers("Besu", 25, False)
        self.max_back_layers = UintParameter(
            id="maxBackLayers",
            name="Historical Block Replay Limit",
            description="The number of blocks Besu can replay when rebuilding historical state.",
            defaults={Network.ALL: 512},
            affected_containers=[ContainerID.ETH1],
            env_vars=["BESU_MAX_BACK_LAYERS"],
        )
        self.container_tag = _container_tag("Besu", BESU_TAG, False)
        self.additional_flags = _additional_flags("Besu", False)


class InfuraSection(ExecutionClientSection):
    """Infura, a hosted execution provider reached through the proxy container."""

    client = ExecutionClient.INFURA

    def __init__(self, is_fallback: bool = False) -> None:
        self.title = _title("Infura", is_fallback)

        self.project_id = StringParameter(
            id="projectID",
            name="Infura Project ID",
            description="The project ID of your Infura project.",
            defaults={Network.ALL: ""},
            regex=r"^[0-9a-fA-F]{32}$",
            affected_containers=[execution_container(is_fallback)],
            env_vars=[env_prefix(is_fallback) + "INFURA_PROJECT_ID"],
        )
        self.container_tag = _container_tag("Infura proxy", POW_PROXY_TAG, is_fallback)
        self.additional_flags = _additional_flags("the Infura proxy", is_fallback)


class PocketSection(ExecutionClientSection):
    """
    Pocket, a decentralized hosted execution provider.

    Pocket serves no websocket endpoint, so the common websocket port does not
    apply and consensus clients that need a websocket connection cannot use it.
    """

    client = ExecutionClient.POCKET
    unsupported_common_params = frozenset({WS_PORT_ID})
    compatible_consensus_clients = frozenset(
        {ConsensusClient.LIGHTHOUSE, ConsensusClient.PRYSM, ConsensusClient.TEKU}
    )

    def __init__(self, is_fallback: bool = False) -> None:
        self.title = _title("Pocket", is_fallback)

        self.gateway_id = StringParameter(
            id="gatewayID",
            name="Gateway ID",
            description="A custom Pocket gateway to use instead of the default one.",
            defaults={
                Network.MAINNET: DEFAULT_POCKET_GATEWAY_MAINNET,
                Network.PRATER: DEFAULT_POCKET_GATEWAY_PRATER,
            },
            regex=r"(^$|^(lb\/)?[0-9a-zA-Z]{24,}$)",
            affected_containers=[execution_container(is_fallback)],
            env_vars=[env_prefix(is_fallback) + "POCKET_GATEWAY_ID"],
        )
        self.container_tag = _container_tag("Pocket proxy", POW_PROXY_TAG, is_fallback)
        self.additional_flags = _additional_flags("the Pocket proxy", is_fallback)


class ExternalExecutionSection(Section):
    """An execution client the user runs and manages outside the stack."""

    def __init__(self, is_fallback: bool = False) -> None:
        self.title = _title("External Execution Client", is_fallback)
        prefix = env_prefix(is_fallback)
        containers = [
            ContainerID.API,
            execution_container(is_fallback),
            ContainerID.ETH2,
            ContainerID.NODE,
            ContainerID.WATCHTOWER,
        ]

        self.http_url = StringParameter(
            id="httpUrl",
            name="HTTP URL",
            description="The URL of the HTTP RPC endpoint of your external execution client.",
            defaults={Network.ALL: ""},
            affected_containers=containers,
            env_vars=[prefix + "EC_HTTP_ENDPOINT"],
        )
        self.ws_url = StringParameter(
            id="wsUrl",
            name="Websocket URL",
            description="The URL of the websocket RPC endpoint of your external execution client.",
            defaults={Network.ALL: ""},
            affected_containers=containers,
            env_vars=[prefix + "EC_WS_ENDPOINT"],
        )
