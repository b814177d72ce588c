"""
Consensus client sections.

Local clients share the settings of `ConsensusCommonSection`; each client adds
its own. External clients are run by the user, so the stack only starts a
validator client that connects to them.
"""

from collections.abc import Sequence
from types import MappingProxyType
from typing import Final

from operator_config import config
from operator_config.parameter import BoolParameter, StringParameter, Uint16Parameter
from operator_config.section import ConsensusClientSection, Section
from operator_config.types import ConsensusClient, ContainerID, Network

LIGHTHOUSE_TAG: Final = "sigp/lighthouse:v2.3.1"
NIMBUS_TAG: Final = "statusim/nimbus-eth2:multiarch-v22.5.2"
PRYSM_BN_TAG_AMD64: Final = "prysmaticlabs/prysm-beacon-chain:v2.1.2-portable"
PRYSM_BN_TAG_ARM64: Final = "rocketpool/prysm:v2.1.2"
PRYSM_VC_TAG_AMD64: Final = "prysmaticlabs/prysm-validator:v2.1.2-portable"
PRYSM_VC_TAG_ARM64: Final = "rocketpool/prysm:v2.1.2"
TEKU_TAG: Final = "consensys/teku:22.5.2"

GRAFFITI_ID: Final = "graffiti"
CHECKPOINT_SYNC_URL_ID: Final = "checkpointSyncUrl"
DOPPELGANGER_DETECTION_ID: Final = "doppelgangerDetection"

_BEACON_AND_VALIDATOR: Final = (ContainerID.ETH2, ContainerID.VALIDATOR)


def prysm_bn_tag(arch: str) -> str:
    """Prysm beacon node image for the host architecture."""
    return PRYSM_BN_TAG_ARM64 if arch == "arm64" else PRYSM_BN_TAG_AMD64


def prysm_vc_tag(arch: str) -> str:
    """Prysm validator client image for the host architecture."""
    return PRYSM_VC_TAG_ARM64 if arch == "arm64" else PRYSM_VC_TAG_AMD64


def _graffiti() -> StringParameter:
    return StringParameter(
        id=GRAFFITI_ID,
        name="Custom Graffiti",
        description="A custom message to include in proposed blocks (at most 16 characters).",
        defaults={Network.ALL: ""},
        max_length=16,
        affected_containers=[ContainerID.VALIDATOR],
        env_vars=["CUSTOM_GRAFFITI"],
        can_be_blank=True,
    )


def _doppelganger_detection() -> BoolParameter:
    return BoolParameter(
        id=DOPPELGANGER_DETECTION_ID,
        name="Enable Doppelganger Detection",
        description="Wait a few epochs before attesting to catch keys running elsewhere.",
        defaults={Network.ALL: True},
        affected_containers=[ContainerID.VALIDATOR],
        env_vars=["DOPPELGANGER_DETECTION"],
    )


def _max_peers(client: str, default: int) -> Uint16Parameter:
    return Uint16Parameter(
        id="maxPeers",
        name="Max Peers",
        description=f"The maximum number of peers {client} should connect to.",
        defaults={Network.ALL: default},
        affected_containers=[ContainerID.ETH2],
        env_vars=["BN_MAX_PEERS"],
    )


def _container_tag(
    client: str,
    tag: str,
    containers: Sequence[ContainerID],
    env_vars: Sequence[str],
    parameter_id: str = "containerTag",
) -> StringParameter:
    return StringParameter(
        id=parameter_id,
        name="Container Tag",
        description=f"The container tag of the {client} image to use.",
        defaults={Network.ALL: tag},
        affected_containers=containers,
        env_vars=env_vars,
        overwrite_on_upgrade=True,
    )


def _additional_flags(
    parameter_id: str, name: str, container: ContainerID, env_var: str
) -> StringParameter:
    return StringParameter(
        id=parameter_id,
        name=name,
        description="Additional custom command line flags passed to the client.",
        defaults={Network.ALL: ""},
        affected_containers=[container],
        env_vars=[env_var],
        can_be_blank=True,
    )


def _additional_bn_flags() -> StringParameter:
    return _additional_flags(
        "additionalBnFlags", "Additional Beacon Node Flags", ContainerID.ETH2, "BN_ADDITIONAL_FLAGS"
    )


def _additional_vc_flags() -> StringParameter:
    return _additional_flags(
        "additionalVcFlags",
        "Additional Validator Client Flags",
        ContainerID.VALIDATOR,
        "VC_ADDITIONAL_FLAGS",
    )


def _external_http_url() -> StringParameter:
    return StringParameter(
        id="httpUrl",
        name="HTTP URL",
        description="The URL of the HTTP Beacon API endpoint of your external client.",
        defaults={Network.ALL: ""},
        affected_containers=[
            ContainerID.API,
            ContainerID.NODE,
            ContainerID.WATCHTOWER,
            ContainerID.VALIDATOR,
        ],
        env_vars=["CC_API_ENDPOINT"],
    )


class ConsensusCommonSection(Section):
    """Settings shared by every locally run consensus client."""

    def __init__(self) -> None:
        self.title = "Common Consensus Client Settings"

        self.graffiti = _graffiti()
        self.checkpoint_sync_url = StringParameter(
            id=CHECKPOINT_SYNC_URL_ID,
            name="Checkpoint Sync URL",
            description="A trusted Beacon API URL to sync from a recent finalized checkpoint.",
            defaults={Network.ALL: ""},
            affected_containers=[ContainerID.ETH2],
            env_vars=["CHECKPOINT_SYNC_URL"],
            can_be_blank=True,
        )
        self.p2p_port = Uint16Parameter(
            id="p2pPort",
            name="P2P Port",
            description="The port the consensus client uses to talk to its peers.",
            defaults={Network.ALL: 9001},
            affected_containers=[ContainerID.ETH2],
            env_vars=["BN_P2P_PORT"],
        )
        self.api_port = Uint16Parameter(
            id="apiPort",
            name="HTTP API Port",
            description="The port the consensus client serves its Beacon API on.",
            defaults={Network.ALL: 5052},
            affected_containers=[
                ContainerID.API,
                ContainerID.NODE,
                ContainerID.WATCHTOWER,
                ContainerID.ETH2,
                ContainerID.VALIDATOR,
            ],
            env_vars=["BN_API_PORT"],
        )
        self.open_api_port = BoolParameter(
            id="openApiPort",
            name="Expose API Port",
            description="Expose the Beacon API port to the host machine.",
            defaults={Network.ALL: False},
            affected_containers=[ContainerID.ETH2],
        )
        self.doppelganger_detection = _doppelganger_detection()


class LighthouseSection(ConsensusClientSection):
    """Lighthouse, the Rust consensus client."""

    client = ConsensusClient.LIGHTHOUSE

    def __init__(self) -> None:
        self.title = "Lighthouse Settings"

        self.max_peers = _max_peers("Lighthouse", 80)
        self.container_tag = _container_tag(
            "Lighthouse",
            LIGHTHOUSE_TAG,
            _BEACON_AND_VALIDATOR,
            ["BN_CONTAINER_TAG", "VC_CONTAINER_TAG"],
        )
        self.additional_bn_flags = _additional_bn_flags()
        self.additional_vc_flags = _additional_vc_flags()


class NimbusSection(ConsensusClientSection):
    """
    Nimbus, the Nim consensus client.

    Nimbus runs its validator duties inside the beacon node, so settings that
    would restart the validator container restart the beacon container instead.
    """

    client = ConsensusClient.NIMBUS
    container_overrides = MappingProxyType({ContainerID.VALIDATOR: ContainerID.ETH2})

    def __init__(self) -> None:
        self.title = "Nimbus Settings"

        self.max_peers = _max_peers("Nimbus", 100 if config.OPERATOR_ARCH == "arm64" else 160)
        self.container_tag = _container_tag(
            "Nimbus", NIMBUS_TAG, _BEACON_AND_VALIDATOR, ["BN_CONTAINER_TAG"]
        )
        self.additional_flags = _additional_flags(
            "additionalFlags", "Additional Flags", ContainerID.ETH2, "BN_ADDITIONAL_FLAGS"
        )


class PrysmSection(ConsensusClientSection):
    """Prysm, the Go consensus client, with separate beacon and validator images."""

    client = ConsensusClient.PRYSM

    def __init__(self) -> None:
        self.title = "Prysm Settings"

        self.max_peers = _max_peers("Prysm", 45)
        self.rpc_port = Uint16Parameter(
            id="rpcPort",
            name="RPC Port",
            description="The port Prysm serves its gRPC API on.",
            defaults={Network.ALL: 5053},
            affected_containers=_BEACON_AND_VALIDATOR,
            env_vars=["BN_RPC_PORT"],
        )
        self.open_rpc_port = BoolParameter(
            id="openRpcPort",
            name="Expose RPC Port",
            description="Expose Prysm's gRPC port to the host machine.",
            defaults={Network.ALL: False},
            affected_containers=[ContainerID.ETH2],
        )
        self.bn_container_tag = _container_tag(
            "Prysm beacon node",
            prysm_bn_tag(config.OPERATOR_ARCH),
            [ContainerID.ETH2],
            ["BN_CONTAINER_TAG"],
            parameter_id="bnContainerTag",
        )
        self.vc_container_tag = _container_tag(
            "Prysm validator client",
            prysm_vc_tag(config.OPERATOR_ARCH),
            [ContainerID.VALIDATOR],
            ["VC_CONTAINER_TAG"],
            parameter_id="vcContainerTag",
        )
        self.additional_bn_flags = _additional_bn_flags()
        self.additional_vc_flags = _additional_vc_flags()


class TekuSection(ConsensusClientSection):
    """Teku, the Java consensus client."""

    client = ConsensusClient.TEKU
    supports_doppelganger = False

    def __init__(self) -> None:
        self.title = "Teku Settings"

        self.max_peers = _max_peers("Teku", 74)
        self.container_tag = _container_tag(
            "Teku", TEKU_TAG, _BEACON_AND_VALIDATOR, ["BN_CONTAINER_TAG", "VC_CONTAINER_TAG"],
        )
        self.additional_bn_flags = _additional_bn_flags()
        self.additional_vc_flags = _additional_vc_flags()


class ExternalLighthouseSection(ConsensusClientSection):
    """A Lighthouse beacon node managed outside the stack."""

    client = ConsensusClient.LIGHTHOUSE

    def __init__(self) -> None:
        self.title = "External Lighthouse Settings"

        self.http_url = _external_http_url()
        self.graffiti = _graffiti()
        self.doppelganger_detection = _doppelganger_detection()
        self.container_tag = _container_tag(
            "Lighthouse", LIGHTHOUSE_TAG, [ContainerID.VALIDATOR], ["VC_CONTAINER_TAG"]
        )
        self.additional_vc_flags = _additional_vc_flags()


class ExternalPrysmSection(ConsensusClientSection):
    """A Prysm beacon node managed outside the stack."""

    client = ConsensusClient.PRYSM

    def __init__(self) -> None:
        self.title = "External Prysm Settings"

        self.http_url = _external_http_url()
        self.json_rpc_url = StringParameter(
            id="jsonRpcUrl",
            name="JSON-RPC URL",
            description="The URL of the gRPC endpoint of your external Prysm client.",
            defaults={Network.ALL: ""},
            affected_containers=[ContainerID.VALIDATOR],
            env_vars=["CC_RPC_ENDPOINT"],
        )
        self.graffiti = _graffiti()
        self.doppelganger_detection = _doppelganger_detection()
        self.container_tag = _container_tag(
            "Prysm validator client",
            prysm_vc_tag(config.OPERATOR_ARCH),
            [ContainerID.VALIDATOR],
            ["VC_CONTAINER_TAG"],
        )
        self.additional_vc_flags = _additional_vc_flags()


class ExternalTekuSection(ConsensusClientSection):
    """A Teku beacon node managed outside the stack."""

    client = ConsensusClient.TEKU
    supports_doppelganger = False

    def __init__(self) -> None:
        self.title = "External Teku Settings"

        self.http_url = _external_http_url()
        self.graffiti = _graffiti()
        self.container_tag = _container_tag(
            "Teku", TEKU_TAG, [ContainerID.VALIDATOR], ["VC_CONTAINER_TAG"]
        )
        self.additional_vc_flags = _additional_vc_flags()
