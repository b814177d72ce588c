"""Sections of the optional metrics stack and the beaconcha.in node-metrics uploader."""

from typing import Final

from operator_config.parameter import BoolParameter, StringParameter, Uint16Parameter
from operator_config.section import Section
from operator_config.types import ContainerID, Network

GRAFANA_TAG: Final = "grafana/grafana:8.5.5"
PROMETHEUS_TAG: Final = "prom/prometheus:v2.36.0"
EXPORTER_TAG: Final = "prom/node-exporter:v1.3.1"

BITFLY_DEFAULT_ENDPOINT: Final = "https://beaconcha.in/api/v1/client/metrics"


class GrafanaSection(Section):
    def __init__(self) -> None:
        self.title = "Grafana Settings"

        self.port = Uint16Parameter(
            id="port",
            name="Grafana Port",
            description="The port Grafana serves its dashboards on.",
            defaults={Network.ALL: 3100},
            affected_containers=[ContainerID.GRAFANA],
            env_vars=["GRAFANA_PORT"],
        )
        self.container_tag = StringParameter(
            id="containerTag",
            name="Grafana Container Tag",
            description="The container tag of the Grafana image to use.",
            defaults={Network.ALL: GRAFANA_TAG},
            affected_containers=[ContainerID.GRAFANA],
            env_vars=["GRAFANA_CONTAINER_TAG"],
            overwrite_on_upgrade=True,
        )


class PrometheusSection(Section):
    def __init__(self) -> None:
        self.title = "Prometheus Settings"

        self.port = Uint16Parameter(
            id="port",
            name="Prometheus Port",
            description="The port Prometheus serves its API on.",
            defaults={Network.ALL: 9091},
            affected_containers=[ContainerID.PROMETHEUS],
            env_vars=["PROMETHEUS_PORT"],
        )
        self.open_port = BoolParameter(
            id="openPort",
            name="Expose Prometheus Port",
            description="Expose the Prometheus port to the host machine.",
            defaults={Network.ALL: False},
            affected_containers=[ContainerID.PROMETHEUS],
        )
        self.container_tag = StringParameter(
            id="containerTag",
            name="Prometheus Container Tag",
            description="The container tag of the Prometheus image to use.",
            defaults={Network.ALL: PROMETHEUS_TAG},
            affected_containers=[ContainerID.PROMETHEUS],
            env_vars=["PROMETHEUS_CONTAINER_TAG"],
            overwrite_on_upgrade=True,
        )
        # Exported as a pre-formatted list entry rather than verbatim.
        self.additional_flags = StringParameter(
            id="additionalFlags",
            name="Additional Prometheus Flags",
            description="Additional custom command line flags for Prometheus.",
            defaults={Network.ALL: ""},
            affected_containers=[ContainerID.PROMETHEUS],
            can_be_blank=True,
        )


class ExporterSection(Section):
    def __init__(self) -> None:
        self.title = "Node Exporter Settings"

        self.root_fs = BoolParameter(
            id="enableRootFs",
            name="Allow Root Filesystem Access",
            description="Let the exporter read the root filesystem to report disk usage.",
            defaults={Network.ALL: False},
            affected_containers=[ContainerID.EXPORTER],
        )
        self.container_tag = StringParameter(
            id="containerTag",
            name="Exporter Container Tag",
            description="The container tag of the node exporter image to use.",
            defaults={Network.ALL: EXPORTER_TAG},
            affected_containers=[ContainerID.EXPORTER],
            env_vars=["EXPORTER_CONTAINER_TAG"],
            overwrite_on_upgrade=True,
        )
        self.additional_flags = StringParameter(
            id="additionalFlags",
            name="Additional Exporter Flags",
            description="Additional custom command line flags for the node exporter.",
            defaults={Network.ALL: ""},
            affected_containers=[ContainerID.EXPORTER],
            can_be_blank=True,
        )


class BitflyNodeMetricsSection(Section):
    """Credentials for uploading client metrics to a beaconcha.in account."""

    def __init__(self) -> None:
        self.title = "Beaconcha.in Node Metrics Settings"
        containers = [ContainerID.VALIDATOR, ContainerID.ETH2]

        self.secret = StringParameter(
            id="bitflySecret",
            name="Beaconcha.in API Key",
            description="The API key of your beaconcha.in node metrics integration.",
            defaults={Network.ALL: ""},
            affected_containers=containers,
            env_vars=["BITFLY_NODE_METRICS_SECRET"],
        )
        self.endpoint = StringParameter(
            id="bitflyEndpoint",
            name="Node Metrics Endpoint",
            description="The beaconcha.in endpoint the metrics are uploaded to.",
            defaults={Network.ALL: BITFLY_DEFAULT_ENDPOINT},
            affected_containers=containers,
            env_vars=["BITFLY_NODE_METRICS_ENDPOINT"],
        )
        self.machine_name = StringParameter(
            id="bitflyMachineName",
            name="Node Metrics Machine Name",
            description="The name of the machine shown in the beaconcha.in app.",
            defaults={Network.ALL: ""},
            affected_containers=containers,
            env_vars=["BITFLY_NODE_METRICS_MACHINE_NAME"],
        )
