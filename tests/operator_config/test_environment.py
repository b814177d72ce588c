"""Tests for the orchestrator environment projection."""

from __future__ import annotations

from operator_config import RootConfig
from operator_config.sections.execution import GETH_TAG
from operator_config.sections.smartnode import SMARTNODE_TAG
from operator_config.types import ConsensusClient, ExecutionClient, Mode


class TestIdentity:
    """Variables present in every environment."""

    def test_identity_and_root_values(self, cfg: RootConfig) -> None:
        """Image, folder, smartnode and root settings are always exported."""
        env = cfg.generate_environment()
        assert env["SMARTNODE_IMAGE"] == SMARTNODE_TAG
        assert env["ROCKETPOOL_FOLDER"] == cfg.directory
        assert env["NETWORK"] == "mainnet"
        assert env["COMPOSE_PROJECT_NAME"] == "rocketpool"
        assert env["ENABLE_METRICS"] == "true"
        assert env["RECONNECT_DELAY"] == "60s"
        assert env["BN_METRICS_PORT"] == "9100"

    def test_all_values_are_strings(self, cfg: RootConfig) -> None:
        """The orchestrator only takes strings."""
        env = cfg.generate_environment()
        assert all(isinstance(value, str) for value in env.values())


class TestExecutionClient:
    """Primary and fallback execution client variables."""

    def test_local_client(self, cfg: RootConfig) -> None:
        """A local client is reached through its container."""
        env = cfg.generate_environment()
        assert env["EC_CLIENT"] == "geth"
        assert env["EC_HTTP_ENDPOINT"] == "http://eth1:8545"
        assert env["EC_WS_ENDPOINT"] == "ws://eth1:8546"
        assert env["EC_HOSTNAME"] == "eth1"
        assert env["EC_STOP_SIGNAL"] == "SIGINT"
        assert env["EC_CONTAINER_TAG"] == GETH_TAG
        assert "EC_OPEN_API_PORTS" not in env

    def test_unselected_clients_are_absent(self, cfg: RootConfig) -> None:
        """Nothing from unselected variants leaks into the environment."""
        env = cfg.generate_environment()
        for name in (
            "INFURA_PROJECT_ID",
            "POCKET_GATEWAY_ID",
            "NETHERMIND_PRUNE_MEM_SIZE",
            "BESU_JVM_HEAP_SIZE",
            "FALLBACK_EC_HTTP_ENDPOINT",
            "FALLBACK_POCKET_GATEWAY_ID",
            "CC_RPC_ENDPOINT",
            "BITFLY_NODE_METRICS_SECRET",
            "ADDON_GWW_ENABLED",
        ):
            assert name not in env, name

    def test_open_rpc_ports(self, cfg: RootConfig) -> None:
        """Both API ports are published when requested."""
        cfg.execution_common.open_rpc_ports.value = True
        env = cfg.generate_environment()
        assert env["EC_OPEN_API_PORTS"] == ', "8545:8545/tcp", "8546:8546/tcp"'

    def test_pocket_skips_websocket(self, cfg: RootConfig) -> None:
        """A client without websocket support neither exports nor publishes the port."""
        cfg.execution_client.value = ExecutionClient.POCKET
        cfg.consensus_client.value = ConsensusClient.LIGHTHOUSE
        cfg.execution_common.open_rpc_ports.value = True
        env = cfg.generate_environment()
        assert env["EC_OPEN_API_PORTS"] == ', "8545:8545/tcp"'
        assert "EC_WS_PORT" not in env
        assert env["EC_HTTP_PORT"] == "8545"
        assert env["POCKET_GATEWAY_ID"] == cfg.pocket.gateway_id.value
        assert env["EC_STOP_SIGNAL"] == "SIGTERM"

    def test_external_client(self, cfg: RootConfig) -> None:
        """An external client exports its URLs and the external marker."""
        cfg.execution_client_mode.value = Mode.EXTERNAL
        cfg.external_execution.http_url.value = "http://192.168.1.5:8545"
        cfg.external_execution.ws_url.value = "ws://192.168.1.5:8546"
        env = cfg.generate_environment()
        assert env["EC_CLIENT"] == "X"
        assert env["EC_HTTP_ENDPOINT"] == "http://192.168.1.5:8545"
        assert env["EC_HOSTNAME"] == "192.168.1.5"
        assert "EC_STOP_SIGNAL" not in env
        assert "EC_HTTP_PORT" not in env

    def test_local_fallback(self, cfg: RootConfig) -> None:
        """A local fallback gets its own prefixed variables."""
        cfg.use_fallback_execution_client.value = True
        cfg.fallback_execution_common.open_rpc_ports.value = True
        env = cfg.generate_environment()
        assert env["FALLBACK_EC_CLIENT"] == "pocket"
        assert env["FALLBACK_EC_HTTP_ENDPOINT"] == "http://eth1-fallback:8545"
        assert env["FALLBACK_EC_OPEN_API_PORTS"] == '"8545:8545/tcp"'
        assert env["FALLBACK_POCKET_GATEWAY_ID"] == cfg.fallback_pocket.gateway_id.value
        assert "FALLBACK_EC_WS_PORT" not in env

    def test_external_fallback(self, cfg: RootConfig) -> None:
        """An external fallback exports its URLs."""
        cfg.use_fallback_execution_client.value = True
        cfg.fallback_execution_client_mode.value = Mode.EXTERNAL
        cfg.fallback_external_execution.http_url.value = "http://backup:8545"
        env = cfg.generate_environment()
        assert env["FALLBACK_EC_HTTP_ENDPOINT"] == "http://backup:8545"
        assert "FALLBACK_POCKET_GATEWAY_ID" not in env


class TestConsensusClient:
    """Consensus client variables."""

    def test_local_client(self, cfg: RootConfig) -> None:
        """A local client is reached through the beacon container."""
        env = cfg.generate_environment()
        assert env["CC_CLIENT"] == "nimbus"
        assert env["CC_API_ENDPOINT"] == "http://eth2:5052"
        assert env["CC_HOSTNAME"] == "eth2"
        assert env["BN_OPEN_PORTS"] == ""
        assert env["BN_API_PORT"] == "5052"
        assert env["DOPPELGANGER_DETECTION"] == "true"

    def test_prysm_rpc_endpoint(self, cfg: RootConfig) -> None:
        """Prysm also exposes its gRPC endpoint."""
        cfg.consensus_client.value = ConsensusClient.PRYSM
        cfg.consensus_common.open_api_port.value = True
        cfg.prysm.open_rpc_port.value = True
        env = cfg.generate_environment()
        assert env["CC_RPC_ENDPOINT"] == "http://eth2:5053"
        assert env["BN_OPEN_PORTS"] == ', "5052:5052/tcp", "5053:5053/tcp"'
        assert env["BN_RPC_PORT"] == "5053"

    def test_external_client(self, cfg: RootConfig) -> None:
        """An external client exports its own endpoint."""
        cfg.consensus_client_mode.value = Mode.EXTERNAL
        cfg.external_consensus_client.value = ConsensusClient.PRYSM
        cfg.external_prysm.http_url.value = "http://10.0.0.3:3500"
        cfg.external_prysm.json_rpc_url.value = "10.0.0.3:4000"
        env = cfg.generate_environment()
        assert env["CC_CLIENT"] == "prysm"
        assert env["CC_API_ENDPOINT"] == "http://10.0.0.3:3500"
        assert env["CC_RPC_ENDPOINT"] == "10.0.0.3:4000"
        assert env["CC_HOSTNAME"] == "10.0.0.3"
        assert "BN_API_PORT" not in env

    def test_native_mode_has_no_consensus_variables(self, native_cfg: RootConfig) -> None:
        """Native installs manage their consensus client themselves."""
        env = native_cfg.generate_environment()
        assert "CC_CLIENT" not in env
        assert "CC_API_ENDPOINT" not in env


class TestMetricsAndAddons:
    """Metrics stack, bitfly and addon variables."""

    def test_metrics_enabled(self, cfg: RootConfig) -> None:
        """The metrics services export their settings."""
        env = cfg.generate_environment()
        assert env["PROMETHEUS_PORT"] == "9091"
        assert env["GRAFANA_PORT"] == "3100"
        assert "PROMETHEUS_OPEN_PORTS" not in env
        assert "EXPORTER_ROOTFS_COMMAND" not in env

    def test_metrics_options(self, cfg: RootConfig) -> None:
        """Optional metrics features add their own entries."""
        cfg.prometheus.open_port.value = True
        cfg.exporter.root_fs.value = True
        cfg.exporter.additional_flags.value = "--collector.textfile"
        env = cfg.generate_environment()
        assert env["PROMETHEUS_OPEN_PORTS"] == "9091:9091/tcp"
        assert env["EXPORTER_ROOTFS_COMMAND"] == ', "--path.rootfs=/rootfs"'
        assert env["EXPORTER_ADDITIONAL_FLAGS"] == ', "--collector.textfile"'

    def test_metrics_disabled(self, cfg: RootConfig) -> None:
        """Disabled metrics export nothing but the flag."""
        cfg.enable_metrics.value = False
        env = cfg.generate_environment()
        assert env["ENABLE_METRICS"] == "false"
        assert "PROMETHEUS_PORT" not in env
        assert "GRAFANA_PORT" not in env

    def test_bitfly(self, cfg: RootConfig) -> None:
        """Bitfly settings are exported only when enabled."""
        cfg.enable_bitfly_node_metrics.value = True
        cfg.bitfly_node_metrics.secret.value = "s3cret"
        env = cfg.generate_environment()
        assert env["BITFLY_NODE_METRICS_SECRET"] == "s3cret"

    def test_addon(self, cfg: RootConfig) -> None:
        """An enabled addon adds its variables."""
        cfg.graffiti_wall_writer.enabled.value = True
        env = cfg.generate_environment()
        assert env["ADDON_GWW_ENABLED"] == "true"
