"""
Projection of a configuration into the orchestrator's environment variables.

The orchestrator passes the resulting map verbatim to its containers. Only the
selected variant of each client contributes its parameters, so the map never
mentions a client that is not in use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from operator_config.section import ExecutionClientSection, Section
from operator_config.sections.smartnode import SMARTNODE_TAG
from operator_config.types import ConsensusClient, ContainerID, Mode

if TYPE_CHECKING:
    from operator_config.root import RootConfig

EXTERNAL_CLIENT_MARKER = "X"
"""`EC_CLIENT` value when the execution client is managed externally."""


def _add_section(section: Section, env: dict[str, str], skip: frozenset[str] = frozenset()) -> None:
    for parameter in section.parameters():
        if parameter.id not in skip:
            parameter.add_to_environment(env)


def _open_ports(ports: list[int]) -> str:
    # Rendered as extra entries of a port list, hence the leading separator.
    return "".join(f', "{port}:{port}/tcp"' for port in ports)


def _hostname(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def _add_execution_client(
    env: dict[str, str],
    common: Section,
    client: ExecutionClientSection,
    container: ContainerID,
    prefix: str,
) -> None:
    http_port = common.parameter("httpPort").value
    ws_port = common.parameter("wsPort").value
    env[f"{prefix}EC_HTTP_ENDPOINT"] = f"http://{container}:{http_port}"
    env[f"{prefix}EC_WS_ENDPOINT"] = f"ws://{container}:{ws_port}"

    if common.parameter("openRpcPorts").value:
        ports = [http_port]
        if "wsPort" not in client.unsupported_common_params:
            ports.append(ws_port)
        open_ports = _open_ports(ports)
        if prefix:
            # The fallback port list has no entries of its own.
            open_ports = open_ports.removeprefix(", ")
        env[f"{prefix}EC_OPEN_API_PORTS"] = open_ports

    _add_section(common, env, skip=client.unsupported_common_params)
    _add_section(client, env)


def generate_environment(cfg: RootConfig) -> dict[str, str]:
    """
    Build the environment variable map for `cfg`.

    The map always holds the identity variables and every root and smartnode
    parameter. Execution, fallback, consensus, metrics and addon variables are
    added according to the corresponding mode and enable flags.
    """
    env: dict[str, str] = {
        "SMARTNODE_IMAGE": SMARTNODE_TAG,
        "ROCKETPOOL_FOLDER": cfg.directory,
    }
    _add_section(cfg.smartnode, env)
    _add_section(cfg, env)

    # Execution client
    if cfg.execution_client_mode.value == Mode.LOCAL:
        client = cfg.selected_execution_section()
        assert isinstance(client, ExecutionClientSection)
        env["EC_CLIENT"] = str(cfg.execution_client.value)
        _add_execution_client(env, cfg.execution_common, client, ContainerID.ETH1, "")
        env["EC_STOP_SIGNAL"] = client.stop_signal
    else:
        env["EC_CLIENT"] = EXTERNAL_CLIENT_MARKER
        _add_section(cfg.external_execution, env)
    hostname = _hostname(env.get("EC_HTTP_ENDPOINT", ""))
    if hostname:
        env["EC_HOSTNAME"] = hostname

    # Fallback execution client
    env["FALLBACK_EC_CLIENT"] = str(cfg.fallback_execution_client.value)
    fallback = cfg.selected_fallback_section()
    if fallback is not None:
        if cfg.fallback_execution_client_mode.value == Mode.LOCAL:
            assert isinstance(fallback, ExecutionClientSection)
            _add_execution_client(
                env,
                cfg.fallback_execution_common,
                fallback,
                ContainerID.ETH1_FALLBACK,
                "FALLBACK_",
            )
        else:
            _add_section(fallback, env)

    # Consensus client
    if not cfg.is_native_mode:
        consensus = cfg.selected_consensus_section()
        if cfg.consensus_client_mode.value == Mode.LOCAL:
            api_port = cfg.consensus_common.api_port.value
            env["CC_CLIENT"] = str(cfg.consensus_client.value)
            env["CC_API_ENDPOINT"] = f"http://{ContainerID.ETH2}:{api_port}"

            open_ports = []
            if cfg.consensus_common.open_api_port.value:
                open_ports.append(api_port)
            if consensus.client == ConsensusClient.PRYSM:
                rpc_port = cfg.prysm.rpc_port.value
                env["CC_RPC_ENDPOINT"] = f"http://{ContainerID.ETH2}:{rpc_port}"
                if cfg.prysm.open_rpc_port.value:
                    open_ports.append(rpc_port)
            env["BN_OPEN_PORTS"] = _open_ports(open_ports)

            _add_section(cfg.consensus_common, env)
        else:
            env["CC_CLIENT"] = str(cfg.external_consensus_client.value)
        _add_section(consensus, env)
        hostname = _hostname(env.get("CC_API_ENDPOINT", ""))
        if hostname:
            env["CC_HOSTNAME"] = hostname

    # Metrics
    if cfg.enable_metrics.value:
        _add_section(cfg.exporter, env)
        _add_section(cfg.prometheus, env)
        _add_section(cfg.grafana, env)

        if cfg.exporter.root_fs.value:
            env["EXPORTER_ROOTFS_COMMAND"] = ', "--path.rootfs=/rootfs"'
            env["EXPORTER_ROOTFS_VOLUME"] = ', "/:/rootfs:ro"'
        if cfg.prometheus.open_port.value:
            port = cfg.prometheus.port.value
            env["PROMETHEUS_OPEN_PORTS"] = f"{port}:{port}/tcp"
        if cfg.exporter.additional_flags.value:
            env["EXPORTER_ADDITIONAL_FLAGS"] = f', "{cfg.exporter.additional_flags.value}"'
        if cfg.prometheus.additional_flags.value:
            env["PROMETHEUS_ADDITIONAL_FLAGS"] = f', "{cfg.prometheus.additional_flags.value}"'

    if cfg.enable_bitfly_node_metrics.value:
        _add_section(cfg.bitfly_node_metrics, env)

    cfg.graffiti_wall_writer.update_environment(env)

    return env
