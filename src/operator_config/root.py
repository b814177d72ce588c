"""
The root configuration of the node-operator stack.

`RootConfig` owns the top-level parameters (client selection, metrics ports)
and every section of the catalog. It is the unit that is persisted, diffed,
validated and projected into the orchestrator's environment.

Every operation that can fail computes all new values first and assigns them
only once nothing is left that could raise, so a failed call leaves the
configuration exactly as it was.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Final

from operator_config.changes import ConfigChanges, diff_section
from operator_config.config import STACK_VERSION
from operator_config.document import (
    DIRECTORY_KEY,
    NATIVE_MODE_KEY,
    ROOT_KEY,
    VERSION_KEY,
    Document,
)
from operator_config.environment import generate_environment
from operator_config.migration import migrate
from operator_config.parameter import (
    BoolParameter,
    ChoiceParameter,
    Parameter,
    ParameterOption,
    StringParameter,
    Uint16Parameter,
)
from operator_config.section import ConsensusClientSection, ExecutionClientSection, Section
from operator_config.sections import (
    BesuSection,
    BitflyNodeMetricsSection,
    ConsensusCommonSection,
    ExecutionCommonSection,
    ExporterSection,
    ExternalExecutionSection,
    ExternalLighthouseSection,
    ExternalPrysmSection,
    ExternalTekuSection,
    GethSection,
    GrafanaSection,
    GraffitiWallWriterSection,
    InfuraSection,
    LighthouseSection,
    NativeSection,
    NethermindSection,
    NimbusSection,
    PocketSection,
    PrometheusSection,
    PrysmSection,
    SmartnodeSection,
    TekuSection,
)
from operator_config.types import (
    PRIMARY_NETWORK,
    ConfigError,
    ConsensusClient,
    ConstraintViolationError,
    ContainerID,
    DocumentError,
    ExecutionClient,
    Mode,
    Network,
    ParameterType,
    TypeConversionError,
    ValidationError,
)

ROOT_TITLE: Final = "Top-level Settings"
"""Title of the root parameters in change sets."""

_TRUE_STRINGS: Final = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS: Final = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_ALL_DAEMONS: Final = (ContainerID.API, ContainerID.NODE, ContainerID.WATCHTOWER)

_Plan = list[tuple[Parameter[Any], Any]]


def _mode_options(subject: str) -> list[ParameterOption]:
    return [
        ParameterOption(
            name="Locally Managed",
            description=f"Let the stack run and manage the {subject} for you.",
            value=Mode.LOCAL,
        ),
        ParameterOption(
            name="Externally Managed",
            description=f"Use a {subject} you run and manage yourself.",
            value=Mode.EXTERNAL,
        ),
    ]


def _client_options(clients: Iterable[ExecutionClient | ConsensusClient]) -> list[ParameterOption]:
    return [ParameterOption(name=client.value.title(), value=client) for client in clients]


def _metrics_port(
    parameter_id: str, name: str, default: int, container: ContainerID, env_var: str
) -> Uint16Parameter:
    return Uint16Parameter(
        id=parameter_id,
        name=name,
        description=f"The port the {name.lower()} are served on.",
        defaults={Network.ALL: default},
        affected_containers=[container, ContainerID.PROMETHEUS],
        env_vars=[env_var],
    )


def _commit(plan: _Plan) -> None:
    for parameter, value in plan:
        parameter.value = value


def _parse_bool(key: str, text: str) -> bool:
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise TypeConversionError(key, ParameterType.BOOL, text)


class RootConfig(Section):
    """
    The complete configuration: top-level parameters plus every section.

    A new configuration selects the primary network and starts with every
    parameter at its default.
    """

    def __init__(self, directory: str, is_native_mode: bool = False) -> None:
        self.title = ROOT_TITLE
        self.directory = str(directory)
        self.is_native_mode = is_native_mode
        self.version = f"v{STACK_VERSION}"

        # Top-level parameters
        self.execution_client_mode = ChoiceParameter[Mode](
            id="executionClientMode",
            name="Execution Client Mode",
            description="Run an execution client locally or use one you manage externally.",
            defaults={Network.ALL: Mode.LOCAL},
            affected_containers=[*_ALL_DAEMONS, ContainerID.ETH1, ContainerID.ETH2],
            options=_mode_options("execution client"),
        )
        self.execution_client = ChoiceParameter[ExecutionClient](
            id="executionClient",
            name="Execution Client",
            description="The execution client to run locally.",
            defaults={Network.ALL: ExecutionClient.GETH},
            affected_containers=[ContainerID.ETH1],
            options=_client_options(ExecutionClient),
        )
        self.use_fallback_execution_client = BoolParameter(
            id="useFallbackExecutionClient",
            name="Use Fallback Execution Client",
            description="Use a second execution client when the primary one is unavailable.",
            defaults={Network.ALL: False},
            affected_containers=[*_ALL_DAEMONS, ContainerID.ETH1_FALLBACK, ContainerID.ETH2],
        )
        self.fallback_execution_client_mode = ChoiceParameter[Mode](
            id="fallbackExecutionClientMode",
            name="Fallback Execution Client Mode",
            description="Run the fallback client locally or use one you manage externally.",
            defaults={Network.ALL: Mode.LOCAL},
            affected_containers=[*_ALL_DAEMONS, ContainerID.ETH1_FALLBACK, ContainerID.ETH2],
            options=_mode_options("fallback execution client"),
        )
        self.fallback_execution_client = ChoiceParameter[ExecutionClient](
            id="fallbackExecutionClient",
            name="Fallback Execution Client",
            description="The hosted provider to use as the fallback execution client.",
            defaults={Network.ALL: ExecutionClient.POCKET},
            affected_containers=[ContainerID.ETH1_FALLBACK],
            options=_client_options([ExecutionClient.INFURA, ExecutionClient.POCKET]),
        )
        self.reconnect_delay = StringParameter(
            id="reconnectDelay",
            name="Reconnect Delay",
            description="How long to wait before retrying the primary execution client.",
            defaults={Network.ALL: "60s"},
            regex=r"^[0-9]+(\.[0-9]+)?(ms|s|m|h)$",
            affected_containers=_ALL_DAEMONS,
            env_vars=["RECONNECT_DELAY"],
        )
        self.consensus_client_mode = ChoiceParameter[Mode](
            id="consensusClientMode",
            name="Consensus Client Mode",
            description="Run a consensus client locally or use one you manage externally.",
            defaults={Network.ALL: Mode.LOCAL},
            affected_containers=[*_ALL_DAEMONS, ContainerID.ETH2, ContainerID.VALIDATOR],
            options=_mode_options("consensus client"),
        )
        self.consensus_client = ChoiceParameter[ConsensusClient](
            id="consensusClient",
            name="Consensus Client",
            description="The consensus client to run locally.",
            defaults={Network.ALL: ConsensusClient.NIMBUS},
            affected_containers=[ContainerID.ETH2, ContainerID.VALIDATOR],
            options=_client_options(ConsensusClient),
        )
        self.external_consensus_client = ChoiceParameter[ConsensusClient](
            id="externalConsensusClient",
            name="Consensus Client",
            description="The type of the consensus client you manage externally.",
            defaults={Network.ALL: ConsensusClient.LIGHTHOUSE},
            affected_containers=[*_ALL_DAEMONS, ContainerID.VALIDATOR],
            options=_client_options(
                [ConsensusClient.LIGHTHOUSE, ConsensusClient.PRYSM, ConsensusClient.TEKU]
            ),
        )
        self.enable_metrics = BoolParameter(
            id="enableMetrics",
            name="Enable Metrics",
            description="Run the Grafana, Prometheus and node exporter metrics stack.",
            defaults={Network.ALL: True},
            affected_containers=[
                *_ALL_DAEMONS,
                ContainerID.ETH1,
                ContainerID.ETH2,
                ContainerID.VALIDATOR,
                ContainerID.GRAFANA,
                ContainerID.PROMETHEUS,
                ContainerID.EXPORTER,
            ],
            env_vars=["ENABLE_METRICS"],
        )
        self.enable_bitfly_node_metrics = BoolParameter(
            id="enableBitflyNodeMetrics",
            name="Enable Beaconcha.in Node Metrics",
            description="Upload client metrics to your beaconcha.in account.",
            defaults={Network.ALL: False},
            affected_containers=[ContainerID.ETH2, ContainerID.VALIDATOR],
            env_vars=["ENABLE_BITFLY_NODE_METRICS"],
        )
        self.ec_metrics_port = _metrics_port(
            "ecMetricsPort", "Execution Client Metrics", 9105, ContainerID.ETH1, "EC_METRICS_PORT"
        )
        self.bn_metrics_port = _metrics_port(
            "bnMetricsPort", "Beacon Node Metrics", 9100, ContainerID.ETH2, "BN_METRICS_PORT"
        )
        self.vc_metrics_port = _metrics_port(
            "vcMetricsPort",
            "Validator Client Metrics",
            9101,
            ContainerID.VALIDATOR,
            "VC_METRICS_PORT",
        )
        self.node_metrics_port = _metrics_port(
            "nodeMetricsPort", "Node Metrics", 9102, ContainerID.NODE, "NODE_METRICS_PORT"
        )
        self.exporter_metrics_port = _metrics_port(
            "exporterMetricsPort",
            "Exporter Metrics",
            9103,
            ContainerID.EXPORTER,
            "EXPORTER_METRICS_PORT",
        )
        self.watchtower_metrics_port = _metrics_port(
            "watchtowerMetricsPort",
            "Watchtower Metrics",
            9104,
            ContainerID.WATCHTOWER,
            "WATCHTOWER_METRICS_PORT",
        )

        # Sections
        self.smartnode = SmartnodeSection(self.directory)
        self.execution_common = ExecutionCommonSection()
        self.geth = GethSection()
        self.nethermind = NethermindSection()
        self.besu = BesuSection()
        self.infura = InfuraSection()
        self.pocket = PocketSection()
        self.external_execution = ExternalExecutionSection()
        self.fallback_execution_common = ExecutionCommonSection(is_fallback=True)
        self.fallback_infura = InfuraSection(is_fallback=True)
        self.fallback_pocket = PocketSection(is_fallback=True)
        self.fallback_external_execution = ExternalExecutionSection(is_fallback=True)
        self.consensus_common = ConsensusCommonSection()
        self.lighthouse = LighthouseSection()
        self.nimbus = NimbusSection()
        self.prysm = PrysmSection()
        self.teku = TekuSection()
        self.external_lighthouse = ExternalLighthouseSection()
        self.external_prysm = ExternalPrysmSection()
        self.external_teku = ExternalTekuSection()
        self.grafana = GrafanaSection()
        self.prometheus = PrometheusSection()
        self.exporter = ExporterSection()
        self.bitfly_node_metrics = BitflyNodeMetricsSection()
        self.native = NativeSection(self.directory)
        self.graffiti_wall_writer = GraffitiWallWriterSection()

        self._sections: dict[str, Section] = {
            "smartnode": self.smartnode,
            "executionCommon": self.execution_common,
            "geth": self.geth,
            "nethermind": self.nethermind,
            "besu": self.besu,
            "infura": self.infura,
            "pocket": self.pocket,
            "externalExecution": self.external_execution,
            "fallbackExecutionCommon": self.fallback_execution_common,
            "fallbackInfura": self.fallback_infura,
            "fallbackPocket": self.fallback_pocket,
            "fallbackExternalExecution": self.fallback_external_execution,
            "consensusCommon": self.consensus_common,
            "lighthouse": self.lighthouse,
            "nimbus": self.nimbus,
            "prysm": self.prysm,
            "teku": self.teku,
            "externalLighthouse": self.external_lighthouse,
            "externalPrysm": self.external_prysm,
            "externalTeku": self.external_teku,
            "grafana": self.grafana,
            "prometheus": self.prometheus,
            "exporter": self.exporter,
            "bitflyNodeMetrics": self.bitfly_node_metrics,
            "native": self.native,
            "addons-gww": self.graffiti_wall_writer,
        }

        self.apply_all_defaults()

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def sections(self) -> dict[str, Section]:
        """Every section keyed by its document name, in catalog order."""
        return dict(self._sections)

    def _every_parameter(self) -> list[Parameter[Any]]:
        parameters = self.parameters()
        for section in self._sections.values():
            parameters.extend(section.parameters())
        return parameters

    @property
    def network(self) -> Network:
        """The selected network."""
        return self.smartnode.network.value

    def copy(self) -> RootConfig:
        """Snapshot this configuration, e.g. to diff against after editing."""
        clone = RootConfig(self.directory, self.is_native_mode)
        clone.version = self.version
        plan: _Plan = [(p, self.parameter(p.id).value) for p in clone.parameters()]
        for name, section in clone._sections.items():
            source = self._sections[name]
            plan.extend((p, source.parameter(p.id).value) for p in section.parameters())
        _commit(plan)
        return clone

    # -------------------------------------------------------------------------
    # Defaults and networks
    # -------------------------------------------------------------------------

    def apply_all_defaults(self) -> None:
        """Reset every parameter to its default for the current network."""
        network = self.network
        _commit([(p, p.resolve_default(network)) for p in self._every_parameter()])

    def update_defaults_on_upgrade(self) -> None:
        """Reset only the parameters that must track the running software version."""
        network = self.network
        _commit(
            [
                (p, p.resolve_default(network))
                for p in self._every_parameter()
                if p.overwrite_on_upgrade
            ]
        )

    def change_network(self, new_network: Network | str) -> None:
        """
        Switch to another network.

        Parameters still at the old network's default move to the new network's
        default; values the user chose are kept.

        Raises:
            ConstraintViolationError: If the network is not one of the selectable options.
        """
        selector = self.smartnode.network
        try:
            network = Network(new_network)
        except ValueError as e:
            raise ConstraintViolationError(selector.id, f"unknown network {new_network!r}") from e
        old_network = self.network
        if network == old_network:
            return
        if network not in selector.option_values():
            raise ConstraintViolationError(selector.id, f"{network!r} is not a selectable network")

        plan: _Plan = [
            (p, p.value_after_network_change(old_network, network))
            for p in self._every_parameter()
            if p is not selector
        ]
        plan.append((selector, network))
        _commit(plan)

    # -------------------------------------------------------------------------
    # Client selection
    # -------------------------------------------------------------------------

    def selected_execution_section(self) -> Section:
        """The section of the primary execution client currently in use."""
        if self.execution_client_mode.value == Mode.EXTERNAL:
            return self.external_execution
        return self._local_execution_sections()[self.execution_client.value]

    def selected_fallback_section(self) -> Section | None:
        """The section of the fallback execution client, or None when no fallback is used."""
        if not self.use_fallback_execution_client.value:
            return None
        if self.fallback_execution_client_mode.value == Mode.EXTERNAL:
            return self.fallback_external_execution
        return self._local_fallback_sections()[self.fallback_execution_client.value]

    def selected_consensus_section(self) -> ConsensusClientSection:
        """
        The section of the consensus client currently in use.

        Raises:
            ConfigError: In native mode, where consensus clients are not managed.
        """
        if self.is_native_mode:
            raise ConfigError("Consensus client settings are not available in native mode")
        if self.consensus_client_mode.value == Mode.EXTERNAL:
            external: dict[ConsensusClient, ConsensusClientSection] = {
                ConsensusClient.LIGHTHOUSE: self.external_lighthouse,
                ConsensusClient.PRYSM: self.external_prysm,
                ConsensusClient.TEKU: self.external_teku,
            }
            return external[self.external_consensus_client.value]
        local: dict[ConsensusClient, ConsensusClientSection] = {
            ConsensusClient.LIGHTHOUSE: self.lighthouse,
            ConsensusClient.NIMBUS: self.nimbus,
            ConsensusClient.PRYSM: self.prysm,
            ConsensusClient.TEKU: self.teku,
        }
        return local[self.consensus_client.value]

    def _local_execution_sections(self) -> dict[ExecutionClient, ExecutionClientSection]:
        return {
            ExecutionClient.GETH: self.geth,
            ExecutionClient.NETHERMIND: self.nethermind,
            ExecutionClient.BESU: self.besu,
            ExecutionClient.INFURA: self.infura,
            ExecutionClient.POCKET: self.pocket,
        }

    def _local_fallback_sections(self) -> dict[ExecutionClient, ExecutionClientSection]:
        return {
            ExecutionClient.INFURA: self.fallback_infura,
            ExecutionClient.POCKET: self.fallback_pocket,
        }

    def is_doppelganger_enabled(self) -> bool:
        """
        Whether the validator client runs doppelganger detection.

        Raises:
            ConfigError: In native mode.
        """
        section = self.selected_consensus_section()
        if not section.supports_doppelganger:
            return False
        if self.consensus_client_mode.value == Mode.LOCAL:
            return self.consensus_common.doppelganger_detection.value
        return section.parameter("doppelgangerDetection").value

    def active_sections(self) -> dict[str, Section]:
        """
        The sections whose settings are in effect for the current selections.

        Sections of unselected client variants, and of disabled features, are left out.
        """
        active: list[Section] = [self.smartnode]
        if self.is_native_mode:
            active.append(self.native)
        else:
            if self.execution_client_mode.value == Mode.LOCAL:
                active.append(self.execution_common)
            active.append(self.selected_execution_section())

            fallback = self.selected_fallback_section()
            if fallback is not None:
                if self.fallback_execution_client_mode.value == Mode.LOCAL:
                    active.append(self.fallback_execution_common)
                active.append(fallback)

            if self.consensus_client_mode.value == Mode.LOCAL:
                active.append(self.consensus_common)
            active.append(self.selected_consensus_section())

        if self.enable_metrics.value:
            active.extend([self.grafana, self.prometheus, self.exporter])
        if self.enable_bitfly_node_metrics.value:
            active.append(self.bitfly_node_metrics)
        active.append(self.graffiti_wall_writer)

        return {name: s for name, s in self._sections.items() if any(s is a for a in active)}

    def container_overrides(self) -> dict[ContainerID, ContainerID]:
        """The container redirections declared by the active sections."""
        overrides: dict[ContainerID, ContainerID] = {}
        for section in self.active_sections().values():
            overrides.update(section.container_overrides)
        return overrides

    def incompatible_consensus_clients(self) -> tuple[list[ParameterOption], list[ParameterOption]]:
        """
        Split out the consensus client options the execution clients cannot serve.

        Returns:
            The options incompatible with the primary execution client, and the
            remaining options incompatible with the fallback execution client.
            Only locally run execution clients restrict the choice.
        """
        compatible: frozenset[ConsensusClient] | None = None
        if self.execution_client_mode.value == Mode.LOCAL:
            primary = self._local_execution_sections()[self.execution_client.value]
            compatible = primary.compatible_consensus_clients

        fallback_compatible: frozenset[ConsensusClient] | None = None
        if (
            self.use_fallback_execution_client.value
            and self.fallback_execution_client_mode.value == Mode.LOCAL
        ):
            fallback = self._local_fallback_sections()[self.fallback_execution_client.value]
            fallback_compatible = fallback.compatible_consensus_clients

        if self.consensus_client_mode.value == Mode.LOCAL:
            options = self.consensus_client.options
        else:
            options = self.external_consensus_client.options

        bad: list[ParameterOption] = []
        bad_fallback: list[ParameterOption] = []
        for option in options:
            if compatible is not None and option.value not in compatible:
                bad.append(option)
            elif fallback_compatible is not None and option.value not in fallback_compatible:
                bad_fallback.append(option)
        return bad, bad_fallback

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """
        Check cross-parameter consistency.

        Returns:
            Human-readable violations; empty when the configuration is valid.
        """
        errors: list[str] = []

        bad, bad_fallback = self.incompatible_consensus_clients()
        if self.consensus_client_mode.value == Mode.LOCAL:
            selected = self.consensus_client.value
            for option in bad:
                if option.value == selected:
                    errors.append(
                        f"Selected consensus client {option.name} is not compatible with "
                        f"selected execution client {self.execution_client.value}"
                    )
                    break
            for option in bad_fallback:
                if option.value == selected:
                    errors.append(
                        f"Selected consensus client {option.name} is not compatible with "
                        f"selected fallback execution client {self.fallback_execution_client.value}"
                    )
                    break

        # Blank strings only matter for settings that are actually in use.
        for parameter in self.parameters():
            if _is_illegally_blank(parameter):
                errors.append(f"[{parameter.name}] cannot be blank")
        for section in self.active_sections().values():
            for parameter in section.parameters():
                if _is_illegally_blank(parameter):
                    errors.append(f"[{section.title} - {parameter.name}] cannot be blank")

        return errors

    def ensure_valid(self) -> None:
        """
        Raise if the configuration is invalid.

        Raises:
            ValidationError: Carrying every violation found by `validate`.
        """
        errors = self.validate()
        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def serialize(self) -> dict[str, dict[str, str]]:
        """Build the persisted document, stamped with the current software version."""
        root: dict[str, str] = {}
        for parameter in self.parameters():
            parameter.serialize_into(root)
        root[DIRECTORY_KEY] = self.directory
        root[NATIVE_MODE_KEY] = "true" if self.is_native_mode else "false"
        root[VERSION_KEY] = f"v{STACK_VERSION}"

        document: dict[str, dict[str, str]] = {ROOT_KEY: root}
        for name, section in self._sections.items():
            values: dict[str, str] = {}
            for parameter in section.parameters():
                parameter.serialize_into(values)
            document[name] = values
        return document

    def deserialize(self, document: Document) -> None:
        """
        Load a persisted document into this configuration.

        The document is migrated to the current format in place first. Parameters
        the document does not mention take their default for the document's network.

        Raises:
            DocumentError: If the document is not a mapping of mappings.
            UnsupportedVersionError: If the document's version cannot be migrated.
            TypeConversionError: If a stored value does not parse as its parameter's type.
            ConstraintViolationError: If a stored value breaks a parameter's constraints.
        """
        for key, values in document.items():
            if not isinstance(values, Mapping):
                raise DocumentError(f"Entry '{key}' is not a mapping of settings")

        migrate(document)

        network = PRIMARY_NETWORK
        smartnode_values = document.get("smartnode")
        selector = self.smartnode.network
        if smartnode_values is not None and selector.id in smartnode_values:
            network = selector.parse(smartnode_values[selector.id])

        root = document.get(ROOT_KEY)
        plan: _Plan = [(p, p.parsed_value(root, network)) for p in self.parameters()]
        for name, section in self._sections.items():
            values = document.get(name)
            plan.extend((p, p.parsed_value(values, network)) for p in section.parameters())

        root = root or {}
        directory = root.get(DIRECTORY_KEY, self.directory)
        is_native_mode = self.is_native_mode
        if NATIVE_MODE_KEY in root:
            is_native_mode = _parse_bool(NATIVE_MODE_KEY, root[NATIVE_MODE_KEY])
        version = root.get(VERSION_KEY, self.version)

        _commit(plan)
        self.directory = directory
        self.is_native_mode = is_native_mode
        self.version = version

    # -------------------------------------------------------------------------
    # Changes and environment
    # -------------------------------------------------------------------------

    def compute_changes(self, old: RootConfig) -> ConfigChanges:
        """
        Diff this configuration against an older one.

        A container is redirected only when the old and the new configuration
        both declare the same override. A switch into or out of a client that
        folds containers together keeps the original container in the result.
        """
        previous = old.container_overrides()
        overrides = {
            container: target
            for container, target in self.container_overrides().items()
            if previous.get(container) == target
        }
        settings: dict[str, list] = {}
        affected: set[ContainerID] = set()

        pairs: list[tuple[Section, Section]] = [(old, self)]
        pairs.extend((old._sections[name], s) for name, s in self._sections.items())
        for old_section, new_section in pairs:
            changed = diff_section(old_section, new_section, overrides)
            if changed:
                settings[new_section.title] = changed
                for setting in changed:
                    affected.update(setting.affected_containers)

        return ConfigChanges(
            settings=settings,
            affected_containers=frozenset(affected),
            network_changed=old.network != self.network,
        )

    def generate_environment(self) -> dict[str, str]:
        """Project the configuration into the orchestrator's environment variables."""
        return generate_environment(self)


def _is_illegally_blank(parameter: Parameter[Any]) -> bool:
    return (
        isinstance(parameter, StringParameter)
        and not parameter.can_be_blank
        and parameter.value == ""
    )
