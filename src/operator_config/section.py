"""
Sections: named, ordered groups of parameters.

A section corresponds to one configurable service or feature of the stack. It is
a plain holder of `Parameter` attributes plus declarative metadata that the root
configuration reads (client identity, compatibility tables and container
redirections). Sections never reference the configuration that owns them; any
derived value that needs outside context takes it as an argument.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from operator_config.parameter import Parameter
from operator_config.types import ConsensusClient, ContainerID, ExecutionClient


class Section:
    """
    Base class of every section.

    Parameters are discovered from instance attributes in assignment order, so
    `parameters()` is stable across calls and across instances of the same class.
    """

    title: str = ""
    """Display title; also used to key the sections of a change set."""

    container_overrides: ClassVar[Mapping[ContainerID, ContainerID]] = MappingProxyType({})
    """
    Container redirections that apply while this section is the active variant.

    A changed setting that affects a key of this mapping affects the mapped
    container instead.
    """

    def parameters(self) -> list[Parameter[Any]]:
        """Return this section's parameters in declaration order."""
        return [value for value in vars(self).values() if isinstance(value, Parameter)]

    def parameter(self, parameter_id: str) -> Parameter[Any]:
        """
        Look up a parameter by id.

        Raises:
            KeyError: If the section has no such parameter.
        """
        for parameter in self.parameters():
            if parameter.id == parameter_id:
                return parameter
        raise KeyError(parameter_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(title={self.title!r})"


class ExecutionClientSection(Section):
    """An execution client variant, run locally or as a fallback."""

    client: ClassVar[ExecutionClient]
    """The client this section configures."""

    compatible_consensus_clients: ClassVar[frozenset[ConsensusClient]] = frozenset(ConsensusClient)
    """Consensus clients that can run against this execution client."""

    unsupported_common_params: ClassVar[frozenset[str]] = frozenset()
    """Ids of common execution settings this client ignores."""

    stop_signal: ClassVar[str] = "SIGTERM"
    """Signal the orchestrator sends to stop the client's container."""


class ConsensusClientSection(Section):
    """A consensus client variant, run locally or managed externally."""

    client: ClassVar[ConsensusClient]
    """The client this section configures."""

    supports_doppelganger: ClassVar[bool] = True
    """Whether the client's validator process can run doppelganger detection."""


def env_prefix(is_fallback: bool) -> str:
    """Prefix for environment variable names of fallback execution settings."""
    return "FALLBACK_" if is_fallback else ""


def execution_container(is_fallback: bool) -> ContainerID:
    """The container that runs a primary or fallback execution client."""
    return ContainerID.ETH1_FALLBACK if is_fallback else ContainerID.ETH1
