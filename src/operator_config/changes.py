"""
Change sets between two configurations.

A change set tells the orchestrator which settings an edit touched and which
containers must be restarted for the edit to take effect.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from operator_config.parameter import Parameter
from operator_config.section import Section
from operator_config.types import ContainerID, StrictBaseModel


class ChangedSetting(StrictBaseModel):
    """One parameter whose string form differs between the old and new configuration."""

    section: str
    """Title of the section that owns the parameter."""

    parameter_id: str
    """Id of the changed parameter."""

    name: str
    """Display name of the changed parameter."""

    old_value: str
    """Previous string form; empty when the old configuration lacked the parameter."""

    new_value: str
    """New string form."""

    affected_containers: frozenset[ContainerID]
    """Containers to restart, after any container redirections were applied."""


@dataclass(frozen=True, slots=True)
class ConfigChanges:
    """The result of diffing two configurations."""

    settings: Mapping[str, Sequence[ChangedSetting]] = field(default_factory=dict)
    """Changed settings per section title; sections without changes are absent."""

    affected_containers: frozenset[ContainerID] = frozenset()
    """Union of the affected containers of every changed setting."""

    network_changed: bool = False
    """Whether the selected network differs."""

    def __bool__(self) -> bool:
        return bool(self.settings) or self.network_changed

    def __iter__(self) -> Iterator[ChangedSetting]:
        for changed in self.settings.values():
            yield from changed


def diff_section(
    old: Section,
    new: Section,
    overrides: Mapping[ContainerID, ContainerID],
) -> list[ChangedSetting]:
    """
    Compare two versions of a section parameter by parameter.

    Parameters are paired by id, so declaration order does not matter. A
    parameter the old section lacks counts as changed from the empty string.
    Each affected container found in `overrides` is replaced by its mapped
    container.
    """
    old_parameters: dict[str, Parameter] = {p.id: p for p in old.parameters()}
    changed: list[ChangedSetting] = []
    for parameter in new.parameters():
        previous = old_parameters.get(parameter.id)
        old_value = previous.text if previous is not None else ""
        new_value = parameter.text
        if old_value == new_value:
            continue
        changed.append(
            ChangedSetting(
                section=new.title,
                parameter_id=parameter.id,
                name=parameter.name,
                old_value=old_value,
                new_value=new_value,
                affected_containers=frozenset(
                    overrides.get(container, container)
                    for container in parameter.affected_containers
                ),
            )
        )
    return changed
