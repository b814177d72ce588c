"""
Optional addons.

Addons contribute to the environment through their own hook instead of the
root's client selection logic, since they are toggled by their own settings.
"""

from collections.abc import MutableMapping
from typing import Final

from operator_config.parameter import BoolParameter, StringParameter, UintParameter
from operator_config.section import Section
from operator_config.types import ContainerID, Network

GWW_TAG: Final = "rocketpool/graffiti-wall-addon:v1.0.0"
GWW_DEFAULT_INPUT_URL: Final = "https://cryptocats.xyz/api/wall.json"


class GraffitiWallWriterSection(Section):
    """Draws pixel art on a community graffiti wall through block proposal graffiti."""

    def __init__(self) -> None:
        self.title = "Graffiti Wall Writer Settings"
        containers = [ContainerID.ADDON_GWW, ContainerID.VALIDATOR]

        self.enabled = BoolParameter(
            id="enabled",
            name="Enabled",
            description="Run the graffiti wall writer alongside the validator client.",
            defaults={Network.ALL: False},
            affected_containers=containers,
        )
        self.input_url = StringParameter(
            id="inputUrl",
            name="Input URL",
            description="Where the writer downloads the image to draw.",
            defaults={Network.ALL: GWW_DEFAULT_INPUT_URL},
            affected_containers=[ContainerID.ADDON_GWW],
            env_vars=["ADDON_GWW_INPUT_URL"],
        )
        self.update_wall_time = UintParameter(
            id="updateWallTime",
            name="Wall Update Interval",
            description="Seconds between refreshes of the current wall state.",
            defaults={Network.ALL: 600},
            affected_containers=[ContainerID.ADDON_GWW],
            env_vars=["ADDON_GWW_UPDATE_WALL_TIME"],
        )
        self.update_input_time = UintParameter(
            id="updateInputTime",
            name="Input Update Interval",
            description="Seconds between downloads of the input image.",
            defaults={Network.ALL: 600},
            affected_containers=[ContainerID.ADDON_GWW],
            env_vars=["ADDON_GWW_UPDATE_INPUT_TIME"],
        )
        self.container_tag = StringParameter(
            id="containerTag",
            name="Container Tag",
            description="The container tag of the graffiti wall writer image.",
            defaults={Network.ALL: GWW_TAG},
            affected_containers=[ContainerID.ADDON_GWW],
            env_vars=["ADDON_GWW_CONTAINER_TAG"],
            overwrite_on_upgrade=True,
        )

    def update_environment(self, env: MutableMapping[str, str]) -> None:
        """Export the addon's settings when it is enabled; leave `env` untouched otherwise."""
        if not self.enabled.value:
            return
        env["ADDON_GWW_ENABLED"] = "true"
        for parameter in self.parameters():
            parameter.add_to_environment(env)
