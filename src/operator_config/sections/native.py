"""Settings used when the stack runs on the host without containers."""

import os

from operator_config.parameter import ChoiceParameter, ParameterOption, StringParameter
from operator_config.section import Section
from operator_config.types import ConsensusClient, ContainerID, Network

_CONTAINERS = [ContainerID.API, ContainerID.NODE, ContainerID.WATCHTOWER]


class NativeSection(Section):
    """Endpoints and service commands of clients the operator installed natively."""

    def __init__(self, directory: str) -> None:
        self.title = "Native Settings"

        self.ec_http_url = StringParameter(
            id="ecHttpUrl",
            name="Execution Client URL",
            description="The URL of your execution client's HTTP API.",
            defaults={Network.ALL: "http://127.0.0.1:8545"},
            affected_containers=_CONTAINERS,
        )
        self.cc_client = ChoiceParameter[ConsensusClient](
            id="consensusClient",
            name="Consensus Client",
            description="The consensus client you run natively.",
            defaults={Network.ALL: ConsensusClient.LIGHTHOUSE},
            affected_containers=_CONTAINERS,
            options=[
                ParameterOption(name=client.value.title(), value=client)
                for client in ConsensusClient
            ],
        )
        self.cc_http_url = StringParameter(
            id="ccHttpUrl",
            name="Consensus Client URL",
            description="The URL of your consensus client's Beacon API.",
            defaults={Network.ALL: "http://127.0.0.1:5052"},
            affected_containers=_CONTAINERS,
        )
        self.validator_restart_command = StringParameter(
            id="validatorRestartCommand",
            name="Validator Restart Command",
            description="The shell command that restarts your validator client.",
            defaults={Network.ALL: os.path.join(directory, "restart-vc.sh")},
            affected_containers=_CONTAINERS,
        )
        self.validator_stop_command = StringParameter(
            id="validatorStopCommand",
            name="Validator Stop Command",
            description="The shell command that stops your validator client.",
            defaults={Network.ALL: os.path.join(directory, "stop-validator.sh")},
            affected_containers=_CONTAINERS,
        )
