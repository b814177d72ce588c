"""
The catalog of sections making up a full configuration.

Section names are the keys of the persisted document, so they are part of the
file format and must stay stable.
"""

from .addons import GraffitiWallWriterSection
from .consensus import (
    ConsensusCommonSection,
    ExternalLighthouseSection,
    ExternalPrysmSection,
    ExternalTekuSection,
    LighthouseSection,
    NimbusSection,
    PrysmSection,
    TekuSection,
)
from .execution import (
    BesuSection,
    ExecutionCommonSection,
    ExternalExecutionSection,
    GethSection,
    InfuraSection,
    NethermindSection,
    PocketSection,
)
from .metrics import BitflyNodeMetricsSection, ExporterSection, GrafanaSection, PrometheusSection
from .native import NativeSection
from .smartnode import SmartnodeSection

__all__ = [
    "BesuSection",
    "BitflyNodeMetricsSection",
    "ConsensusCommonSection",
    "ExecutionCommonSection",
    "ExporterSection",
    "ExternalExecutionSection",
    "ExternalLighthouseSection",
    "ExternalPrysmSection",
    "ExternalTekuSection",
    "GethSection",
    "GrafanaSection",
    "GraffitiWallWriterSection",
    "InfuraSection",
    "LighthouseSection",
    "NativeSection",
    "NethermindSection",
    "NimbusSection",
    "PocketSection",
    "PrometheusSection",
    "PrysmSection",
    "SmartnodeSection",
    "TekuSection",
]
