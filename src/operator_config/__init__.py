"""
Configuration engine for a node-operator stack.

Typed, network-aware settings grouped into sections, persisted as a versioned
two-level document, diffed into container restart sets and projected into the
environment of the container orchestrator.
"""

from .changes import ChangedSetting, ConfigChanges
from .parameter import (
    BoolParameter,
    ChoiceParameter,
    FloatParameter,
    IntParameter,
    Parameter,
    ParameterOption,
    StringParameter,
    Uint16Parameter,
    UintParameter,
)
from .persistence import load_from_file, save_to_file
from .root import RootConfig
from .section import Section

__all__ = [
    "BoolParameter",
    "ChangedSetting",
    "ChoiceParameter",
    "ConfigChanges",
    "FloatParameter",
    "IntParameter",
    "Parameter",
    "ParameterOption",
    "RootConfig",
    "Section",
    "StringParameter",
    "Uint16Parameter",
    "UintParameter",
    "load_from_file",
    "save_to_file",
]
