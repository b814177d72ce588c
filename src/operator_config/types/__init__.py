"""Reusable type definitions for the configuration engine."""

from .base import CamelModel, MutableStrictModel, StrictBaseModel
from .enums import (
    PRIMARY_NETWORK,
    SUPPORTED_NETWORKS,
    ConsensusClient,
    ContainerID,
    ExecutionClient,
    Mode,
    Network,
    ParameterType,
)
from .exceptions import (
    ConfigError,
    ConstraintViolationError,
    DocumentError,
    MissingDefaultError,
    TypeConversionError,
    UnsupportedVersionError,
    ValidationError,
)
from .uint import BaseUint, Uint16, Uint64

__all__ = [
    # Core types
    "BaseUint",
    "Uint16",
    "Uint64",
    "CamelModel",
    "MutableStrictModel",
    "StrictBaseModel",
    # Enumerations
    "ConsensusClient",
    "ContainerID",
    "ExecutionClient",
    "Mode",
    "Network",
    "ParameterType",
    "PRIMARY_NETWORK",
    "SUPPORTED_NETWORKS",
    # Exceptions
    "ConfigError",
    "ConstraintViolationError",
    "DocumentError",
    "MissingDefaultError",
    "TypeConversionError",
    "UnsupportedVersionError",
    "ValidationError",
]
