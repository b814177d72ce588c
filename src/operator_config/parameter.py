"""
Typed, network-aware configuration parameters.

A parameter is one editable setting of the node-operator stack. It knows its
defaults per network, the containers that must restart when it changes, the
environment variables it is exported under and the constraints its value must
satisfy.

Each parameter type is its own model class, so the type of `value` is fixed by
the class and checked on every assignment:

- `BoolParameter` holds a `bool`
- `IntParameter` holds an `int`
- `UintParameter` holds a `Uint64`
- `Uint16Parameter` holds a `Uint16`
- `FloatParameter` holds a finite `float`
- `StringParameter` holds a `str`
- `ChoiceParameter[E]` holds a member of the string enum `E` listed in its options

Values are persisted as strings. `format` produces the canonical string form and
`parse` reverses it, raising `TypeConversionError` when the string is not of the
declared type and `ConstraintViolationError` when it breaks a constraint.
"""

import math
import re
from abc import abstractmethod
from collections.abc import Iterable, Mapping, MutableMapping
from enum import StrEnum
from typing import Any, ClassVar, Generic, Self, TypeVar

from pydantic import ValidationInfo, field_validator, model_validator

from operator_config.types import (
    PRIMARY_NETWORK,
    ConstraintViolationError,
    ContainerID,
    MissingDefaultError,
    MutableStrictModel,
    Network,
    ParameterType,
    StrictBaseModel,
    TypeConversionError,
    Uint16,
    Uint64,
)
from operator_config.types.uint import BaseUint

ValueT = TypeVar("ValueT")
NumberT = TypeVar("NumberT")
ChoiceT = TypeVar("ChoiceT", bound=StrEnum)

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT_PATTERN = re.compile(r"[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class ParameterOption(StrictBaseModel):
    """One selectable value of a choice parameter."""

    name: str
    """Display name shown by editors."""

    description: str = ""
    """Help text shown by editors."""

    value: Any
    """The enum member stored when this option is selected."""


class Parameter(MutableStrictModel, Generic[ValueT]):
    """
    Base class of every parameter type.

    Subclasses bind `ValueT` and implement `_convert`; constraint checks live in
    `_check_constraints` so they apply both to parsing and to direct assignment.
    """

    parameter_type: ClassVar[ParameterType]
    """The tag identifying this parameter's value type."""

    id: str
    """Identifier, unique within the owning section and used as the document key."""

    name: str
    """Display name."""

    description: str = ""
    """Help text."""

    defaults: dict[Network, ValueT]
    """
    Default value per network.

    `Network.ALL` is the wildcard used when the current network has no entry.
    """

    value: ValueT
    """
    The current value.

    A fresh parameter starts at its wildcard default, or at its primary-network
    default when it has no wildcard.
    """

    affected_containers: frozenset[ContainerID] = frozenset()
    """Containers that must be restarted when this parameter changes."""

    env_vars: tuple[str, ...] = ()
    """Environment variables this parameter is exported under."""

    can_be_blank: bool = False
    """Whether an empty string is an acceptable value."""

    overwrite_on_upgrade: bool = False
    """Whether upgrades reset this parameter to its default regardless of user edits."""

    @model_validator(mode="before")
    @classmethod
    def _start_at_default(cls, data: Any) -> Any:
        if isinstance(data, dict) and "value" not in data:
            defaults = data.get("defaults") or {}
            for network in (Network.ALL, PRIMARY_NETWORK):
                if network in defaults:
                    return {**data, "value": defaults[network]}
        return data

    @field_validator("affected_containers", mode="before")
    @classmethod
    def _as_frozenset(cls, containers: Any) -> Any:
        if isinstance(containers, Iterable) and not isinstance(containers, frozenset):
            return frozenset(containers)
        return containers

    @field_validator("env_vars", mode="before")
    @classmethod
    def _as_tuple(cls, names: Any) -> Any:
        if isinstance(names, list):
            return tuple(names)
        return names

    @field_validator("value", mode="after")
    @classmethod
    def _check_assigned_value(cls, value: Any, info: ValidationInfo) -> Any:
        # On assignment `info.data` holds every other field; during construction the
        # constraint fields may not be validated yet and the model check below applies.
        parameter_id = info.data.get("id", "")
        try:
            cls._check_constraints(parameter_id, value, info.data)
        except ConstraintViolationError as e:
            raise ValueError(e.message) from e
        return value

    @model_validator(mode="after")
    def _check_initial_value(self) -> Self:
        try:
            self.check(self.value)
        except ConstraintViolationError as e:
            raise ValueError(e.message) from e
        return self

    # -------------------------------------------------------------------------
    # Defaults and networks
    # -------------------------------------------------------------------------

    def resolve_default(self, network: Network) -> ValueT:
        """
        Get the default value for a network.

        Raises:
            MissingDefaultError: If neither the network nor the wildcard has a default.
        """
        if network in self.defaults:
            return self.defaults[network]
        if Network.ALL in self.defaults:
            return self.defaults[Network.ALL]
        raise MissingDefaultError(self.id, network)

    def apply_default(self, network: Network) -> None:
        """Set the value to the default for `network`."""
        self.value = self.resolve_default(network)

    def value_after_network_change(self, old_network: Network, new_network: Network) -> ValueT:
        """
        Compute the value this parameter should hold after a network switch.

        A value still equal to the old network's default follows the switch to the
        new network's default. Any other value was chosen by the user and is kept.
        """
        if old_network == new_network:
            return self.value
        if self.value == self.resolve_default(old_network):
            return self.resolve_default(new_network)
        return self.value

    def change_network(self, old_network: Network, new_network: Network) -> None:
        """Move the value to the new network's default unless the user overrode it."""
        self.value = self.value_after_network_change(old_network, new_network)

    # -------------------------------------------------------------------------
    # String forms
    # -------------------------------------------------------------------------

    @property
    def text(self) -> str:
        """The canonical string form of the current value."""
        return self.format(self.value)

    def format(self, value: ValueT) -> str:
        """Render a value in its canonical, locale-independent string form."""
        return str(value)

    def parse(self, text: str) -> ValueT:
        """
        Parse a stored string into a value of this parameter's type.

        Raises:
            TypeConversionError: If the string is not a valid value of the type.
            ConstraintViolationError: If the value breaks a declared constraint.
        """
        if not isinstance(text, str):
            raise TypeConversionError(self.id, self.parameter_type, repr(text))
        value = self._convert(text)
        self.check(value)
        return value

    def set_text(self, text: str) -> None:
        """Parse `text` and store the result, as an editor would."""
        self.value = self.parse(text)

    def check(self, value: ValueT) -> None:
        """
        Check a value against this parameter's constraints.

        Raises:
            ConstraintViolationError: If a constraint is violated.
        """
        type(self)._check_constraints(self.id, value, self.__dict__)

    @abstractmethod
    def _convert(self, text: str) -> ValueT:
        """Convert a string to the value type, raising TypeConversionError on failure."""

    @classmethod
    def _check_constraints(
        cls, parameter_id: str, value: Any, fields: Mapping[str, Any]
    ) -> None:
        """Check `value` against the constraint fields found in `fields`."""

    # -------------------------------------------------------------------------
    # Documents and environments
    # -------------------------------------------------------------------------

    def parsed_value(self, mapping: Mapping[str, str] | None, network: Network) -> ValueT:
        """
        Compute the value a document assigns to this parameter.

        A document without an entry for this parameter yields the network default.
        """
        if mapping is None or self.id not in mapping:
            return self.resolve_default(network)
        return self.parse(mapping[self.id])

    def deserialize_from(self, mapping: Mapping[str, str] | None, network: Network) -> None:
        """Load the value from a document section, falling back to the network default."""
        self.value = self.parsed_value(mapping, network)

    def serialize_into(self, mapping: MutableMapping[str, str]) -> None:
        """Write the canonical string form of the value into a document section."""
        mapping[self.id] = self.text

    def add_to_environment(self, env: MutableMapping[str, str]) -> None:
        """Export the value under each of this parameter's environment variable names."""
        for name in self.env_vars:
            env[name] = self.text


class BoolParameter(Parameter[bool]):
    """A true/false parameter."""

    parameter_type = ParameterType.BOOL

    def format(self, value: bool) -> str:
        return "true" if value else "false"

    def _convert(self, text: str) -> bool:
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise TypeConversionError(self.id, self.parameter_type, text)


class _NumericParameter(Parameter[NumberT], Generic[NumberT]):
    """A number with an optional inclusive range."""

    min_value: int | float | None = None
    """Smallest allowed value, if any."""

    max_value: int | float | None = None
    """Largest allowed value, if any."""

    @classmethod
    def _check_constraints(
        cls, parameter_id: str, value: Any, fields: Mapping[str, Any]
    ) -> None:
        min_value = fields.get("min_value")
        max_value = fields.get("max_value")
        if min_value is not None and value < min_value:
            raise ConstraintViolationError(parameter_id, f"{value} is below {min_value}")
        if max_value is not None and value > max_value:
            raise ConstraintViolationError(parameter_id, f"{value} is above {max_value}")


class IntParameter(_NumericParameter[int]):
    """A signed integer parameter."""

    parameter_type = ParameterType.INT

    def _convert(self, text: str) -> int:
        if not _SIGNED_INT_PATTERN.fullmatch(text):
            raise TypeConversionError(self.id, self.parameter_type, text)
        return int(text)


class _UnsignedParameter(_NumericParameter[NumberT], Generic[NumberT]):
    """An unsigned integer whose width comes from its `BaseUint` value class."""

    uint_class: ClassVar[type[BaseUint]]

    def _convert(self, text: str) -> NumberT:
        if not _UNSIGNED_INT_PATTERN.fullmatch(text):
            raise TypeConversionError(self.id, self.parameter_type, text)
        try:
            return self.uint_class(int(text))  # type: ignore[return-value]
        except OverflowError as e:
            raise TypeConversionError(self.id, self.parameter_type, text) from e


class UintParameter(_UnsignedParameter[Uint64]):
    """A 64-bit unsigned integer parameter."""

    parameter_type = ParameterType.UINT
    uint_class = Uint64


class Uint16Parameter(_UnsignedParameter[Uint16]):
    """A 16-bit unsigned integer parameter, typically a port."""

    parameter_type = ParameterType.UINT16
    uint_class = Uint16


class FloatParameter(_NumericParameter[float]):
    """A finite floating point parameter."""

    parameter_type = ParameterType.FLOAT

    def format(self, value: float) -> str:
        # The shortest string that round-trips to the same float.
        return repr(float(value))

    def _convert(self, text: str) -> float:
        if not _FLOAT_PATTERN.fullmatch(text):
            raise TypeConversionError(self.id, self.parameter_type, text)
        value = float(text)
        if not math.isfinite(value):
            raise TypeConversionError(self.id, self.parameter_type, text)
        return value


class StringParameter(Parameter[str]):
    """A free-form text parameter with optional pattern and length limits."""

    parameter_type = ParameterType.STRING

    regex: str | None = None
    """Pattern a non-blank value must match."""

    max_length: int = 0
    """Maximum length in characters; zero means unlimited."""

    def _convert(self, text: str) -> str:
        return text

    @classmethod
    def _check_constraints(
        cls, parameter_id: str, value: Any, fields: Mapping[str, Any]
    ) -> None:
        max_length = fields.get("max_length") or 0
        if max_length and len(value) > max_length:
            raise ConstraintViolationError(
                parameter_id, f"value is {len(value)} characters long, the limit is {max_length}"
            )
        regex = fields.get("regex")
        # Blank values are judged by validation, not by the pattern.
        if regex and value and re.search(regex, value) is None:
            raise ConstraintViolationError(
                parameter_id, f"{value!r} does not match the pattern {regex!r}"
            )


class ChoiceParameter(Parameter[ChoiceT], Generic[ChoiceT]):
    """A parameter restricted to an ordered list of enum options."""

    parameter_type = ParameterType.CHOICE

    options: tuple[ParameterOption, ...]
    """The selectable options, in display order."""

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_tuple(cls, options: Any) -> Any:
        if isinstance(options, list):
            return tuple(options)
        return options

    def option_values(self) -> list[ChoiceT]:
        """The values of every option, in display order."""
        return [option.value for option in self.options]

    def _convert(self, text: str) -> ChoiceT:
        for option in self.options:
            if str(option.value) == text:
                return option.value
        raise ConstraintViolationError(
            self.id, f"{text!r} is not one of {[str(v) for v in self.option_values()]}"
        )

    @classmethod
    def _check_constraints(
        cls, parameter_id: str, value: Any, fields: Mapping[str, Any]
    ) -> None:
        options = fields.get("options")
        if options is None:
            return
        if value not in [option.value for option in options]:
            raise ConstraintViolationError(parameter_id, f"{value!r} is not one of the options")
