"""Exception hierarchy for the configuration engine."""

from __future__ import annotations

from collections.abc import Sequence


class ConfigError(Exception):
    """
    Base exception for all configuration errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class MissingDefaultError(ConfigError):
    """
    Raised when a parameter has no default for a network and no wildcard default.

    Attributes:
        parameter_id: The parameter without a usable default.
        network: The network the default was requested for.
    """

    def __init__(self, parameter_id: str, network: str) -> None:
        self.parameter_id = parameter_id
        self.network = network
        super().__init__(f"Parameter '{parameter_id}' has no default for network '{network}'")


class TypeConversionError(ConfigError):
    """
    Raised when a stored string cannot be parsed as the parameter's declared type.

    Attributes:
        parameter_id: The parameter being parsed.
        parameter_type: The declared type name.
        text: The offending string (truncated for display).
    """

    def __init__(self, parameter_id: str, parameter_type: str, text: str) -> None:
        self.parameter_id = parameter_id
        self.parameter_type = parameter_type
        self.text = text

        text_repr = repr(text)
        if len(text_repr) > 50:
            text_repr = text_repr[:47] + "..."
        super().__init__(
            f"Value {text_repr} for parameter '{parameter_id}' is not a valid {parameter_type}"
        )


class ConstraintViolationError(ConfigError):
    """
    Raised when a parsed value breaks a declared constraint.

    Covers regex and length checks, numeric ranges and values outside a choice's options.

    Attributes:
        parameter_id: The parameter being checked.
        detail: What was violated.
    """

    def __init__(self, parameter_id: str, detail: str) -> None:
        self.parameter_id = parameter_id
        self.detail = detail
        super().__init__(f"Parameter '{parameter_id}': {detail}")


class UnsupportedVersionError(ConfigError):
    """
    Raised when a document's schema version cannot be migrated.

    Attributes:
        version: The version string found in the document.
        detail: Why the version is unsupported.
    """

    def __init__(self, version: str, detail: str) -> None:
        self.version = version
        self.detail = detail
        super().__init__(f"Unsupported configuration version '{version}': {detail}")


class DocumentError(ConfigError):
    """Raised when a persisted document is unreadable or not a two-level string mapping."""


class ValidationError(ConfigError):
    """
    Cross-parameter problems found by validation.

    Validation itself reports problems as a list; this exception exists for callers
    that want to stop on an invalid configuration.

    Attributes:
        errors: The human-readable violations.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid configuration:\n" + "\n".join(self.errors))
