"""Reusable base models for the configuration engine."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `affected_containers` in a Python model is
    represented as `affectedContainers` when it is dumped, matching the
    camel-case keys of the persisted settings document.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )


class MutableStrictModel(CamelModel):
    """
    A strict model whose fields stay editable.

    Every assignment is validated, so a field can never hold a value of the wrong type.
    """

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "strict": True,
        "validate_assignment": True,
    }


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }
