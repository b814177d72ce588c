"""Bounded unsigned integers for ports, peer counts and size limits."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self


class BaseUint(int):
    """
    An `int` restricted to the range of a fixed bit width.

    Subclasses only set `BITS`. Instances compare and hash like plain ints,
    so they can be stored in documents and compared against literals.
    """

    BITS: ClassVar[int]

    def __new__(cls, value: int) -> Self:
        """
        Check the bit width before building the instance.

        Raises:
            TypeError: If `value` is not an int. Booleans count as non-ints here.
            OverflowError: If `value` is negative or needs more than `BITS` bits.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int for {cls.__name__}, got {type(value).__name__}")
        if value < 0 or value > cls.max_value():
            raise OverflowError(f"{value} does not fit in {cls.__name__}")
        return super().__new__(cls, value)

    @classmethod
    def max_value(cls) -> int:
        """Largest value the bit width can hold."""
        return (1 << cls.BITS) - 1

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # Plain validator: strict models must still accept an ordinary int.
        def coerce(value: Any) -> BaseUint:
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.no_info_plain_validator_function(
            coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(int),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))


class Uint16(BaseUint):
    """Port numbers and peer counts."""

    BITS = 16


class Uint64(BaseUint):
    """Cache sizes and other large limits."""

    BITS = 64
