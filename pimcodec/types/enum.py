"""Utilities for defining and parsing enumerated types.

Producers frequently use values outside the documented sets (e.g. a
``TYPE=x-mobile`` phone), so enumerations are open: a known value is
converted to the enum member and anything else is kept verbatim as a plain
string. Code can distinguish the two with ``isinstance(value, enum.Enum)``.
"""

from __future__ import annotations

from collections.abc import Callable
import enum
from typing import Annotated, Any, TypeVar, Union

from pydantic import BeforeValidator

__all__ = ["OpenEnum", "create_enum_validator", "coerce_enum"]

T = TypeVar("T", bound=enum.Enum)


def coerce_enum(enum_type: type[T], value: Any) -> T | str:
    """Return the enum member for a known value, or the value as a string."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return str(value)


def create_enum_validator(enum_type: type[T]) -> Callable[[Any], bool]:
    """Create a function that returns true when a value is a known member.

    Unknown values are never rejected, this only reports whether the value
    is one of the documented ones. The comparison ignores case.
    """
    known = {str(member.value).lower() for member in enum_type}

    def validate(value: Any) -> bool:
        if isinstance(value, enum_type):
            return True
        return str(value).lower() in known

    return validate


class OpenEnum:
    """Annotation factory for an enum field that also accepts any string.

    Usage: ``phone_type: OpenEnum[PhoneType] | None = None``
    """

    def __class_getitem__(cls, enum_type: type[T]) -> Any:
        return Annotated[
            Union[enum_type, str],
            BeforeValidator(lambda value: coerce_enum(enum_type, value)),
        ]
