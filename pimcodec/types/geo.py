"""Library for parsing and encoding GEO values.

vCard 4.0 writes a position as a ``geo:`` URI (``geo:37.386,-122.083``)
while iCalendar and vCard 3.0 use a structured ``lat;lng`` value.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pimcodec.parsing.property import ParsedProperty

GEO_URI_SCHEME = "geo:"


class Geo(BaseModel):
    """Information related to the global position of a contact or activity."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float

    @field_validator("lat", "lng")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"Expected a finite coordinate, got {value}")
        return value

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Geo:
        """Parse a ``geo:lat,lng`` URI or a ``lat;lng`` value."""
        value = prop.value.strip()
        if value.lower().startswith(GEO_URI_SCHEME):
            # Drop any uri parameters such as ";u=35"
            coords = value[len(GEO_URI_SCHEME) :].split(";", 1)[0]
            parts = coords.split(",")
        else:
            parts = value.split(",")
            if len(parts) != 2:
                parts = value.replace("\\;", ";").split(";")
        if len(parts) < 2:
            raise ValueError(f"Value was not valid geo lat;long: {value}")
        return cls(lat=float(parts[0]), lng=float(parts[1]))

    @classmethod
    def __encode_property_value__(cls, value: Geo) -> str:
        """Serialize as an iCalendar ``lat;lng`` value."""
        return f"{_format(value.lat)};{_format(value.lng)}"

    @classmethod
    def __encode_uri__(cls, value: Geo) -> str:
        """Serialize as a vCard ``geo:`` URI."""
        return f"{GEO_URI_SCHEME}{_format(value.lat)},{_format(value.lng)}"


def _format(coordinate: Any) -> str:
    """Format a coordinate without a trailing ``.0`` for whole numbers."""
    if float(coordinate).is_integer():
        return str(int(coordinate))
    return repr(float(coordinate))
