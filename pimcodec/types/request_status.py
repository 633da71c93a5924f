"""Implementation of the REQUEST-STATUS property."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from pimcodec.parsing.property import ParsedProperty

from .text import escape_text, split_text, unescape_text


class RequestStatus(BaseModel):
    """Status code returned for a scheduling request."""

    model_config = ConfigDict(frozen=True)

    code: str
    """Hierarchical status code such as "2.0"."""

    description: str
    ext_data: Optional[str] = None

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> RequestStatus:
        """Parse a statcode;statdesc[;extdata] value."""
        parts = [unescape_text(part) for part in split_text(prop.value, ";")]
        if len(parts) < 2 or len(parts) > 3 or not parts[0] or not parts[1]:
            raise ValueError(f"Value was not valid Request Status: {prop.value}")
        return cls(
            code=parts[0].strip(),
            description=parts[1],
            ext_data=parts[2] if len(parts) == 3 and parts[2] else None,
        )

    @classmethod
    def __encode_property_value__(cls, value: RequestStatus) -> str:
        """Encode RequestStatus as a property value."""
        result = f"{value.code};{escape_text(value.description)}"
        if value.ext_data:
            result += f";{escape_text(value.ext_data)}"
        return result
