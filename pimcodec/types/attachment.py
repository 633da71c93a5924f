"""Implementation of the ATTACH property.

An attachment is either a reference to a resource by uri, or the resource
itself as inline base64 encoded binary data.
"""

from __future__ import annotations

from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, model_validator

from pimcodec.parsing.const import PARAM_VALUE
from pimcodec.parsing.property import ParsedProperty, ParsedPropertyParameter

PARAM_FMTTYPE = "FMTTYPE"
PARAM_FILENAME = "X-FILENAME"
PARAM_ENCODING = "ENCODING"
ENCODING_BASE64 = "BASE64"
VALUE_BINARY = "BINARY"


class Attachment(BaseModel):
    """A document object associated with a calendar component."""

    model_config = ConfigDict(frozen=True)

    uri: Optional[str] = None
    """Location of the attached resource."""

    value: Optional[str] = None
    """Inline base64 encoded content."""

    fmttype: Optional[str] = None
    """Media type of the attached resource, e.g. application/pdf."""

    filename: Optional[str] = None

    @model_validator(mode="after")
    def _uri_or_value(self) -> Self:
        if not self.uri and not self.value:
            raise ValueError("Attachment requires either a uri or a value")
        return self

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Attachment:
        """Parse an ATTACH property."""
        if not (value := prop.value.strip()):
            raise ValueError("Attachment value is empty")
        encoding = prop.get_parameter_value(PARAM_ENCODING)
        inline = encoding is not None and encoding.upper() == ENCODING_BASE64
        return cls(
            uri=None if inline else value,
            value=value if inline else None,
            fmttype=prop.get_parameter_value(PARAM_FMTTYPE),
            filename=prop.get_parameter_value(PARAM_FILENAME),
        )

    @classmethod
    def encode_property(cls, name: str, value: Attachment) -> ParsedProperty:
        """Create an ATTACH property, preferring inline data over a uri."""
        params = []
        if value.fmttype:
            params.append(ParsedPropertyParameter(name=PARAM_FMTTYPE, values=[value.fmttype]))
        if value.filename:
            params.append(
                ParsedPropertyParameter(name=PARAM_FILENAME, values=[value.filename])
            )
        if value.value:
            params.append(
                ParsedPropertyParameter(name=PARAM_ENCODING, values=[ENCODING_BASE64])
            )
            params.append(ParsedPropertyParameter(name=PARAM_VALUE, values=[VALUE_BINARY]))
            return ParsedProperty(name=name, value=value.value, params=params)
        return ParsedProperty(name=name, value=value.uri or "", params=params or None)
