"""Library for parsing and encoding TEXT values.

TEXT values escape backslash, semicolon, comma and newline. Structured values
such as N or ADR join escaped components with an unescaped separator, so
they are split before unescaping.
"""

from __future__ import annotations

import re

from pimcodec.parsing.property import ParsedProperty

UNESCAPE_CHAR = {"\\\\": "\\", "\\;": ";", "\\,": ",", "\\N": "\n", "\\n": "\n"}

# Order matters: backslash first so escapes introduced later are not doubled
ESCAPE_CHAR = (("\\", "\\\\"), (";", "\\;"), (",", "\\,"), ("\n", "\\n"))

_UNESCAPE_RE = re.compile(r"\\[\\;,Nn]")


def escape_text(value: str) -> str:
    """Escape a text value for use as a property value.

    Carriage returns are dropped so that CRLF line breaks become a single
    escaped newline.
    """
    if not value:
        return ""
    value = value.replace("\r\n", "\n").replace("\r", "")
    for char, escaped in ESCAPE_CHAR:
        if char not in value:
            continue
        value = value.replace(char, escaped)
    return value


def unescape_text(value: str) -> str:
    """Unescape a text property value.

    Escape sequences are replaced in a single left to right pass so that an
    escaped backslash followed by an ``n`` is not mistaken for a newline.
    """
    if not value or "\\" not in value:
        return value
    return _UNESCAPE_RE.sub(lambda m: UNESCAPE_CHAR[m.group(0)], value)


def split_text(value: str, sep: str) -> list[str]:
    """Split an escaped value on separators that are not escaped.

    The returned components are still escaped.
    """
    parts: list[str] = []
    current: list[str] = []
    chars = iter(value)
    for char in chars:
        if char == "\\":
            current.append(char)
            if (following := next(chars, None)) is not None:
                current.append(following)
            continue
        if char == sep:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def join_text(values: list[str], sep: str) -> str:
    """Escape each component and join with an unescaped separator."""
    return sep.join(escape_text(value) for value in values)


class TextEncoder:
    """Encode a TEXT value."""

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> str:
        """Parse a property into a text value."""
        return unescape_text(prop.value)

    @classmethod
    def __encode_property_value__(cls, value: str) -> str:
        """Serialize text as a property value."""
        return escape_text(value)
