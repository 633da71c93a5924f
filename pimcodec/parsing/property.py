"""Library for handling vCard and iCalendar properties and parameters.

A property is an individual attribute describing a contact or a calendar
component. A property is also really just a "contentline", however properties
in this file are the output of the tokenizer and are provided in the context
of where they live in a record (e.g. attached to a VTODO, or to a VALARM
nested inside of it).

This is a very simple tokenizer that converts a single unfolded line into an
object structure with the name, parameters, and raw value. This library does
not attempt to interpret the meaning of the properties or types themselves,
and the value is left in its escaped wire form.

For example, given a content line of:

  TEL;VALUE=uri;TYPE=CELL,VOICE:tel:+1-555-0100

This library would create a ParsedProperty object with this structure:

  ParsedProperty(
    name='tel',
    value='tel:+1-555-0100',
    params=[
        ParsedPropertyParameter(name='VALUE', values=['uri']),
        ParsedPropertyParameter(name='TYPE', values=['CELL', 'VOICE']),
    ]
  )

The tokenizer is tolerant of a few common producer quirks: vCard group
prefixes (``item1.EMAIL``), lower case names, and vCard 2.1 style bare
parameters (``TEL;HOME;VOICE:``) which are treated as TYPE values.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from pimcodec.exceptions import CodecParseError

from .const import PARAM_TYPE

# Characters that should be encoded in quotes
_UNSAFE_CHAR_RE = re.compile(r"[,:;]")
_RE_CONTROL_CHARS = re.compile("[\x00-\x08\x0a-\x1f\x7f]")
_RE_NAME = re.compile(r"(?:(?P<group>[A-Za-z0-9-]+)\.)?(?P<name>[A-Za-z0-9-]+)")
_RE_PARAM_NAME = re.compile("[A-Za-z0-9-]+")
_NAME_DELIMITERS = (";", ":")
_PARAM_NAME_DELIMITERS = ("=", ";", ":")
_PARAM_DELIMITERS = (",", ";", ":")
_QUOTE = '"'


def _find_first(
    line: str, chars: Sequence[str], start: int | None = None
) -> int | None:
    """Find the earliest occurrence of any of the given characters in the line."""
    earliest: int | None = None
    for char in chars:
        pos = line.find(char, start)
        if pos != -1 and (earliest is None or pos < earliest):
            earliest = pos
    return earliest


@dataclass
class ParsedPropertyParameter:
    """A property parameter with one or more values."""

    name: str
    values: list[str]


@dataclass
class ParsedProperty:
    """A single vCard or iCalendar property."""

    name: str
    value: str
    params: Optional[list[ParsedPropertyParameter]] = None
    group: Optional[str] = None

    def get_parameter(self, name: str) -> ParsedPropertyParameter | None:
        """Return a single ParsedPropertyParameter with the specified name."""
        if not self.params:
            return None
        for param in self.params:
            if param.name.lower() != name.lower():
                continue
            return param
        return None

    def get_parameter_values(self, name: str) -> list[str]:
        """Return all values for the parameter, merged across repetitions.

        Producers may repeat a parameter (``TYPE=home;TYPE=voice``) instead
        of using a comma separated list.
        """
        if not self.params:
            return []
        result: list[str] = []
        for param in self.params:
            if param.name.lower() == name.lower():
                result.extend(param.values)
        return result

    def get_parameter_value(self, name: str) -> str | None:
        """Return the first value of the property parameter."""
        if not (param := self.get_parameter(name)) or not param.values:
            return None
        return param.values[0]

    def ics(self) -> str:
        """Encode a ParsedProperty into the serialized content line format."""
        result = [self.name.upper()]
        if self.params:
            result.append(";")
            result_params = []
            for parameter in self.params:
                result_param_values = []
                for value in parameter.values:
                    # Double quotes and control characters can't be represented
                    # in a parameter value at all.
                    value = _RE_CONTROL_CHARS.sub("", value.replace(_QUOTE, ""))
                    # Property parameters with values contain a colon, semicolon,
                    # or a comma character must be placed in quoted text
                    if _UNSAFE_CHAR_RE.search(value):
                        result_param_values.append(f'"{value}"')
                    else:
                        result_param_values.append(value)
                values = ",".join(result_param_values)
                result_params.append(f"{parameter.name.upper()}={values}")
            result.append(";".join(result_params))
        result.append(":")
        result.append(str(self.value))
        return "".join(result)

    @classmethod
    def from_ics(cls, contentline: str) -> ParsedProperty:
        """Decode a ParsedProperty from a single unfolded content line.

        Will raise a CodecParseError on failure.
        """
        return _parse_line(contentline)


def _parse_param_values(line: str, pos: int) -> tuple[list[str], str, int]:
    """Parse comma separated parameter values starting at pos.

    Returns the values, the delimiter that ended the parameter, and the
    position just past that delimiter.
    """
    line_len = len(line)
    param_values: list[str] = []
    delimiter: str | None = None
    while delimiter is None or delimiter == ",":
        if pos >= line_len:
            raise CodecParseError(
                "Unexpected end of line. Expected parameter value or delimiter.",
                detailed_error=line,
            )
        param_value: str
        if line[pos] == _QUOTE:
            if (end_quote_pos := line.find(_QUOTE, pos + 1)) == -1:
                raise CodecParseError(
                    "Unexpected end of line: unclosed quoted parameter value.",
                    detailed_error=line,
                )
            param_value = line[pos + 1 : end_quote_pos]
            pos = end_quote_pos + 1
        else:
            if (end_pos := _find_first(line, _PARAM_DELIMITERS, pos)) is None:
                raise CodecParseError(
                    "Unexpected end of line: missing ':' before property value.",
                    detailed_error=line,
                )
            param_value = line[pos:end_pos]
            pos = end_pos

        if _RE_CONTROL_CHARS.search(param_value):
            raise CodecParseError(
                f"Invalid parameter value '{param_value}'", detailed_error=line
            )
        param_values.append(param_value)

        if pos >= line_len:
            raise CodecParseError(
                f"Unexpected end of line after parameter value '{param_value}'. "
                f"Expected delimiter {_PARAM_DELIMITERS}.",
                detailed_error=line,
            )
        if (delimiter := line[pos]) not in _PARAM_DELIMITERS:
            raise CodecParseError(
                f"Expected {_PARAM_DELIMITERS} after parameter value, got '{delimiter}'",
                detailed_error=line,
            )
        pos += 1
    return param_values, delimiter, pos


def _parse_line(line: str) -> ParsedProperty:
    """Parse a single property line."""

    # parse NAME
    if (name_end_pos := _find_first(line, _NAME_DELIMITERS)) is None:
        raise CodecParseError(
            "Invalid property line, expected ':' after property name",
            detailed_error=line,
        )
    if not (match := _RE_NAME.fullmatch(line[0:name_end_pos].strip())):
        raise CodecParseError(
            f"Invalid property name '{line[0:name_end_pos]}'", detailed_error=line
        )
    has_params = line[name_end_pos] == ";"
    pos = name_end_pos + 1
    line_len = len(line)

    # parse PARAMS if any
    params: list[ParsedPropertyParameter] = []
    if has_params:
        while True:
            if (param_name_end_pos := _find_first(line, _PARAM_NAME_DELIMITERS, pos)) is None:
                raise CodecParseError(
                    "Unexpected end of line: missing ':' before property value.",
                    detailed_error=line,
                )
            param_name = line[pos:param_name_end_pos].strip()
            delimiter = line[param_name_end_pos]
            pos = param_name_end_pos + 1
            if delimiter != "=":
                # A bare vCard 2.1 parameter such as ";HOME" is a TYPE value
                if param_name:
                    params.append(
                        ParsedPropertyParameter(name=PARAM_TYPE, values=[param_name])
                    )
                if delimiter == ":":
                    break
                continue
            if not _RE_PARAM_NAME.fullmatch(param_name):
                raise CodecParseError(
                    f"Invalid parameter name '{param_name}'", detailed_error=line
                )
            param_values, delimiter, pos = _parse_param_values(line, pos)
            params.append(
                ParsedPropertyParameter(name=param_name.upper(), values=param_values)
            )
            if delimiter == ":":
                break  # We are done with all parameters.
            if pos >= line_len:
                raise CodecParseError(
                    "Unexpected end of line: missing ':' before property value.",
                    detailed_error=line,
                )

    property_value = line[pos:]
    if _RE_CONTROL_CHARS.search(property_value):
        raise CodecParseError(
            "Property value contains control characters",
            detailed_error=line,
        )

    return ParsedProperty(
        name=match.group("name").lower(),
        value=property_value,
        params=params if params else None,
        group=match.group("group"),
    )
