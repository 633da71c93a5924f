"""Library for parsing and encoding CAL-ADDRESS values.

Calendar users (ATTENDEE and ORGANIZER) are addressed with a ``mailto:``
uri. The models hold the bare email address and the uri scheme is added
back when encoding.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from pimcodec.parsing.property import ParsedProperty, ParsedPropertyParameter

from .const import AttendeeRole, ParticipationStatus
from .enum import OpenEnum
from .text import unescape_text

__all__ = [
    "Attendee",
    "Organizer",
    "MAILTO",
]

_LOGGER = logging.getLogger(__name__)

MAILTO = "mailto:"
PARAM_CN = "CN"
PARAM_ROLE = "ROLE"
PARAM_PARTSTAT = "PARTSTAT"
PARAM_RSVP = "RSVP"
RSVP_TRUE = "TRUE"


def _strip_mailto(value: str) -> str:
    """Return the address without a mailto: scheme."""
    value = unescape_text(value).strip()
    if value.lower().startswith(MAILTO):
        value = value[len(MAILTO) :]
    if not value:
        raise ValueError("Calendar user address is empty")
    return value


def _upper(value: str | None) -> str | None:
    return value.upper() if value else None


class Organizer(BaseModel):
    """The organizer of a calendar component."""

    model_config = ConfigDict(frozen=True)

    email: str
    """The bare email address, without a mailto: scheme."""

    name: Optional[str] = None
    """The common name (CN) of the organizer."""

    @field_validator("email")
    @classmethod
    def _email_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Email address must not be empty")
        return value

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Organizer:
        """Parse an ORGANIZER property."""
        return cls(
            email=_strip_mailto(prop.value),
            name=prop.get_parameter_value(PARAM_CN),
        )

    @classmethod
    def encode_property(cls, name: str, value: Organizer) -> ParsedProperty:
        """Create an ORGANIZER property."""
        params = []
        if value.name:
            params.append(ParsedPropertyParameter(name=PARAM_CN, values=[value.name]))
        return ParsedProperty(
            name=name, value=f"{MAILTO}{value.email}", params=params or None
        )


class Attendee(BaseModel):
    """A participant in a calendar component."""

    model_config = ConfigDict(frozen=True)

    email: str
    """The bare email address, without a mailto: scheme."""

    name: Optional[str] = None
    """The common name (CN) of the attendee."""

    role: Optional[OpenEnum[AttendeeRole]] = None
    """The participation role for the calendar user."""

    status: Optional[OpenEnum[ParticipationStatus]] = None
    """The participation status (PARTSTAT) for the calendar user."""

    rsvp: bool = False
    """Whether a reply is expected from the calendar user."""

    @field_validator("email")
    @classmethod
    def _email_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Email address must not be empty")
        return value

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> Attendee:
        """Parse an ATTENDEE property and its parameters."""
        rsvp = prop.get_parameter_value(PARAM_RSVP)
        return cls(
            email=_strip_mailto(prop.value),
            name=prop.get_parameter_value(PARAM_CN),
            role=_upper(prop.get_parameter_value(PARAM_ROLE)),
            status=_upper(prop.get_parameter_value(PARAM_PARTSTAT)),
            rsvp=(rsvp or "").upper() == RSVP_TRUE,
        )

    @classmethod
    def encode_property(cls, name: str, value: Attendee) -> ParsedProperty:
        """Create an ATTENDEE property."""
        params = []
        if value.name:
            params.append(ParsedPropertyParameter(name=PARAM_CN, values=[value.name]))
        if value.role:
            params.append(
                ParsedPropertyParameter(name=PARAM_ROLE, values=[_enum_value(value.role)])
            )
        if value.status:
            params.append(
                ParsedPropertyParameter(
                    name=PARAM_PARTSTAT, values=[_enum_value(value.status)]
                )
            )
        if value.rsvp:
            params.append(ParsedPropertyParameter(name=PARAM_RSVP, values=[RSVP_TRUE]))
        return ParsedProperty(
            name=name, value=f"{MAILTO}{value.email}", params=params or None
        )


def _enum_value(value: AttendeeRole | ParticipationStatus | str) -> str:
    if isinstance(value, (AttendeeRole, ParticipationStatus)):
        return value.value
    return value.upper()
