"""Utility methods used by multiple components."""

from __future__ import annotations

import datetime
from typing import Protocol
import uuid

__all__ = [
    "IdGenerator",
    "UuidGenerator",
    "dtstamp_factory",
    "uid_factory",
    "prodid_factory",
]


VCARD_PRODID = "-//AppStandard Contacts//EN"
TODO_PRODID = "-//AppStandard Tasks//AppStandard Tasks//EN"
EVENT_PRODID = "-//AppStandard Calendar//AppStandard Calendar//EN"
TODO_CALENDAR_NAME = "AppStandard Tasks"

UID_DOMAIN = "appstandard"
URN_UUID_PREFIX = "urn:uuid:"

# Year used for dates where the year is not known, e.g. "--0412" birthdays.
# This is a leap year so that February 29th is representable.
NO_YEAR = 1604


class IdGenerator(Protocol):
    """Capability that produces globally unique record identifiers."""

    def vcard_uid(self) -> str:
        """Return a new UID for a vCard record."""

    def calendar_uid(self, domain: str) -> str:
        """Return a new UID for an iCalendar component."""


class UuidGenerator:
    """IdGenerator backed by random (version 4) uuids from the OS RNG."""

    def vcard_uid(self) -> str:
        """Return a uuid in the RFC 6350 recommended urn form."""
        return f"{URN_UUID_PREFIX}{uuid.uuid4()}"

    def calendar_uid(self, domain: str) -> str:
        """Return a uuid qualified with a domain as RFC 5545 recommends."""
        return f"{uuid.uuid4()}@{domain}"


def uid_factory() -> IdGenerator:
    """Factory method for the default id generator to facilitate mocking."""
    return UuidGenerator()


def dtstamp_factory() -> datetime.datetime:
    """Factory method for new timestamps to facilitate mocking."""
    return datetime.datetime.now(tz=datetime.UTC).replace(microsecond=0)


def prodid_factory(default: str, prod_id: str | None = None) -> str:
    """Return the product identifier to facilitate mocking."""
    return prod_id or default
