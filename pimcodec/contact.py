"""A contact as described by a vCard.

A Contact is both the input to the vCard generator and the output of the
vCard parser. The contact methods (emails, phones, addresses, ...) are
ordered lists, and each entry may be marked as the preferred one of its
group.

This is an example of building a contact and encoding it as a vCard:

```python
from pimcodec.contact import Contact, Email
from pimcodec.vcard_stream import generate_single_vcard

contact = Contact(
    formatted_name="Ada Lovelace",
    emails=[Email(email="ada@example.com", type="work", is_primary=True)],
)
print(generate_single_vcard(contact))
```
"""

from __future__ import annotations

import datetime
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .component import ComponentModel
from .types.const import (
    AddressType,
    CalendarType,
    ContactKind,
    EmailType,
    Gender,
    ImService,
    KeyType,
    PhoneType,
    RelationType,
)
from .types.enum import OpenEnum
from .types.geo import Geo

__all__ = [
    "Address",
    "CalendarUri",
    "Contact",
    "Email",
    "InstantMessage",
    "Key",
    "Language",
    "Phone",
    "Relation",
]


class Email(BaseModel):
    """An email address (EMAIL)."""

    model_config = ConfigDict(frozen=True)

    email: str
    type: Optional[OpenEnum[EmailType]] = None
    is_primary: bool = False


class Phone(BaseModel):
    """A telephone number (TEL)."""

    model_config = ConfigDict(frozen=True)

    number: str
    """The number without a tel: uri scheme."""

    type: Optional[OpenEnum[PhoneType]] = None
    is_primary: bool = False


class Address(BaseModel):
    """A delivery address (ADR)."""

    model_config = ConfigDict(frozen=True)

    po_box: Optional[str] = None
    extended_address: Optional[str] = None
    """Apartment or suite number."""

    street_address: Optional[str] = None
    locality: Optional[str] = None
    """City."""

    region: Optional[str] = None
    """State or province."""

    postal_code: Optional[str] = None
    country: Optional[str] = None
    type: Optional[OpenEnum[AddressType]] = None
    is_primary: bool = False


class InstantMessage(BaseModel):
    """An instant messaging handle (IMPP)."""

    model_config = ConfigDict(frozen=True)

    service: OpenEnum[ImService]
    handle: str


class Relation(BaseModel):
    """A relationship with another entity (RELATED)."""

    model_config = ConfigDict(frozen=True)

    related_name: str
    relation_type: OpenEnum[RelationType] = RelationType.CONTACT


class Language(BaseModel):
    """A language the contact speaks (LANG)."""

    model_config = ConfigDict(frozen=True)

    tag: str
    """Language tag, e.g. en or fr-CA."""

    is_primary: bool = False


class Key(BaseModel):
    """A public key or authentication certificate (KEY).

    The key is either referenced by uri or included inline as value.
    """

    model_config = ConfigDict(frozen=True)

    uri: Optional[str] = None
    value: Optional[str] = None
    type: Optional[OpenEnum[KeyType]] = None

    @model_validator(mode="after")
    def _uri_or_value(self) -> Self:
        if not self.uri and not self.value:
            raise ValueError("Key requires either a uri or a value")
        return self


class CalendarUri(BaseModel):
    """A calendar related uri (FBURL, CALADRURI or CALURI)."""

    model_config = ConfigDict(frozen=True)

    uri: str
    type: Optional[OpenEnum[CalendarType]] = None
    is_primary: bool = False


class Contact(ComponentModel):
    """A single vCard record."""

    formatted_name: str
    """The formatted display name, required by every vCard."""

    #
    # Structured name (N)
    #

    family_name: Optional[str] = None
    given_name: Optional[str] = None
    additional_name: Optional[str] = None
    name_prefix: Optional[str] = None
    name_suffix: Optional[str] = None
    nickname: Optional[str] = None

    #
    # Personal
    #

    photo_url: Optional[str] = None
    birthday: Optional[datetime.date] = None
    """Date of birth.

    A birthday without a known year uses the year `pimcodec.util.NO_YEAR`.
    """

    anniversary: Optional[datetime.date] = None
    gender: Optional[Gender] = None
    gender_identity: Optional[str] = None
    """Free form text describing the gender identity."""

    kind: Optional[ContactKind] = None

    #
    # Organization
    #

    organization: Optional[str] = None
    title: Optional[str] = None
    role: Optional[str] = None
    logo_url: Optional[str] = None
    members: list[str] = Field(default_factory=list)
    """Uris of the members of a group contact."""

    #
    # Location
    #

    geo: Optional[Geo] = None
    timezone: Optional[str] = None
    url: Optional[str] = None

    #
    # Metadata
    #

    note: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    sound_url: Optional[str] = None
    source_url: Optional[str] = None
    uid: Optional[str] = None
    revision: Optional[datetime.datetime] = None
    """Time the vCard was last written (REV)."""

    prod_id: Optional[str] = None
    client_pid_map: Optional[str] = None
    xml: Optional[str] = None

    #
    # Multi-valued groups
    #

    emails: list[Email] = Field(default_factory=list)
    phones: list[Phone] = Field(default_factory=list)
    addresses: list[Address] = Field(default_factory=list)
    im_handles: list[InstantMessage] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    languages: list[Language] = Field(default_factory=list)
    keys: list[Key] = Field(default_factory=list)
    fb_urls: list[CalendarUri] = Field(default_factory=list)
    cal_adr_uris: list[CalendarUri] = Field(default_factory=list)
    cal_uris: list[CalendarUri] = Field(default_factory=list)
