"""Reading and writing contacts as vCard 4.0 records.

Use `parse_vcard_file` to read the contacts in a .vcf file and
`generate_vcard_file` or `generate_single_vcard` to write them.

Parsing accepts vCard 2.1, 3.0 and 4.0 content. A few conventions of older
versions and popular producers are understood, such as bare ``TEL;HOME:``
parameters, ``TYPE=pref`` and the ``X-TWITTER`` style social profiles.
Contacts are always written as vCard 4.0.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
from typing import Any, Optional

from .component import (
    ParseResult,
    PropertyHandler,
    PropertyRegistry,
    PropertyWriter,
    RecordBuilder,
    decode_records,
    get_type,
    is_primary,
    log_rejected,
    params,
    record_label,
    validate_record,
)
from .contact import (
    Address,
    CalendarUri,
    Contact,
    Email,
    InstantMessage,
    Key,
    Language,
    Phone,
    Relation,
)
from .exceptions import CodecGenerateError
from .parsing.component import ParsedComponent
from .parsing.const import PARAM_VALUE
from .parsing.property import ParsedProperty
from .types.const import ContactKind, Gender, KeyType, RelationType
from .types.date import (
    format_vcard_date,
    format_vcard_timestamp,
    parse_vcard_date,
    parse_vcard_timestamp,
)
from .types.geo import Geo
from .types.text import escape_text, split_text, unescape_text
from .util import IdGenerator, VCARD_PRODID, dtstamp_factory, prodid_factory, uid_factory

__all__ = [
    "generate_single_vcard",
    "generate_vcard_file",
    "parse_vcard_file",
]

_LOGGER = logging.getLogger(__name__)

VCARD = "vcard"
VCARD_VERSION = "4.0"
MISSING_FN = "vCard missing required FN property"
NO_CONTACTS = "No valid vCard entries found in the file."

PARAM_MEDIATYPE = "MEDIATYPE"
VALUE_URI = "URI"
TEL_SCHEME = "tel:"
HTTP_PREFIX = "http"
PREF_PRIMARY = "1"
KEY_MEDIATYPE = "application/{}-keys"

# Legacy social profile properties read as instant messaging handles
SOCIAL_PROFILES = ("x-socialprofile", "x-twitter", "x-facebook")

# Media type fragments that identify the type of a KEY
KEY_MEDIATYPES = (
    ("pgp", KeyType.PGP),
    ("x509", KeyType.X509),
    ("pkix", KeyType.X509),
    ("ssh", KeyType.SSH),
)

ADR_FIELDS = (
    "po_box",
    "extended_address",
    "street_address",
    "locality",
    "region",
    "postal_code",
    "country",
)
N_FIELDS = (
    "family_name",
    "given_name",
    "additional_name",
    "name_prefix",
    "name_suffix",
)
TEXT_FIELDS = {
    "uid": "uid",
    "prodid": "prod_id",
    "fn": "formatted_name",
    "nickname": "nickname",
    "title": "title",
    "role": "role",
    "note": "note",
    "xml": "xml",
}
RAW_FIELDS = {
    "tz": "timezone",
    "url": "url",
    "source": "source_url",
    "clientpidmap": "client_pid_map",
}
URI_FIELDS = {
    "photo": "photo_url",
    "logo": "logo_url",
    "sound": "sound_url",
}
DATE_FIELDS = {
    "bday": "birthday",
    "anniversary": "anniversary",
}
CALENDAR_URI_FIELDS = {
    "fburl": "fb_urls",
    "caladruri": "cal_adr_uris",
    "caluri": "cal_uris",
}


def _text(prop: ParsedProperty) -> str:
    return unescape_text(prop.value).strip()


def _is_uri(prop: ParsedProperty) -> bool:
    value_type = prop.get_parameter_value(PARAM_VALUE)
    return (
        value_type is not None and value_type.upper() == VALUE_URI
    ) or prop.value.strip().lower().startswith(HTTP_PREFIX)


VCARD_PROPERTIES = PropertyRegistry("VCARD")


def _text_handler(field_name: str) -> PropertyHandler:
    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if (value := unescape_text(prop.value)).strip():
            builder.set(field_name, value)

    return handler


def _raw_handler(field_name: str) -> PropertyHandler:
    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if value := prop.value.strip():
            builder.set(field_name, value)

    return handler


def _uri_handler(field_name: str) -> PropertyHandler:
    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if not _is_uri(prop):
            _LOGGER.debug("Ignoring %s that is not a uri", prop.name.upper())
            return
        builder.set(field_name, prop.value.strip())

    return handler


def _date_handler(field_name: str) -> PropertyHandler:
    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if (value := parse_vcard_date(_text(prop))) is None:
            raise ValueError(f"Invalid date value '{prop.value}'")
        builder.set(field_name, value)

    return handler


def _calendar_uri_handler(field_name: str) -> PropertyHandler:
    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if not (uri := prop.value.strip()):
            raise ValueError("Calendar uri is empty")
        builder.append(
            field_name,
            CalendarUri(uri=uri, type=get_type(prop), is_primary=is_primary(prop)),
        )

    return handler


for _name, _field in TEXT_FIELDS.items():
    VCARD_PROPERTIES.register(_name)(_text_handler(_field))
for _name, _field in RAW_FIELDS.items():
    VCARD_PROPERTIES.register(_name)(_raw_handler(_field))
for _name, _field in URI_FIELDS.items():
    VCARD_PROPERTIES.register(_name)(_uri_handler(_field))
for _name, _field in DATE_FIELDS.items():
    VCARD_PROPERTIES.register(_name)(_date_handler(_field))
for _name, _field in CALENDAR_URI_FIELDS.items():
    VCARD_PROPERTIES.register(_name)(_calendar_uri_handler(_field))


@VCARD_PROPERTIES.register("version")
def _version(prop: ParsedProperty, builder: RecordBuilder) -> None:
    """Content of any vCard version is read the same way."""


@VCARD_PROPERTIES.register("n")
def _n(prop: ParsedProperty, builder: RecordBuilder) -> None:
    parts = [unescape_text(part).strip() for part in split_text(prop.value, ";")]
    for field_name, value in zip(N_FIELDS, parts):
        if value:
            builder.set(field_name, value)


@VCARD_PROPERTIES.register("org")
def _org(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if value := unescape_text(split_text(prop.value, ";")[0]).strip():
        builder.set("organization", value)


@VCARD_PROPERTIES.register("gender")
def _gender(prop: ParsedProperty, builder: RecordBuilder) -> None:
    parts = split_text(prop.value, ";")
    code = unescape_text(parts[0]).strip().upper()
    identity = unescape_text(parts[1]).strip() if len(parts) > 1 else ""
    if code:
        try:
            builder.set("gender", Gender(code))
        except ValueError as err:
            raise ValueError(f"Invalid GENDER value '{code}'") from err
    elif not identity:
        raise ValueError("GENDER is empty")
    if identity:
        builder.set("gender_identity", identity)


@VCARD_PROPERTIES.register("kind")
def _kind(prop: ParsedProperty, builder: RecordBuilder) -> None:
    value = _text(prop).lower()
    try:
        builder.set("kind", ContactKind(value))
    except ValueError as err:
        raise ValueError(f"Invalid KIND value '{value}'") from err


@VCARD_PROPERTIES.register("member")
def _member(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if value := _text(prop):
        builder.append("members", value)


@VCARD_PROPERTIES.register("categories")
def _categories(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.extend(
        "categories",
        [
            value
            for part in split_text(prop.value, ",")
            if (value := unescape_text(part).strip())
        ],
    )


@VCARD_PROPERTIES.register("geo")
def _geo(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.set("geo", Geo.__parse_property_value__(prop))


@VCARD_PROPERTIES.register("rev")
def _rev(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if (value := parse_vcard_timestamp(prop.value)) is None:
        raise ValueError(f"Invalid REV timestamp '{prop.value}'")
    builder.set("revision", value)


@VCARD_PROPERTIES.register("email")
def _email(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if not (value := _text(prop).lower()):
        raise ValueError("EMAIL is empty")
    builder.append(
        "emails", Email(email=value, type=get_type(prop), is_primary=is_primary(prop))
    )


@VCARD_PROPERTIES.register("tel")
def _tel(prop: ParsedProperty, builder: RecordBuilder) -> None:
    value = _text(prop)
    if value.lower().startswith(TEL_SCHEME):
        value = value[len(TEL_SCHEME) :]
    if not value:
        raise ValueError("TEL is empty")
    builder.append(
        "phones", Phone(number=value, type=get_type(prop), is_primary=is_primary(prop))
    )


@VCARD_PROPERTIES.register("adr")
def _adr(prop: ParsedProperty, builder: RecordBuilder) -> None:
    parts = [unescape_text(part).strip() for part in split_text(prop.value, ";")]
    values = {
        field_name: value for field_name, value in zip(ADR_FIELDS, parts) if value
    }
    if not values:
        raise ValueError("ADR is empty")
    builder.append(
        "addresses",
        Address(**values, type=get_type(prop), is_primary=is_primary(prop)),
    )


@VCARD_PROPERTIES.register("impp")
def _impp(prop: ParsedProperty, builder: RecordBuilder) -> None:
    value = _text(prop)
    service, sep, handle = value.partition(":")
    if not sep or not service or not handle:
        raise ValueError(f"Expected IMPP value to be a uri: '{value}'")
    builder.append(
        "im_handles", InstantMessage(service=service.lower(), handle=handle)
    )


@VCARD_PROPERTIES.register(*SOCIAL_PROFILES)
def _social_profile(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if not (handle := _text(prop)):
        return
    service = get_type(prop) or prop.name.removeprefix("x-")
    builder.append("im_handles", InstantMessage(service=service, handle=handle))


@VCARD_PROPERTIES.register("related")
def _related(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if not (value := _text(prop)):
        raise ValueError("RELATED is empty")
    builder.append(
        "relations",
        Relation(
            related_name=value, relation_type=get_type(prop) or RelationType.CONTACT
        ),
    )


@VCARD_PROPERTIES.register("lang")
def _lang(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if not (value := prop.value.strip()):
        raise ValueError("LANG is empty")
    builder.append("languages", Language(tag=value, is_primary=is_primary(prop)))


def _key_type(prop: ParsedProperty) -> Optional[str]:
    if key_type := get_type(prop):
        return key_type
    mediatype = (prop.get_parameter_value(PARAM_MEDIATYPE) or "").lower()
    for fragment, key_type in KEY_MEDIATYPES:
        if fragment in mediatype:
            return key_type
    return None


@VCARD_PROPERTIES.register("key")
def _key(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if not (value := prop.value.strip()):
        raise ValueError("KEY is empty")
    if _is_uri(prop):
        key = Key(uri=value, type=_key_type(prop))
    else:
        key = Key(value=value, type=_key_type(prop))
    builder.append("keys", key)


def _decode_contact(component: ParsedComponent, errors: list[str]) -> Optional[Contact]:
    builder, property_errors = VCARD_PROPERTIES.decode(component)
    label = record_label(VCARD, component.index, builder.get("formatted_name"))
    errors.extend(error.format(label) for error in property_errors)
    if not builder.get("formatted_name"):
        errors.append(f"{MISSING_FN} ({label})")
        log_rejected(component, MISSING_FN)
        return None
    if (contact := validate_record(Contact, builder.values, label, errors)) is None:
        log_rejected(component, "validation failed")
    return contact


def parse_vcard_file(content: str) -> ParseResult[Contact]:
    """Parse the contacts in vCard content.

    Never raises for malformed content. A contact missing its FN is dropped
    and a property that can't be parsed is left out of its contact, each
    with a message in the result errors.
    """
    return decode_records(content, VCARD, _decode_contact, NO_CONTACTS)


#
# Encoding
#


def _primary_flags(entries: Sequence[Any]) -> list[bool]:
    """Return the PREF flag of each entry, allowing only the first primary."""
    flags = []
    seen = False
    for entry in entries:
        flag = entry.is_primary and not seen
        seen = seen or flag
        flags.append(flag)
    return flags


def _type_upper(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value)).upper()


def _pref(flag: bool) -> Optional[str]:
    return PREF_PRIMARY if flag else None


def _add_text(writer: PropertyWriter, name: str, value: Optional[str]) -> None:
    if value:
        writer.add(name, escape_text(value))


def _add_uri(writer: PropertyWriter, name: str, value: Optional[str]) -> None:
    writer.add(name, value, params(value=VALUE_URI))


def _add_date(writer: PropertyWriter, name: str, value: Any) -> None:
    writer.add_encoded(
        name, value, lambda name, value: ParsedProperty(name=name, value=format_vcard_date(value))
    )


def _add_name(writer: PropertyWriter, contact: Contact) -> None:
    parts = [getattr(contact, field_name) for field_name in N_FIELDS]
    if any(parts):
        writer.add("n", ";".join(escape_text(part or "") for part in parts))


def _add_gender(writer: PropertyWriter, contact: Contact) -> None:
    # The sex component may be empty when only an identity is known
    value = contact.gender.value if contact.gender is not None else ""
    if contact.gender_identity:
        value += f";{escape_text(contact.gender_identity)}"
    writer.add("gender", value)


def _add_emails(writer: PropertyWriter, emails: list[Email]) -> None:
    for email, flag in zip(emails, _primary_flags(emails)):
        writer.add(
            "email",
            escape_text(email.email),
            params(type=_type_upper(email.type), pref=_pref(flag)),
        )


def _add_phones(writer: PropertyWriter, phones: list[Phone]) -> None:
    for phone, flag in zip(phones, _primary_flags(phones)):
        number = "".join(phone.number.split())
        if not number:
            _LOGGER.debug("Skipping empty phone number")
            continue
        if not number.lower().startswith(TEL_SCHEME):
            number = f"{TEL_SCHEME}{number}"
        writer.add(
            "tel",
            number,
            params(value="uri", type=_type_upper(phone.type), pref=_pref(flag)),
        )


def _add_addresses(writer: PropertyWriter, addresses: list[Address]) -> None:
    for address, flag in zip(addresses, _primary_flags(addresses)):
        parts = [getattr(address, field_name) for field_name in ADR_FIELDS]
        if not any(parts):
            _LOGGER.debug("Skipping empty address")
            continue
        writer.add(
            "adr",
            ";".join(escape_text(part or "") for part in parts),
            params(type=_type_upper(address.type), pref=_pref(flag)),
        )


def _add_im_handles(writer: PropertyWriter, handles: list[InstantMessage]) -> None:
    for im in handles:
        service = str(getattr(im.service, "value", im.service))
        value = im.handle if ":" in im.handle else f"{service}:{im.handle}"
        writer.add("impp", value)


def _add_relations(writer: PropertyWriter, relations: list[Relation]) -> None:
    for relation in relations:
        relation_type = str(getattr(relation.relation_type, "value", relation.relation_type))
        writer.add(
            "related", escape_text(relation.related_name), params(type=relation_type)
        )


def _add_languages(writer: PropertyWriter, languages: list[Language]) -> None:
    for language, flag in zip(languages, _primary_flags(languages)):
        writer.add("lang", language.tag, params(pref=_pref(flag)))


def _add_keys(writer: PropertyWriter, keys: list[Key]) -> None:
    for key in keys:
        mediatype = None
        if key.type is not None:
            key_type = str(getattr(key.type, "value", key.type)).lower()
            mediatype = KEY_MEDIATYPE.format(key_type)
        if key.uri:
            writer.add("key", key.uri, params(value=VALUE_URI, mediatype=mediatype))
        elif key.value:
            writer.add("key", key.value, params(mediatype=mediatype))
        else:
            _LOGGER.debug("Skipping KEY without a uri or value")


def _add_calendar_uris(
    writer: PropertyWriter, name: str, uris: list[CalendarUri]
) -> None:
    for uri, flag in zip(uris, _primary_flags(uris)):
        writer.add(name, uri.uri, params(type=_type_upper(uri.type), pref=_pref(flag)))


def encode_contact(
    contact: Contact,
    *,
    prod_id: str | None = None,
    id_generator: IdGenerator | None = None,
    index: int | None = None,
) -> ParsedComponent:
    """Encode a contact as a VCARD component."""
    if not contact.formatted_name or not contact.formatted_name.strip():
        where = f" at index {index}" if index is not None else ""
        raise CodecGenerateError(f"Contact{where} missing required FN")

    writer = PropertyWriter(VCARD)
    writer.add("version", VCARD_VERSION)
    _add_text(writer, "prodid", prodid_factory(VCARD_PRODID, prod_id or contact.prod_id))
    _add_text(writer, "uid", contact.uid or (id_generator or uid_factory()).vcard_uid())
    _add_text(writer, "fn", contact.formatted_name)
    _add_name(writer, contact)
    _add_text(writer, "nickname", contact.nickname)

    _add_uri(writer, "photo", contact.photo_url)
    _add_date(writer, "bday", contact.birthday)
    _add_date(writer, "anniversary", contact.anniversary)
    _add_gender(writer, contact)
    if contact.kind is not None:
        writer.add("kind", contact.kind.value)

    _add_text(writer, "org", contact.organization)
    _add_text(writer, "title", contact.title)
    _add_text(writer, "role", contact.role)
    _add_uri(writer, "logo", contact.logo_url)
    for member in contact.members:
        _add_text(writer, "member", member)

    _add_emails(writer, contact.emails)
    _add_phones(writer, contact.phones)
    _add_addresses(writer, contact.addresses)
    _add_im_handles(writer, contact.im_handles)

    if contact.geo is not None:
        writer.add("geo", Geo.__encode_uri__(contact.geo))
    writer.add("tz", contact.timezone)
    writer.add("url", contact.url)

    _add_text(writer, "note", contact.note)
    writer.add("categories", ",".join(escape_text(c) for c in contact.categories if c))
    _add_relations(writer, contact.relations)
    _add_languages(writer, contact.languages)
    _add_keys(writer, contact.keys)
    _add_uri(writer, "sound", contact.sound_url)
    writer.add("source", contact.source_url)
    writer.add("clientpidmap", contact.client_pid_map)
    _add_text(writer, "xml", contact.xml)

    for name, field_name in CALENDAR_URI_FIELDS.items():
        _add_calendar_uris(writer, name, getattr(contact, field_name))

    writer.add("rev", format_vcard_timestamp(dtstamp_factory()))
    return writer.component


def generate_single_vcard(
    contact: Contact,
    prod_id: str | None = None,
    *,
    id_generator: IdGenerator | None = None,
) -> str:
    """Write a single contact as a vCard.

    Raises CodecGenerateError if the contact has no formatted name.
    """
    return encode_contact(contact, prod_id=prod_id, id_generator=id_generator).ics()


def generate_vcard_file(
    contacts: Iterable[Contact],
    *,
    prod_id: str | None = None,
    id_generator: IdGenerator | None = None,
) -> str:
    """Write contacts as a vCard file.

    Raises CodecGenerateError naming the index of the first contact that
    has no formatted name. An empty list of contacts produces an empty
    string.
    """
    return "".join(
        encode_contact(
            contact, prod_id=prod_id, id_generator=id_generator, index=index
        ).ics()
        for index, contact in enumerate(contacts)
    )
