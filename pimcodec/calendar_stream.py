"""Shared handling of iCalendar documents for tasks and events.

VTODO and VEVENT records share most of their properties, so the property
handlers and encoding helpers for those live here, along with the
VCALENDAR wrapper that surrounds the records in a file.

A file written by this library looks like:

```
BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//AppStandard Tasks//AppStandard Tasks//EN
CALSCALE:GREGORIAN
METHOD:PUBLISH
X-WR-CALNAME:AppStandard Tasks
BEGIN:VTODO
...
END:VTODO
END:VCALENDAR
```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import datetime
import logging
from typing import Any, Optional, TypeVar

from .alarm import Alarm, decode_alarm, encode_alarm
from .compat import enable_compat_mode
from .component import (
    ComponentModel,
    ParseResult,
    PropertyRegistry,
    PropertyWriter,
    RecordBuilder,
    decode_records,
    params,
    record_label,
)
from .exceptions import CodecGenerateError, CodecParseError
from .parsing.component import ParsedComponent, unfolded_lines
from .parsing.const import ATTR_BEGIN_LOWER
from .parsing.property import ParsedProperty
from .types.attachment import Attachment
from .types.cal_address import Attendee, Organizer
from .types.date_time import DateTimeEncoder, require_utc
from .types.duration import DurationEncoder
from .types.geo import Geo
from .types.recur import RecurEncoder
from .types.request_status import RequestStatus
from .types.text import TextEncoder, escape_text, split_text, unescape_text
from .util import IdGenerator, UID_DOMAIN, dtstamp_factory, uid_factory

__all__ = [
    "encode_calendar",
    "find_prodid",
    "parse_calendar_records",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=ComponentModel)

VCALENDAR = "vcalendar"
CALENDAR_VERSION = "2.0"
CALSCALE = "GREGORIAN"
METHOD = "PUBLISH"
PARAM_RELTYPE = "RELTYPE"

PERCENT_COMPLETE_RANGE = (0, 100)
PRIORITY_RANGE = (0, 9)

# Properties shared by VTODO and VEVENT records, mapped to the model field
# they populate. Records register additional properties on a copy.
_TEXT_FIELDS = {
    "uid": "uid",
    "summary": "summary",
    "description": "description",
    "location": "location",
    "comment": "comment",
    "contact": "contact",
}
_URI_FIELDS = {
    "url": "url",
    "color": "color",
}
_DATE_FIELDS = {
    "dtstart": "dtstart",
    "recurrence-id": "recurrence_id",
}
_UTC_FIELDS = {
    "dtstamp": "dtstamp",
    "created": "created",
    "last-modified": "last_modified",
}
_UPPER_FIELDS = {
    "status": "status",
    "class": "classification",
}


def in_range(prop: ParsedProperty, bounds: tuple[int, int]) -> int:
    """Parse an integer property, raising if it is outside the inclusive range."""
    value = int(prop.value.strip())
    if not bounds[0] <= value <= bounds[1]:
        raise ValueError(
            f"{prop.name.upper()} value {value} not in range {bounds[0]}-{bounds[1]}"
        )
    return value


def text_handler(field_name: str) -> Callable[[ParsedProperty, RecordBuilder], None]:
    """Return a handler for a TEXT property."""

    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if (value := TextEncoder.__parse_property_value__(prop)).strip():
            builder.set(field_name, value)

    return handler


def uri_handler(field_name: str) -> Callable[[ParsedProperty, RecordBuilder], None]:
    """Return a handler for a property that holds a uri or token as written."""

    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if value := prop.value.strip():
            builder.set(field_name, value)

    return handler


def date_handler(field_name: str) -> Callable[[ParsedProperty, RecordBuilder], None]:
    """Return a handler for a DATE or DATE-TIME property."""

    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set(field_name, DateTimeEncoder.__parse_property_value__(prop))

    return handler


def upper_handler(field_name: str) -> Callable[[ParsedProperty, RecordBuilder], None]:
    """Return a handler for an enumerated property, normalized to upper case."""

    def handler(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if value := prop.value.strip().upper():
            builder.set(field_name, value)

    return handler


def register_calendar_properties(registry: PropertyRegistry) -> None:
    """Register the handlers for properties common to VTODO and VEVENT."""
    for name, field_name in _TEXT_FIELDS.items():
        registry.register(name)(text_handler(field_name))
    for name, field_name in _URI_FIELDS.items():
        registry.register(name)(uri_handler(field_name))
    for fields in (_DATE_FIELDS, _UTC_FIELDS):
        for name, field_name in fields.items():
            registry.register(name)(date_handler(field_name))
    for name, field_name in _UPPER_FIELDS.items():
        registry.register(name)(upper_handler(field_name))

    @registry.register("priority")
    def _priority(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set("priority", in_range(prop, PRIORITY_RANGE))

    @registry.register("sequence")
    def _sequence(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if (value := int(prop.value.strip())) < 0:
            raise ValueError(f"SEQUENCE must not be negative: {value}")
        builder.set("sequence", value)

    @registry.register("geo")
    def _geo(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set("geo", Geo.__parse_property_value__(prop))

    @registry.register("organizer")
    def _organizer(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set("organizer", Organizer.__parse_property_value__(prop))

    @registry.register("attendee")
    def _attendee(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.append("attendees", Attendee.__parse_property_value__(prop))

    @registry.register("rrule")
    def _rrule(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set("rrule", RecurEncoder.__parse_property_value__(prop))

    @registry.register("rdate", "exdate")
    def _date_list(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.extend(prop.name, DateTimeEncoder.__parse_property_values__(prop))

    @registry.register("duration")
    def _duration(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.set("duration", DurationEncoder.__parse_property_value__(prop))

    @registry.register("related-to")
    def _related_to(prop: ParsedProperty, builder: RecordBuilder) -> None:
        if not (value := unescape_text(prop.value).strip()):
            return
        builder.set("related_to", value)
        if reltype := prop.get_parameter_value(PARAM_RELTYPE):
            builder.set("relation_type", reltype.upper())

    @registry.register("categories", "resources")
    def _text_list(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.extend(
            prop.name,
            [
                value
                for part in split_text(prop.value, ",")
                if (value := unescape_text(part).strip())
            ],
        )

    @registry.register("attach")
    def _attach(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.append("attachments", Attachment.__parse_property_value__(prop))

    @registry.register("request-status")
    def _request_status(prop: ParsedProperty, builder: RecordBuilder) -> None:
        builder.append("request_status", RequestStatus.__parse_property_value__(prop))

    @registry.register_component("valarm")
    def _alarm(component: ParsedComponent, builder: RecordBuilder) -> list[str]:
        alarm, messages = decode_alarm(component)
        builder.append("alarms", alarm)
        return messages


def find_prodid(content: str) -> Optional[str]:
    """Return the PRODID of the VCALENDAR, if written before the first record."""
    for line in unfolded_lines(content):
        if not line.strip():
            continue
        try:
            prop = ParsedProperty.from_ics(line)
        except CodecParseError:
            continue
        if prop.name == "prodid":
            return unescape_text(prop.value).strip() or None
        if prop.name == ATTR_BEGIN_LOWER and prop.value.strip().lower() != VCALENDAR:
            return None
    return None


def parse_calendar_records(
    content: str,
    kind: str,
    registry: PropertyRegistry,
    decoder: Callable[[ParsedComponent, RecordBuilder, str, list[str]], Optional[T]],
    empty_message: str,
) -> ParseResult[T]:
    """Parse the records of one kind from an iCalendar document.

    Compatibility modes are selected based on the producer of the content.
    The decoder receives the collected values for each record and its label
    for error messages, and returns the record or None to drop it.
    """
    if not isinstance(content, str):
        raise TypeError(f"Expected content to be str, got {type(content).__name__}")
    prod_id = find_prodid(content)

    def decode(component: ParsedComponent, errors: list[str]) -> Optional[T]:
        builder, property_errors = registry.decode(component)
        if prod_id:
            builder.set("prod_id", prod_id)
        label = record_label(kind, component.index, builder.get("summary"))
        errors.extend(error.format(label) for error in property_errors)
        return decoder(component, builder, label, errors)

    with enable_compat_mode(content):
        return decode_records(content, kind, decode, empty_message)


#
# Encoding helpers shared by the VTODO and VEVENT generators
#


def require_summary(record: Any, index: int | None = None) -> str:
    """Return the summary of a record, raising if it is missing or blank."""
    summary = getattr(record, "summary", None)
    if not summary or not summary.strip():
        kind = type(record).__name__
        where = f" at index {index}" if index is not None else ""
        raise CodecGenerateError(f"{kind}{where} missing required SUMMARY")
    return summary


def add_text(writer: PropertyWriter, name: str, value: Optional[str]) -> None:
    """Add an escaped TEXT property."""
    if value:
        writer.add(name, TextEncoder.__encode_property_value__(value))


def add_date(
    writer: PropertyWriter, name: str, value: datetime.datetime | datetime.date | None
) -> None:
    """Add a DATE or DATE-TIME property."""
    writer.add_encoded(name, value, DateTimeEncoder.encode_property)


def add_utc(writer: PropertyWriter, name: str, value: Optional[datetime.datetime]) -> None:
    """Add a DATE-TIME property that must be written in UTC."""
    writer.add_encoded(
        name,
        value,
        lambda name, value: DateTimeEncoder.encode_property(name, require_utc(value)),
    )


def add_text_list(writer: PropertyWriter, name: str, values: Iterable[str]) -> None:
    """Add a comma separated TEXT list property such as CATEGORIES."""
    writer.add(name, ",".join(escape_text(value) for value in values if value))


def clamp(value: int, bounds: tuple[int, int]) -> int:
    """Clamp a value to an inclusive range."""
    return max(bounds[0], min(bounds[1], value))


def add_identity(
    writer: PropertyWriter, uid: Optional[str], id_generator: IdGenerator | None
) -> None:
    """Add the UID and DTSTAMP that start every record."""
    add_text(writer, "uid", uid or (id_generator or uid_factory()).calendar_uid(UID_DOMAIN))
    writer.add_encoded("dtstamp", dtstamp_factory(), DateTimeEncoder.encode_property)


def add_scheduling(writer: PropertyWriter, record: Any) -> None:
    """Add the RECURRENCE and relationship properties of a record."""
    writer.add_encoded("rrule", record.rrule, _encode_rrule)
    writer.add_encoded("rdate", record.rdate or None, DateTimeEncoder.encode_list_properties)
    writer.add_encoded("exdate", record.exdate or None, DateTimeEncoder.encode_list_properties)


def _encode_rrule(name: str, value: str) -> ParsedProperty:
    return ParsedProperty(name=name, value=RecurEncoder.__encode_property_value__(value))


def add_duration(writer: PropertyWriter, duration: Optional[datetime.timedelta]) -> None:
    """Add a DURATION property."""
    writer.add_encoded(
        "duration",
        duration,
        lambda name, value: ParsedProperty(
            name=name, value=DurationEncoder.__encode_property_value__(value)
        ),
    )


def add_related_to(writer: PropertyWriter, record: Any) -> None:
    """Add RELATED-TO with its optional RELTYPE."""
    if not record.related_to:
        return
    reltype = record.relation_type
    writer.add(
        "related-to",
        TextEncoder.__encode_property_value__(record.related_to),
        params(reltype=enum_upper(reltype)),
    )


def add_sequence(writer: PropertyWriter, sequence: Optional[int]) -> None:
    """Add SEQUENCE, skipping negative values."""
    if sequence is not None and sequence >= 0:
        writer.add("sequence", str(sequence))


def add_geo(writer: PropertyWriter, geo: Optional[Geo]) -> None:
    """Add GEO as a lat;lng value."""
    if geo is not None:
        writer.add("geo", Geo.__encode_property_value__(geo))


def add_people(writer: PropertyWriter, attendees: Iterable[Attendee]) -> None:
    """Add an ATTENDEE property for each attendee."""
    for attendee in attendees:
        writer.add_encoded("attendee", attendee, Attendee.encode_property)


def add_attachments(writer: PropertyWriter, attachments: Iterable[Attachment]) -> None:
    """Add an ATTACH property for each attachment."""
    for attachment in attachments:
        writer.add_encoded("attach", attachment, Attachment.encode_property)


def add_alarms(
    writer: PropertyWriter, alarms: Iterable[Alarm], summary: Optional[str]
) -> None:
    """Add a VALARM component for each alarm that can be encoded."""
    for alarm in alarms:
        try:
            writer.add_component(encode_alarm(alarm, summary))
        except ValueError as err:
            _LOGGER.debug("Skipping alarm that can't be encoded: %s", err)


def add_request_status(writer: PropertyWriter, statuses: Iterable[RequestStatus]) -> None:
    """Add a REQUEST-STATUS property for each status."""
    for status in statuses:
        writer.add("request-status", RequestStatus.__encode_property_value__(status))


def enum_upper(value: Any) -> Optional[str]:
    """Return the wire value of an open enum, upper case."""
    if value is None:
        return None
    return str(getattr(value, "value", value)).upper()


def encode_calendar(
    components: list[ParsedComponent],
    prod_id: str,
    calendar_name: Optional[str] = None,
) -> str:
    """Encode records in a VCALENDAR wrapper.

    An empty list of records produces no output at all.
    """
    if not components:
        return ""
    writer = PropertyWriter(VCALENDAR)
    writer.add("version", CALENDAR_VERSION)
    writer.add("prodid", TextEncoder.__encode_property_value__(prod_id))
    writer.add("calscale", CALSCALE)
    writer.add("method", METHOD)
    if calendar_name:
        writer.add("x-wr-calname", TextEncoder.__encode_property_value__(calendar_name))
    writer.component.components.extend(components)
    return writer.component.ics()
