"""Reading and writing calendar events as iCalendar VEVENT records.

An event needs a start. When parsing, the end of an event that has no
DTEND is derived from its DURATION, or is the following day for an
all-day event, or otherwise is the same as the start.
"""

from __future__ import annotations

from collections.abc import Iterable
import datetime
import logging
from typing import Optional

from .calendar_stream import (
    PRIORITY_RANGE,
    add_alarms,
    add_attachments,
    add_date,
    add_duration,
    add_geo,
    add_identity,
    add_people,
    add_related_to,
    add_request_status,
    add_scheduling,
    add_sequence,
    add_text,
    add_text_list,
    add_utc,
    clamp,
    date_handler,
    encode_calendar,
    enum_upper,
    parse_calendar_records,
    register_calendar_properties,
    require_summary,
    upper_handler,
)
from .compat import title_compat
from .component import (
    ParseResult,
    PropertyRegistry,
    PropertyWriter,
    RecordBuilder,
    log_rejected,
    validate_record,
)
from .event import Event
from .parsing.component import ParsedComponent
from .types.cal_address import Organizer
from .util import EVENT_PRODID, IdGenerator, prodid_factory

__all__ = [
    "generate_ics_file",
    "generate_single_event",
    "parse_ics_file",
]

_LOGGER = logging.getLogger(__name__)

VEVENT = "vevent"
MISSING_SUMMARY = "Event missing required SUMMARY property"
MISSING_DATES = "Event missing start or end date"
NO_EVENTS = "No events found in the ICS file."
UNTITLED_EVENT = "Untitled Event"


EVENT_PROPERTIES = PropertyRegistry("VEVENT")
register_calendar_properties(EVENT_PROPERTIES)
EVENT_PROPERTIES.register("dtend")(date_handler("dtend"))
EVENT_PROPERTIES.register("transp")(upper_handler("transparency"))


def _derive_dtend(
    dtstart: datetime.date, duration: datetime.timedelta | None
) -> datetime.date:
    """Return the end of an event that was written without a DTEND."""
    if duration is not None:
        return dtstart + duration
    if not isinstance(dtstart, datetime.datetime):
        return dtstart + datetime.timedelta(days=1)
    return dtstart


def _decode_event(
    component: ParsedComponent, builder: RecordBuilder, label: str, errors: list[str]
) -> Optional[Event]:
    if not builder.get("summary"):
        if not title_compat.is_default_titles_enabled():
            errors.append(f"{MISSING_SUMMARY} ({label})")
            log_rejected(component, MISSING_SUMMARY)
            return None
        builder.set("summary", UNTITLED_EVENT)
    if (dtstart := builder.get("dtstart")) is None:
        errors.append(f"{MISSING_DATES} ({label})")
        log_rejected(component, MISSING_DATES)
        return None
    if builder.get("dtend") is None:
        builder.set("dtend", _derive_dtend(dtstart, builder.get("duration")))
    if (event := validate_record(Event, builder.values, label, errors)) is None:
        log_rejected(component, "validation failed")
    return event


def parse_ics_file(content: str) -> ParseResult[Event]:
    """Parse the VEVENT records of an iCalendar document.

    Never raises for malformed content. An event missing its SUMMARY or
    DTSTART is dropped and a property that can't be parsed is left out of
    its event, each with a message in the result errors.
    """
    return parse_calendar_records(
        content, VEVENT, EVENT_PROPERTIES, _decode_event, NO_EVENTS
    )


def encode_event(
    event: Event,
    *,
    id_generator: IdGenerator | None = None,
    index: int | None = None,
) -> ParsedComponent:
    """Encode an event as a VEVENT component."""
    summary = require_summary(event, index)
    writer = PropertyWriter(VEVENT)
    add_identity(writer, event.uid, id_generator)
    add_date(writer, "dtstart", event.dtstart)
    add_date(writer, "dtend", event.dtend)
    add_text(writer, "summary", summary)

    add_text(writer, "description", event.description)
    add_text(writer, "location", event.location)
    writer.add("url", event.url)
    add_text(writer, "comment", event.comment)
    add_text(writer, "contact", event.contact)
    writer.add("status", enum_upper(event.status))
    if event.priority is not None:
        writer.add("priority", str(clamp(event.priority, PRIORITY_RANGE)))
    writer.add("class", enum_upper(event.classification))
    writer.add("transp", enum_upper(event.transparency))

    add_text_list(writer, "categories", event.categories)
    add_text_list(writer, "resources", event.resources)
    add_geo(writer, event.geo)
    writer.add_encoded("organizer", event.organizer, Organizer.encode_property)

    add_scheduling(writer, event)
    if event.dtend is None:
        add_duration(writer, event.duration)
    add_date(writer, "recurrence-id", event.recurrence_id)

    add_related_to(writer, event)
    add_sequence(writer, event.sequence)
    add_utc(writer, "created", event.created)
    add_utc(writer, "last-modified", event.last_modified)
    writer.add("color", event.color)

    add_attachments(writer, event.attachments)
    add_people(writer, event.attendees)
    add_alarms(writer, event.alarms, summary)
    add_request_status(writer, event.request_status)
    return writer.component


def generate_single_event(event: Event, *, id_generator: IdGenerator | None = None) -> str:
    """Write a single event as a bare VEVENT component.

    Raises CodecGenerateError if the event has no SUMMARY.
    """
    return encode_event(event, id_generator=id_generator).ics()


def generate_ics_file(
    events: Iterable[Event],
    *,
    calendar_name: str | None = None,
    prod_id: str | None = None,
    id_generator: IdGenerator | None = None,
) -> str:
    """Write events as an iCalendar document.

    Raises CodecGenerateError naming the index of the first event that has
    no SUMMARY. An empty list of events produces an empty string.
    """
    components = [
        encode_event(event, id_generator=id_generator, index=index)
        for index, event in enumerate(events)
    ]
    return encode_calendar(
        components, prodid_factory(EVENT_PRODID, prod_id), calendar_name
    )
