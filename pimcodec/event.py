"""A grouping of component properties that describe a calendar event.

An event has a start, and an end that is either written explicitly or
derived when parsing from a DURATION or the all-day start date.
"""

from __future__ import annotations

import datetime
from typing import Optional, Union

from pydantic import Field

from .alarm import Alarm
from .component import ComponentModel
from .types import (
    Attachment,
    Attendee,
    Classification,
    EventStatus,
    Geo,
    Organizer,
    RelationshipType,
    RequestStatus,
    Transparency,
)
from .types.enum import OpenEnum

__all__ = ["Event"]


class Event(ComponentModel):
    """A single event on a calendar (VEVENT)."""

    summary: str
    """A short one line title of the event."""

    dtstart: Union[datetime.datetime, datetime.date]
    """The start of the event, a date for an all-day event."""

    dtend: Union[datetime.datetime, datetime.date, None] = None
    """The non-inclusive end of the event."""

    uid: Optional[str] = None
    dtstamp: Optional[datetime.datetime] = None
    created: Optional[datetime.datetime] = None
    last_modified: Optional[datetime.datetime] = None

    status: Optional[OpenEnum[EventStatus]] = None
    priority: Optional[int] = None
    """The priority, where 1 is highest, 9 is lowest and 0 is undefined."""

    transparency: Optional[OpenEnum[Transparency]] = None
    """Whether the event consumes time on a calendar (TRANSP)."""

    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
    comment: Optional[str] = None
    contact: Optional[str] = None
    classification: Optional[OpenEnum[Classification]] = None
    geo: Optional[Geo] = None
    organizer: Optional[Organizer] = None

    rrule: Optional[str] = None
    rdate: list[Union[datetime.datetime, datetime.date]] = Field(default_factory=list)
    exdate: list[Union[datetime.datetime, datetime.date]] = Field(default_factory=list)
    duration: Optional[datetime.timedelta] = None
    """Written only when the event has no explicit end."""

    recurrence_id: Union[datetime.datetime, datetime.date, None] = None

    related_to: Optional[str] = None
    relation_type: Optional[OpenEnum[RelationshipType]] = None
    sequence: Optional[int] = None

    categories: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    attendees: list[Attendee] = Field(default_factory=list)
    alarms: list[Alarm] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    request_status: list[RequestStatus] = Field(default_factory=list)
    color: Optional[str] = None
    prod_id: Optional[str] = None
