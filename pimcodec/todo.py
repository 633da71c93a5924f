"""A grouping of component properties that describe a to-do."""

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
    Geo,
    Organizer,
    RelationshipType,
    RequestStatus,
    TaskStatus,
)
from .types.enum import OpenEnum

__all__ = ["Task"]


class Task(ComponentModel):
    """A calendar to-do component (VTODO)."""

    summary: str
    """A short one line title of the task."""

    uid: Optional[str] = None
    """A globally unique identifier, generated when writing if not set."""

    dtstamp: Optional[datetime.datetime] = None
    """The time the task was last written, recovered when parsing."""

    dtstart: Union[datetime.datetime, datetime.date, None] = None
    due: Union[datetime.datetime, datetime.date, None] = None

    completed: Optional[datetime.datetime] = None
    """The time the task was completed, written in UTC."""

    created: Optional[datetime.datetime] = None
    last_modified: Optional[datetime.datetime] = None

    status: Optional[OpenEnum[TaskStatus]] = None

    percent_complete: Optional[int] = None
    """Percent of the work completed, 0-100."""

    priority: Optional[int] = None
    """The priority, where 1 is highest, 9 is lowest and 0 is undefined."""

    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None
    comment: Optional[str] = None
    contact: Optional[str] = None
    classification: Optional[OpenEnum[Classification]] = None
    geo: Optional[Geo] = None
    organizer: Optional[Organizer] = None

    rrule: Optional[str] = None
    """The recurrence rule, kept as written, e.g. FREQ=WEEKLY;BYDAY=MO."""

    rdate: list[Union[datetime.datetime, datetime.date]] = Field(default_factory=list)
    exdate: list[Union[datetime.datetime, datetime.date]] = Field(default_factory=list)
    duration: Optional[datetime.timedelta] = None
    recurrence_id: Union[datetime.datetime, datetime.date, None] = None

    related_to: Optional[str] = None
    """The UID of a related component, such as the parent task."""

    relation_type: Optional[OpenEnum[RelationshipType]] = None
    sequence: Optional[int] = None

    categories: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    attendees: list[Attendee] = Field(default_factory=list)
    alarms: list[Alarm] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)
    request_status: list[RequestStatus] = Field(default_factory=list)

    color: Optional[str] = None
    """A CSS3 color name or value."""

    prod_id: Optional[str] = None
    """The product that wrote the calendar, recovered when parsing."""
