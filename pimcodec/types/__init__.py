"""Library for parsing and encoding vCard and iCalendar value types."""

from .attachment import Attachment
from .cal_address import Attendee, Organizer
from .const import (
    AddressType,
    AlarmAction,
    AttendeeRole,
    CalendarType,
    Classification,
    ContactKind,
    EmailType,
    EventStatus,
    Gender,
    ImService,
    KeyType,
    ParticipationStatus,
    PhoneType,
    RelationshipType,
    RelationType,
    TaskStatus,
    Transparency,
    UrlType,
)
from .duration import DurationUnit, DurationValue
from .enum import OpenEnum
from .geo import Geo
from .recur import Frequency, Weekday
from .request_status import RequestStatus
from .trigger import AlarmTrigger, TriggerWhen

__all__ = [
    "AddressType",
    "AlarmAction",
    "AlarmTrigger",
    "Attachment",
    "Attendee",
    "AttendeeRole",
    "CalendarType",
    "Classification",
    "ContactKind",
    "DurationUnit",
    "DurationValue",
    "EmailType",
    "EventStatus",
    "Frequency",
    "Gender",
    "Geo",
    "ImService",
    "KeyType",
    "OpenEnum",
    "Organizer",
    "ParticipationStatus",
    "PhoneType",
    "RelationshipType",
    "RelationType",
    "RequestStatus",
    "TaskStatus",
    "Transparency",
    "TriggerWhen",
    "UrlType",
    "Weekday",
]
