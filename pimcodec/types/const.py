"""Enumerated value sets for vCard and iCalendar properties.

Members use the wire spelling as their value. Models accept any string in
addition to these members, see `pimcodec.types.enum.OpenEnum`.
"""

# Note: These can be StrEnum in python 3.11 and higher

from __future__ import annotations

import enum

__all__ = [
    "ContactKind",
    "Gender",
    "GENDER_LABELS",
    "PhoneType",
    "EmailType",
    "AddressType",
    "UrlType",
    "CalendarType",
    "RelationType",
    "ImService",
    "KeyType",
    "TaskStatus",
    "EventStatus",
    "Classification",
    "Transparency",
    "AlarmAction",
    "AttendeeRole",
    "ParticipationStatus",
    "RelationshipType",
    "PRIORITY_VALUES",
    "REQUEST_STATUS_CODES",
]


class ContactKind(str, enum.Enum):
    """The kind of object a vCard represents (KIND)."""

    INDIVIDUAL = "individual"
    GROUP = "group"
    ORG = "org"
    LOCATION = "location"


class Gender(str, enum.Enum):
    """Sex component of the GENDER property."""

    MALE = "M"
    FEMALE = "F"
    OTHER = "O"
    NONE = "N"
    """None or not applicable."""

    UNKNOWN = "U"


GENDER_LABELS = {
    Gender.MALE: "Male",
    Gender.FEMALE: "Female",
    Gender.OTHER: "Other",
    Gender.NONE: "None/Not applicable",
    Gender.UNKNOWN: "Unknown",
}


class PhoneType(str, enum.Enum):
    """TYPE values for a TEL property."""

    HOME = "home"
    WORK = "work"
    CELL = "cell"
    FAX = "fax"
    PAGER = "pager"
    VOICE = "voice"
    TEXT = "text"
    TEXTPHONE = "textphone"
    VIDEO = "video"


class EmailType(str, enum.Enum):
    """TYPE values for an EMAIL property."""

    HOME = "home"
    WORK = "work"


class AddressType(str, enum.Enum):
    """TYPE values for an ADR property."""

    HOME = "home"
    WORK = "work"


class UrlType(str, enum.Enum):
    """TYPE values for a URL property."""

    HOME = "home"
    WORK = "work"


class CalendarType(str, enum.Enum):
    """TYPE values for FBURL, CALADRURI and CALURI properties."""

    HOME = "home"
    WORK = "work"


class RelationType(str, enum.Enum):
    """TYPE values for a RELATED property."""

    CONTACT = "contact"
    ACQUAINTANCE = "acquaintance"
    FRIEND = "friend"
    MET = "met"
    CO_WORKER = "co-worker"
    COLLEAGUE = "colleague"
    CO_RESIDENT = "co-resident"
    NEIGHBOR = "neighbor"
    CHILD = "child"
    PARENT = "parent"
    SIBLING = "sibling"
    SPOUSE = "spouse"
    KIN = "kin"
    MUSE = "muse"
    CRUSH = "crush"
    DATE = "date"
    SWEETHEART = "sweetheart"
    ME = "me"
    AGENT = "agent"
    EMERGENCY = "emergency"


class ImService(str, enum.Enum):
    """Instant messaging services, used as the IMPP uri scheme."""

    XMPP = "xmpp"
    SIP = "sip"
    AIM = "aim"
    ICQ = "icq"
    IRC = "irc"
    MSN = "msn"
    SKYPE = "skype"
    TELEGRAM = "telegram"
    WHATSAPP = "whatsapp"
    SIGNAL = "signal"
    DISCORD = "discord"
    SLACK = "slack"
    TEAMS = "teams"
    MATRIX = "matrix"
    YAHOO = "yahoo"


class KeyType(str, enum.Enum):
    """The type of public key in a KEY property."""

    PGP = "pgp"
    X509 = "x509"
    SSH = "ssh"


class TaskStatus(str, enum.Enum):
    """Status of a VTODO."""

    NEEDS_ACTION = "NEEDS-ACTION"
    """Indicates to-do needs action."""

    IN_PROCESS = "IN-PROCESS"
    """Indicates to-do is in process."""

    COMPLETED = "COMPLETED"
    """Indicates to-do was completed."""

    CANCELLED = "CANCELLED"
    """Indicates to-do was cancelled."""


class EventStatus(str, enum.Enum):
    """Status of a VEVENT."""

    TENTATIVE = "TENTATIVE"
    """Indicates event is tentative."""

    CONFIRMED = "CONFIRMED"
    """Indicates event is definite."""

    CANCELLED = "CANCELLED"
    """Indicates event was cancelled."""


class Classification(str, enum.Enum):
    """Defines the access classification for a calendar component (CLASS)."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"
    CONFIDENTIAL = "CONFIDENTIAL"


class Transparency(str, enum.Enum):
    """Whether an event consumes time on a calendar (TRANSP)."""

    OPAQUE = "OPAQUE"
    TRANSPARENT = "TRANSPARENT"


class AlarmAction(str, enum.Enum):
    """Type of action invoked when an alarm is triggered."""

    DISPLAY = "DISPLAY"
    EMAIL = "EMAIL"
    AUDIO = "AUDIO"


class AttendeeRole(str, enum.Enum):
    """Role for the calendar user."""

    CHAIR = "CHAIR"
    REQUIRED = "REQ-PARTICIPANT"
    OPTIONAL = "OPT-PARTICIPANT"
    NON_PARTICIPANT = "NON-PARTICIPANT"


class ParticipationStatus(str, enum.Enum):
    """Participation status for a calendar user."""

    NEEDS_ACTION = "NEEDS-ACTION"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    # Additional statuses for Events and Todos
    TENTATIVE = "TENTATIVE"
    DELEGATED = "DELEGATED"
    # Additional statuses for TODOs
    COMPLETED = "COMPLETED"
    IN_PROCESS = "IN-PROCESS"


class RelationshipType(str, enum.Enum):
    """Type of hierarchical relationship for RELATED-TO (RELTYPE)."""

    PARENT = "PARENT"
    CHILD = "CHILD"
    SIBLING = "SIBLING"


PRIORITY_VALUES = {
    "undefined": 0,
    "high": 1,
    "medium": 5,
    "low": 9,
}

# Request status codes have the form class.detail, where the class is 1-5
REQUEST_STATUS_CODES = {
    "pending": "1.0",
    "success": "2.0",
    "success_fallback": "2.1",
    "success_ignored": "2.2",
    "invalid_prop_name": "3.0",
    "invalid_prop_value": "3.1",
    "invalid_param": "3.2",
    "invalid_param_value": "3.3",
    "invalid_calendar_user": "3.4",
    "invalid_date_time": "3.5",
    "invalid_rule": "3.6",
    "invalid_cu_type": "3.7",
    "no_authority": "3.8",
    "unsupported_version": "3.9",
    "transp_not_supported": "3.10",
    "invalid_calendar": "3.11",
    "unknown_calendar_user": "3.12",
    "event_conflict": "4.0",
    "request_not_supported": "5.0",
    "service_unavailable": "5.1",
    "invalid_service": "5.2",
    "no_scheduling_for_user": "5.3",
}
