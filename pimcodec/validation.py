"""Checks applied to records above the codec.

The codec accepts anything the record models accept and never calls these
on its own. Applications use them to enforce storage limits on user input
and to keep at most one preferred entry in each contact method group.
"""

from __future__ import annotations

from collections.abc import Generator
import logging
import re
from typing import Any, TypeVar

from pydantic import BaseModel

from .contact import Contact
from .event import Event
from .todo import Task

__all__ = [
    "FIELD_LIMITS",
    "check_field_limits",
    "is_valid_language_tag",
    "is_valid_request_status_code",
    "normalize_primary",
    "primary_violations",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

LANGUAGE_TAG_RE = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z]{2,4})?$")
REQUEST_STATUS_CODE_RE = re.compile(r"^[1-5]\.\d+$")

URL_LIMIT = 2083

# Maximum lengths of string fields. A dotted path addresses a field of each
# entry in a list or of a nested model.
CONTACT_LIMITS = {
    "formatted_name": 255,
    "family_name": 100,
    "given_name": 100,
    "additional_name": 100,
    "name_prefix": 50,
    "name_suffix": 50,
    "nickname": 100,
    "emails.email": 254,
    "phones.number": 50,
    "im_handles.handle": 100,
    "languages.tag": 35,
    "addresses.po_box": 100,
    "addresses.extended_address": 200,
    "addresses.street_address": 500,
    "addresses.locality": 100,
    "addresses.region": 100,
    "addresses.postal_code": 20,
    "addresses.country": 100,
    "organization": 255,
    "title": 100,
    "role": 100,
    "members": 255,
    "url": URL_LIMIT,
    "photo_url": URL_LIMIT,
    "logo_url": URL_LIMIT,
    "sound_url": URL_LIMIT,
    "source_url": URL_LIMIT,
    "uid": 255,
    "fb_urls.uri": URL_LIMIT,
    "cal_adr_uris.uri": URL_LIMIT,
    "cal_uris.uri": URL_LIMIT,
    "keys.value": 10000,
    "keys.uri": URL_LIMIT,
    "note": 10000,
    "categories": 100,
    "timezone": 50,
    "xml": 50000,
    "relations.related_name": 200,
    "client_pid_map": 100,
}

TASK_LIMITS = {
    "summary": 255,
    "location": 500,
    "description": 10000,
    "url": URL_LIMIT,
    "uid": 255,
    "organizer.name": 200,
    "organizer.email": 200,
    "attendees.name": 200,
    "attendees.email": 200,
    "alarms.summary": 255,
    "alarms.description": 1000,
    "alarms.attach_uri": URL_LIMIT,
    "rrule": 500,
    "categories": 100,
    "resources": 100,
    "comment": 1000,
    "contact": 500,
    "related_to": 500,
    "attachments.uri": URL_LIMIT,
    "attachments.filename": 255,
    "request_status.description": 1000,
    "color": 7,
}

EVENT_LIMITS = dict(TASK_LIMITS)

FIELD_LIMITS: dict[str, dict[str, int]] = {
    "contact": CONTACT_LIMITS,
    "task": TASK_LIMITS,
    "event": EVENT_LIMITS,
}

# Contact method groups where one entry may be marked as preferred
PRIMARY_GROUPS = (
    "emails",
    "phones",
    "addresses",
    "languages",
    "fb_urls",
    "cal_adr_uris",
    "cal_uris",
)


def _limits(record: BaseModel) -> dict[str, int]:
    if isinstance(record, Contact):
        return CONTACT_LIMITS
    if isinstance(record, Task):
        return TASK_LIMITS
    if isinstance(record, Event):
        return EVENT_LIMITS
    raise TypeError(f"No field limits for {type(record).__name__}")


def _walk(value: Any, parts: list[str], label: str) -> Generator[tuple[str, Any]]:
    """Yield the values at a dotted path, labeled with their position."""
    if isinstance(value, list):
        for index, item in enumerate(value):
            yield from _walk(item, parts, f"{label}[{index}]")
        return
    if not parts:
        yield label, value
        return
    if value is None:
        return
    name, *rest = parts
    yield from _walk(getattr(value, name, None), rest, f"{label}.{name}" if label else name)


def check_field_limits(record: BaseModel) -> list[str]:
    """Return a message for each string field longer than its limit."""
    messages = []
    for path, limit in _limits(record).items():
        for label, value in _walk(record, path.split("."), ""):
            if isinstance(value, str) and len(value) > limit:
                messages.append(f"{label} exceeds {limit} characters")
    return messages


def is_valid_language_tag(value: str | None) -> bool:
    """Return true for a simple BCP 47 language tag such as en or fr-CA."""
    return bool(value) and LANGUAGE_TAG_RE.match(value) is not None


def is_valid_request_status_code(value: str | None) -> bool:
    """Return true for a REQUEST-STATUS code such as 2.0 or 3.11."""
    return bool(value) and REQUEST_STATUS_CODE_RE.match(value) is not None


def primary_violations(record: BaseModel) -> list[str]:
    """Return a message for each group with more than one preferred entry."""
    messages = []
    for group in PRIMARY_GROUPS:
        entries = getattr(record, group, None) or []
        if (count := sum(1 for entry in entries if entry.is_primary)) > 1:
            messages.append(f"{group} has {count} entries marked primary")
    return messages


def normalize_primary(record: T) -> T:
    """Return the record with only the first preferred entry of each group kept."""
    update = {}
    for group in PRIMARY_GROUPS:
        if (entries := getattr(record, group, None)) is None:
            continue
        seen = False
        normalized = []
        for entry in entries:
            if entry.is_primary and seen:
                entry = entry.model_copy(update={"is_primary": False})
            seen = seen or entry.is_primary
            normalized.append(entry)
        if normalized != entries:
            _LOGGER.debug("Demoted extra primary entries in %s", group)
            update[group] = normalized
    if not update:
        return record
    return record.model_copy(update=update)
