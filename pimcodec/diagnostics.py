"""Library for diagnostics or debugging information about vCard and iCalendar content.

Contacts and calendars are full of personal information, so content is
redacted before it is written to a log. Only the properties that describe
the structure of a record are kept.
"""

from __future__ import annotations

from collections.abc import Generator
import itertools

from .parsing.component import unfolded_lines

__all__ = [
    "redact_content",
]


PROPERTY_ALLOWLIST = {
    "BEGIN",
    "END",
    "VERSION",
    "PRODID",
    "DTSTAMP",
    "REV",
    "DTSTART",
    "DTEND",
    "DUE",
    "RRULE",
    "STATUS",
}
REDACT = "***"
MAX_CONTENTLINES = 5000


def property_sep(contentline: str) -> int:
    """Return the index of the end of the property name in the line."""
    colon = contentline.find(":")
    semi = contentline.find(";")
    if colon > -1 and semi > -1:
        return min(colon, semi)
    if colon > -1:
        return colon
    return semi


def redact_contentline(contentline: str, property_allowlist: set[str]) -> str:
    """Return a redacted version of a content line."""
    if (i := property_sep(contentline)) > 0:
        name = contentline[0:i]
        if name.upper() in property_allowlist:
            return contentline
        return f"{name}:{REDACT}"
    return REDACT


def redact_content(
    content: str,
    max_contentlines: int = MAX_CONTENTLINES,
    property_allowlist: set[str] | None = None,
) -> Generator[str, None, None]:
    """Generate redacted content one unfolded line at a time."""
    lines = (line for line in unfolded_lines(content) if line)
    for contentline in itertools.islice(lines, max_contentlines):
        yield redact_contentline(contentline, property_allowlist or PROPERTY_ALLOWLIST)
