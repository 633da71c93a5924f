"""Library for formatting and parsing dates and timestamps.

These helpers are total: parsers return None for malformed input rather
than raising, so callers can decide whether a bad value is an error.
"""

from __future__ import annotations

import datetime
import re

from dateutil import parser as dateutil_parser

from pimcodec.util import NO_YEAR

__all__ = [
    "format_vcard_date",
    "parse_vcard_date",
    "format_vcard_timestamp",
    "parse_vcard_timestamp",
    "format_date_to_ics",
    "format_date_only_to_ics",
    "parse_date_from_ics",
    "is_valid_ics_date",
]

_VCARD_DATE_RE = re.compile(
    r"(?P<year>\d{4})-?(?P<month>\d{2})-?(?P<day>\d{2})(?:T.*)?"
)
_VCARD_NO_YEAR_RE = re.compile(r"--(?P<month>\d{2})-?(?P<day>\d{2})")
_ICS_DATE_TIME_RE = re.compile(r"\d{8}T\d{6}Z")
_ICS_DATE_RE = re.compile(r"\d{8}")

ICS_DATE_TIME_FMT = "%Y%m%dT%H%M%SZ"
ICS_DATE_FMT = "%Y%m%d"


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    """Convert to UTC, treating a naive value as already being UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


def format_vcard_date(value: datetime.date) -> str:
    """Format a BDAY or ANNIVERSARY date.

    A date in the sentinel year used for unknown years is written in the
    truncated ``--MMDD`` form.
    """
    if value.year == NO_YEAR:
        return f"--{value.month:02d}{value.day:02d}"
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def parse_vcard_date(value: str | None) -> datetime.date | None:
    """Parse a vCard date (YYYYMMDD, YYYY-MM-DD or --MMDD)."""
    if not value or not (value := value.strip()):
        return None
    if match := _VCARD_NO_YEAR_RE.fullmatch(value):
        year = NO_YEAR
    elif not (match := _VCARD_DATE_RE.fullmatch(value)):
        return None
    else:
        year = int(match.group("year"))
    try:
        return datetime.date(year, int(match.group("month")), int(match.group("day")))
    except ValueError:
        return None


def format_vcard_timestamp(value: datetime.datetime) -> str:
    """Format a REV timestamp as YYYY-MM-DDTHH:MM:SSZ."""
    return _as_utc(value).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_vcard_timestamp(value: str | None) -> datetime.datetime | None:
    """Parse a REV timestamp in ISO 8601 basic or extended format."""
    if not value or not (value := value.strip()):
        return None
    try:
        result = dateutil_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None
    if result.tzinfo is None:
        return result.replace(tzinfo=datetime.UTC)
    return result


def format_date_to_ics(value: datetime.datetime) -> str:
    """Format a timestamp as a UTC iCalendar DATE-TIME."""
    return _as_utc(value).strftime(ICS_DATE_TIME_FMT)


def format_date_only_to_ics(value: datetime.date) -> str:
    """Format a date as an iCalendar DATE."""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def parse_date_from_ics(
    value: str | None,
) -> datetime.datetime | datetime.date | None:
    """Parse a UTC DATE-TIME (YYYYMMDDTHHMMSSZ) or a DATE (YYYYMMDD)."""
    if not value or not (value := value.strip()):
        return None
    try:
        if _ICS_DATE_TIME_RE.fullmatch(value):
            return datetime.datetime.strptime(value, ICS_DATE_TIME_FMT).replace(
                tzinfo=datetime.UTC
            )
        if _ICS_DATE_RE.fullmatch(value):
            return datetime.datetime.strptime(value, ICS_DATE_FMT).date()
    except ValueError:
        return None
    return None


def is_valid_ics_date(value: str | None) -> bool:
    """Return true if the value is a UTC DATE-TIME or a DATE."""
    return parse_date_from_ics(value) is not None
