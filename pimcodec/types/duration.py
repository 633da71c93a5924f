"""Library for parsing and encoding DURATION values.

There are two flavors here. The `DurationEncoder` is a lossless codec
between DURATION values and `datetime.timedelta` used by the record models.

The `parse_duration` family of helpers summarize a duration as a single
value and unit for display in forms (e.g. "remind me 15 minutes before").
They only report the largest component present, so ``P1DT2H`` is reported
as one day.
"""

from __future__ import annotations

import datetime
import enum
import math
import re
from typing import NamedTuple

from pimcodec.parsing.property import ParsedProperty

__all__ = [
    "DurationEncoder",
    "DurationUnit",
    "DurationValue",
    "parse_duration",
    "format_duration",
    "format_negative_duration",
    "duration_to_minutes",
    "is_valid_duration",
]

DATE_PART = r"(\d+)D"
TIME_PART = r"T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?"
DATETIME_PART = f"(?:{DATE_PART})?(?:{TIME_PART})?"
WEEKS_PART = r"(\d+)W"
DURATION_REGEX = re.compile(f"([-+]?)P(?:{WEEKS_PART}|{DATETIME_PART})$")

# Lenient pattern used by the summary helpers, which tolerate a missing "P"
_SUMMARY_REGEX = re.compile(
    r"[-+]?P?(?:(\d+)W)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?"
)


class DurationUnit(str, enum.Enum):
    """Unit of a summarized duration."""

    DAYS = "days"
    HOURS = "hours"
    MINUTES = "minutes"
    SECONDS = "seconds"


_UNIT_MINUTES = {
    DurationUnit.DAYS: 24 * 60,
    DurationUnit.HOURS: 60,
    DurationUnit.MINUTES: 1,
}


class DurationValue(NamedTuple):
    """A duration summarized as a single value and unit."""

    value: int
    unit: DurationUnit


def parse_duration_value(value: str) -> datetime.timedelta:
    """Parse a DURATION string into a timedelta, raising ValueError if invalid."""
    value = value.strip()
    if (
        not (match := DURATION_REGEX.fullmatch(value))
        or value.lstrip("+-") in ("P", "PT")
        or value.endswith("T")
    ):
        raise ValueError(f"Expected value to match DURATION pattern: '{value}'")
    sign, weeks, days, hours, minutes, seconds = match.groups()
    result: datetime.timedelta
    if weeks:
        result = datetime.timedelta(weeks=int(weeks))
    else:
        result = datetime.timedelta(
            days=int(days or 0),
            hours=int(hours or 0),
            minutes=int(minutes or 0),
            seconds=int(seconds or 0),
        )
    if sign == "-":
        result = -result
    return result


def encode_duration_value(duration: datetime.timedelta) -> str:
    """Serialize a timedelta as a DURATION value."""
    parts = []
    if duration < datetime.timedelta(days=0):
        parts.append("-")
        duration = -duration
    parts.append("P")
    days = duration.days
    weeks = int(days / 7)
    days %= 7
    if weeks > 0 and days == 0 and duration.seconds == 0:
        parts.append(f"{weeks}W")
        return "".join(parts)
    days += weeks * 7
    if days > 0:
        parts.append(f"{days}D")
    if duration.seconds != 0 or days == 0:
        parts.append("T")
        seconds = duration.seconds
        hours = int(seconds / 3600)
        seconds %= 3600
        if hours != 0:
            parts.append(f"{hours}H")
        minutes = int(seconds / 60)
        seconds %= 60
        if minutes != 0:
            parts.append(f"{minutes}M")
        if seconds != 0 or duration.seconds == 0:
            parts.append(f"{seconds}S")
    return "".join(parts)


class DurationEncoder:
    """Class that can encode DURATION values."""

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> datetime.timedelta:
        """Parse a DURATION property into a timedelta."""
        return parse_duration_value(prop.value)

    @classmethod
    def __encode_property_value__(cls, duration: datetime.timedelta) -> str:
        """Serialize a time delta as a DURATION value."""
        return encode_duration_value(duration)


def parse_duration(value: str | None) -> DurationValue | None:
    """Summarize a duration as its largest component.

    Days take priority over hours, hours over minutes and minutes over
    seconds. Weeks are reported as days. The sign is ignored. Returns None
    for anything that isn't a duration with at least one component.
    """
    if not value or not (value := value.strip()):
        return None
    if not (match := _SUMMARY_REGEX.fullmatch(value.upper())):
        return None
    weeks, days, hours, minutes, seconds = match.groups()
    if weeks is not None or days is not None:
        return DurationValue(int(weeks or 0) * 7 + int(days or 0), DurationUnit.DAYS)
    if hours is not None:
        return DurationValue(int(hours), DurationUnit.HOURS)
    if minutes is not None:
        return DurationValue(int(minutes), DurationUnit.MINUTES)
    if seconds is not None:
        return DurationValue(int(seconds), DurationUnit.SECONDS)
    return None


def format_duration(value: int, unit: DurationUnit | str) -> str:
    """Format a positive value and unit as a DURATION, or "" if not positive."""
    if value <= 0:
        return ""
    match DurationUnit(unit):
        case DurationUnit.DAYS:
            return f"P{value}D"
        case DurationUnit.HOURS:
            return f"PT{value}H"
        case DurationUnit.MINUTES:
            return f"PT{value}M"
        case DurationUnit.SECONDS:
            return f"PT{value}S"


def format_negative_duration(value: int, unit: DurationUnit | str) -> str:
    """Format a duration before an event, e.g. for an alarm trigger."""
    if not (result := format_duration(value, unit)):
        return ""
    return f"-{result}"


def duration_to_minutes(value: str | None) -> int | None:
    """Convert a summarized duration to minutes, rounding seconds up."""
    if (duration := parse_duration(value)) is None:
        return None
    if duration.unit == DurationUnit.SECONDS:
        return math.ceil(duration.value / 60)
    return duration.value * _UNIT_MINUTES[duration.unit]


def is_valid_duration(value: str | None) -> bool:
    """Return true if the value can be summarized as a duration."""
    return parse_duration(value) is not None
