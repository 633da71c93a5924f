"""Library for parsing and encoding alarm TRIGGER values.

A trigger is either relative to the start of the parent component (a
DURATION, negative for "before") or an absolute UTC DATE-TIME.
"""

from __future__ import annotations

import datetime
import enum
from typing import NamedTuple

from pimcodec.parsing.const import PARAM_VALUE
from pimcodec.parsing.property import ParsedProperty, ParsedPropertyParameter

from .date_time import (
    DATETIME_REGEX,
    VALUE_DATE_TIME,
    DateTimeEncoder,
    parse_datetime_value,
    require_utc,
)
from .duration import (
    DurationUnit,
    encode_duration_value,
    format_duration,
    parse_duration,
    parse_duration_value,
)

__all__ = [
    "AlarmTrigger",
    "TriggerEncoder",
    "TriggerWhen",
    "format_alarm_trigger",
    "parse_alarm_trigger",
]


class TriggerWhen(str, enum.Enum):
    """When an alarm fires relative to its component."""

    BEFORE = "before"
    AFTER = "after"
    AT = "at"


class AlarmTrigger(NamedTuple):
    """A trigger summarized for display."""

    when: TriggerWhen
    value: int
    unit: DurationUnit


def parse_alarm_trigger(value: str | None) -> AlarmTrigger | None:
    """Summarize a TRIGGER value, or return None if it is not valid."""
    if not value or not (value := value.strip()):
        return None
    if DATETIME_REGEX.fullmatch(value):
        return AlarmTrigger(TriggerWhen.AT, 0, DurationUnit.MINUTES)
    if (duration := parse_duration(value)) is None:
        return None
    when = TriggerWhen.BEFORE if value.startswith("-") else TriggerWhen.AFTER
    return AlarmTrigger(when, duration.value, duration.unit)


def format_alarm_trigger(
    when: TriggerWhen | str, value: int, unit: DurationUnit | str
) -> str:
    """Format a relative trigger; absolute triggers can't be built from a duration."""
    when = TriggerWhen(when)
    if when == TriggerWhen.AT:
        return ""
    if not (result := format_duration(value, unit)):
        return ""
    return f"-{result}" if when == TriggerWhen.BEFORE else result


class TriggerEncoder:
    """Encode and decode the TRIGGER property."""

    @classmethod
    def __parse_property_value__(
        cls, prop: ParsedProperty
    ) -> datetime.timedelta | datetime.datetime:
        """Parse a TRIGGER property into a timedelta or a datetime."""
        value_type = prop.get_parameter_value(PARAM_VALUE)
        if (value_type and value_type.upper() == VALUE_DATE_TIME) or DATETIME_REGEX.fullmatch(
            prop.value.strip()
        ):
            return parse_datetime_value(prop.value)
        return parse_duration_value(prop.value)

    @classmethod
    def encode_property(
        cls, name: str, value: datetime.timedelta | datetime.datetime
    ) -> ParsedProperty:
        """Create a TRIGGER property.

        An absolute trigger must be an aware datetime and is written in UTC.
        """
        if isinstance(value, datetime.timedelta):
            return ParsedProperty(name=name, value=encode_duration_value(value))
        return ParsedProperty(
            name=name,
            value=DateTimeEncoder.__encode_property_value__(require_utc(value)),
            params=[ParsedPropertyParameter(name=PARAM_VALUE, values=[VALUE_DATE_TIME])],
        )
