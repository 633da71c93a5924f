"""Library for parsing and encoding iCalendar DATE and DATE-TIME values.

Aware datetimes are always written in UTC so that no VTIMEZONE definition
is needed in the output. Naive datetimes are written as floating local
time, and dates carry a VALUE=DATE parameter.
"""

from __future__ import annotations

import datetime
import logging
import re
import zoneinfo

from pimcodec.compat import timezone_compat
from pimcodec.exceptions import ParameterValueError
from pimcodec.parsing.const import PARAM_VALUE
from pimcodec.parsing.property import ParsedProperty, ParsedPropertyParameter

_LOGGER = logging.getLogger(__name__)

DATETIME_REGEX = re.compile(r"^([0-9]{8})T([0-9]{6})(Z)?$")
DATE_REGEX = re.compile(r"^([0-9]{8})$")
TZID = "TZID"
VALUE_DATE = "DATE"
VALUE_DATE_TIME = "DATE-TIME"
VALUE_PERIOD = "PERIOD"


def _parse_timezone(tzid: str) -> datetime.tzinfo | None:
    """Resolve a TZID parameter to a timezone."""
    try:
        return zoneinfo.ZoneInfo(tzid)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as err:
        if timezone_compat.is_allow_invalid_timezones_enabled():
            _LOGGER.debug("Treating unknown TZID '%s' as floating time", tzid)
            return None
        raise ParameterValueError(
            f"Expected DATE-TIME TZID value '{tzid}' to be valid timezone"
        ) from err


def parse_datetime_value(
    value: str, tzid: str | None = None
) -> datetime.datetime:
    """Parse a DATE-TIME string, applying the optional TZID."""
    if not (match := DATETIME_REGEX.fullmatch(value.strip())):
        raise ValueError(f"Expected value to match DATE-TIME pattern: '{value}'")

    timezone: datetime.tzinfo | None = None
    if match.group(3):  # Example: 19980119T070000Z
        timezone = datetime.timezone.utc
    elif tzid:  # Example: TZID=America/New_York:19980119T020000
        timezone = _parse_timezone(tzid)

    date_value = match.group(1)
    time_value = match.group(2)
    return datetime.datetime(
        int(date_value[0:4]),
        int(date_value[4:6]),
        int(date_value[6:]),
        int(time_value[0:2]),
        int(time_value[2:4]),
        int(time_value[4:6]),
        tzinfo=timezone,
    )


def parse_date_value(value: str) -> datetime.date:
    """Parse a DATE string."""
    if not (match := DATE_REGEX.fullmatch(value.strip())):
        raise ValueError(f"Expected value to match DATE pattern: '{value}'")
    date_value = match.group(1)
    return datetime.date(
        int(date_value[0:4]), int(date_value[4:6]), int(date_value[6:])
    )


def _parse_one(value: str, value_type: str | None, tzid: str | None) -> datetime.date:
    if value_type == VALUE_DATE or (value_type is None and DATE_REGEX.fullmatch(value)):
        return parse_date_value(value)
    return parse_datetime_value(value, tzid)


class DateTimeEncoder:
    """Encode and decode a DATE or DATE-TIME property."""

    @classmethod
    def __parse_property_value__(
        cls, prop: ParsedProperty
    ) -> datetime.datetime | datetime.date:
        """Parse a property into a date or datetime."""
        value_type = prop.get_parameter_value(PARAM_VALUE)
        return _parse_one(
            prop.value, value_type.upper() if value_type else None,
            prop.get_parameter_value(TZID),
        )

    @classmethod
    def __parse_property_values__(
        cls, prop: ParsedProperty
    ) -> list[datetime.datetime | datetime.date]:
        """Parse a comma separated list of dates or datetimes (RDATE, EXDATE)."""
        value_type = prop.get_parameter_value(PARAM_VALUE)
        if value_type and value_type.upper() == VALUE_PERIOD:
            raise ValueError("PERIOD values are not supported")
        tzid = prop.get_parameter_value(TZID)
        return [
            _parse_one(value, value_type.upper() if value_type else None, tzid)
            for value in prop.value.split(",")
            if value.strip()
        ]

    @classmethod
    def __encode_property_value__(
        cls, value: datetime.datetime | datetime.date
    ) -> str:
        """Serialize a date or datetime as a property value."""
        if not isinstance(value, datetime.datetime):
            return value.strftime("%Y%m%d")
        if value.tzinfo is None:
            return value.strftime("%Y%m%dT%H%M%S")
        return value.astimezone(datetime.timezone.utc).strftime("%Y%m%dT%H%M%SZ")

    @classmethod
    def __encode_property_params__(
        cls, value: datetime.datetime | datetime.date
    ) -> list[ParsedPropertyParameter]:
        """Return the parameters needed to interpret the encoded value."""
        if not isinstance(value, datetime.datetime):
            return [ParsedPropertyParameter(name=PARAM_VALUE, values=[VALUE_DATE])]
        return []

    @classmethod
    def encode_property(
        cls, name: str, value: datetime.datetime | datetime.date
    ) -> ParsedProperty:
        """Create a property for a single date or datetime."""
        return ParsedProperty(
            name=name,
            value=cls.__encode_property_value__(value),
            params=cls.__encode_property_params__(value) or None,
        )

    @classmethod
    def encode_list_properties(
        cls, name: str, values: list[datetime.datetime | datetime.date]
    ) -> list[ParsedProperty]:
        """Create properties for a list of dates, one line per value type.

        A single property can only hold values of one type, so dates and
        datetimes are written as separate lines.
        """
        dates = [value for value in values if not isinstance(value, datetime.datetime)]
        datetimes = [value for value in values if isinstance(value, datetime.datetime)]
        result = []
        for group in (datetimes, dates):
            if not group:
                continue
            result.append(
                ParsedProperty(
                    name=name,
                    value=",".join(cls.__encode_property_value__(v) for v in group),
                    params=cls.__encode_property_params__(group[0]) or None,
                )
            )
        return result


def require_utc(value: datetime.datetime | datetime.date) -> datetime.datetime:
    """Return a UTC datetime for properties that must be written in UTC.

    DTSTAMP, CREATED, LAST-MODIFIED and COMPLETED must be UTC date-times.
    """
    if not isinstance(value, datetime.datetime):
        raise ValueError(f"Expected a UTC date-time, got date {value}")
    if value.tzinfo is None:
        raise ValueError(f"Expected a UTC date-time, got floating time {value}")
    return value.astimezone(datetime.timezone.utc)
