"""Validation of recurrence rules for calendar components.

Recurrence rules are not expanded by this library. A rule is kept as the
exact text written by the producer, and this module only checks that the
text follows the RECUR value grammar so that a corrupt rule is reported as
an error instead of being passed along.

The grammar is defined using pyparsing:

```python
from pimcodec.types.recur import parse_recur

parts = parse_recur("FREQ=WEEKLY;BYDAY=MO,WE;COUNT=10")
print(parts)
```

The above example will output:
```
{'FREQ': 'WEEKLY', 'BYDAY': 'MO,WE', 'COUNT': '10'}
```
"""

from __future__ import annotations

import enum
import functools
import logging
import re

from pyparsing import (
    Combine,
    Group,
    Literal,
    MatchFirst,
    ParseException,
    ParserElement,
    Regex,
    Suppress,
    ZeroOrMore,
    one_of,
)

from pimcodec.parsing.property import ParsedProperty

__all__ = [
    "Frequency",
    "Weekday",
    "RecurEncoder",
    "parse_recur",
    "is_valid_recur",
]

_LOGGER = logging.getLogger(__name__)


# Note: This can be StrEnum in python 3.11 and higher
class Frequency(str, enum.Enum):
    """Type of recurrence rule."""

    SECONDLY = "SECONDLY"
    MINUTELY = "MINUTELY"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Weekday(str, enum.Enum):
    """Corresponds to a day of the week."""

    SUNDAY = "SU"
    MONDAY = "MO"
    TUESDAY = "TU"
    WEDNESDAY = "WE"
    THURSDAY = "TH"
    FRIDAY = "FR"
    SATURDAY = "SA"


FREQ = "FREQ"
UNTIL = "UNTIL"
COUNT = "COUNT"
INTERVAL = "INTERVAL"
BYDAY = "BYDAY"
WKST = "WKST"

# Allowed (minimum, maximum, signed) for each numeric list part
NUMERIC_PARTS = {
    "BYSECOND": (0, 60, False),
    "BYMINUTE": (0, 59, False),
    "BYHOUR": (0, 23, False),
    "BYMONTHDAY": (1, 31, True),
    "BYYEARDAY": (1, 366, True),
    "BYWEEKNO": (1, 53, True),
    "BYMONTH": (1, 12, False),
    "BYSETPOS": (1, 366, True),
}

_WHITESPACE_RE = re.compile(r"\s")
_WEEKDAYNUM_RE = re.compile(r"([-+]?)([0-9]*)([A-Z]{2})")


def _number_list() -> ParserElement:
    number = Regex(r"[-+]?[0-9]{1,3}")
    return Combine(number + ZeroOrMore("," + number))


@functools.cache
def create_parser() -> ParserElement:
    """Create the RECUR value parser."""
    freq = one_of([freq.value for freq in Frequency])
    weekday = one_of([weekday.value for weekday in Weekday])
    weekdaynum = Combine(Regex(r"[-+]?[0-9]{1,2}") + weekday) | weekday
    enddate = Regex(r"[0-9]{8}(T[0-9]{6}Z?)?")
    digits = Regex(r"[0-9]+")

    parts: list[ParserElement] = [
        Group(Literal(FREQ) + Suppress("=") + freq),
        Group(Literal(UNTIL) + Suppress("=") + enddate),
        Group(Literal(COUNT) + Suppress("=") + digits),
        Group(Literal(INTERVAL) + Suppress("=") + digits),
        Group(
            Literal(BYDAY) + Suppress("=") + Combine(weekdaynum + ZeroOrMore("," + weekdaynum))
        ),
        Group(Literal(WKST) + Suppress("=") + weekday),
    ]
    # Longer names first so BYMONTHDAY is not read as BYMONTH
    for name in sorted(NUMERIC_PARTS, key=len, reverse=True):
        parts.append(Group(Literal(name) + Suppress("=") + _number_list()))

    rule_part = MatchFirst(parts)
    return rule_part + ZeroOrMore(Suppress(";") + rule_part)


def _check_numeric_part(name: str, value: str) -> None:
    minimum, maximum, signed = NUMERIC_PARTS[name]
    for item in value.split(","):
        if not signed and item[0] in "+-":
            raise ValueError(f"Recurrence rule {name} does not allow a sign: {value}")
        if not minimum <= abs(int(item)) <= maximum:
            raise ValueError(
                f"Recurrence rule {name} value {item} not in range "
                f"{minimum}-{maximum}"
            )


def _check_byday(value: str) -> None:
    for item in value.split(","):
        if not (match := _WEEKDAYNUM_RE.fullmatch(item)):
            raise ValueError(f"Recurrence rule BYDAY has invalid value: {item}")
        if (occurrence := match.group(2)) and not 1 <= int(occurrence) <= 53:
            raise ValueError(f"Recurrence rule BYDAY occurrence out of range: {item}")


def parse_recur(value: str) -> dict[str, str]:
    """Parse a recurrence rule into its parts, raising ValueError if invalid.

    Names are returned upper case in the order written. The values are not
    interpreted beyond checking their syntax and ranges.
    """
    value = value.strip()
    if not value or _WHITESPACE_RE.search(value):
        raise ValueError(f"Recurrence rule had unexpected format: '{value}'")
    try:
        tokens = create_parser().parse_string(value.upper(), parse_all=True)
    except ParseException as err:
        raise ValueError(f"Recurrence rule is not valid: '{value}': {err}") from err

    result: dict[str, str] = {}
    for name, part_value in tokens:
        if name in result:
            raise ValueError(f"Recurrence rule has repeated part {name}: '{value}'")
        result[name] = part_value
    if FREQ not in result:
        raise ValueError(f"Recurrence rule is missing FREQ: '{value}'")
    if UNTIL in result and COUNT in result:
        raise ValueError(f"Recurrence rule may not have both UNTIL and COUNT: '{value}'")
    if INTERVAL in result and int(result[INTERVAL]) < 1:
        raise ValueError(f"Recurrence rule INTERVAL must be positive: '{value}'")
    for name, part_value in result.items():
        if name in NUMERIC_PARTS:
            _check_numeric_part(name, part_value)
        elif name == BYDAY:
            _check_byday(part_value)
    return result


def is_valid_recur(value: str | None) -> bool:
    """Return true if the value is a syntactically valid recurrence rule."""
    if not value:
        return False
    try:
        parse_recur(value)
    except ValueError as err:
        _LOGGER.debug("Invalid recurrence rule: %s", err)
        return False
    return True


class RecurEncoder:
    """Encode and decode the RRULE property.

    The rule is checked and then kept as written.
    """

    @classmethod
    def __parse_property_value__(cls, prop: ParsedProperty) -> str:
        """Validate a recurrence rule, returning the original text."""
        parse_recur(prop.value)
        return prop.value.strip()

    @classmethod
    def __encode_property_value__(cls, value: str) -> str:
        """Validate a recurrence rule before writing it."""
        parse_recur(value)
        return value.strip()
