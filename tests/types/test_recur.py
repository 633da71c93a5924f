"""Tests for recurrence rule validation."""

import pytest

from pimcodec.parsing.property import ParsedProperty
from pimcodec.types.recur import RecurEncoder, is_valid_recur, parse_recur


@pytest.mark.parametrize(
    ("rule", "expected"),
    [
        ("FREQ=DAILY", {"FREQ": "DAILY"}),
        (
            "FREQ=WEEKLY;BYDAY=MO,WE;COUNT=10",
            {"FREQ": "WEEKLY", "BYDAY": "MO,WE", "COUNT": "10"},
        ),
        (
            "FREQ=MONTHLY;BYMONTHDAY=-1;UNTIL=20241231T235959Z",
            {"FREQ": "MONTHLY", "BYMONTHDAY": "-1", "UNTIL": "20241231T235959Z"},
        ),
        (
            "FREQ=YEARLY;BYMONTH=1,7;BYDAY=-1SU;INTERVAL=2;WKST=MO",
            {
                "FREQ": "YEARLY",
                "BYMONTH": "1,7",
                "BYDAY": "-1SU",
                "INTERVAL": "2",
                "WKST": "MO",
            },
        ),
        ("freq=daily;until=20240601", {"FREQ": "DAILY", "UNTIL": "20240601"}),
        ("INTERVAL=3;FREQ=HOURLY", {"INTERVAL": "3", "FREQ": "HOURLY"}),
    ],
)
def test_parse_recur(rule: str, expected: dict[str, str]) -> None:
    """Test valid recurrence rules."""
    assert parse_recur(rule) == expected
    assert is_valid_recur(rule)


@pytest.mark.parametrize(
    "rule",
    [
        "",
        "COUNT=10",
        "FREQ=FORTNIGHTLY",
        "FREQ=DAILY;COUNT=5;UNTIL=20240601",
        "FREQ=DAILY;INTERVAL=0",
        "FREQ=DAILY;FREQ=WEEKLY",
        "FREQ=MONTHLY;BYMONTHDAY=32",
        "FREQ=YEARLY;BYMONTH=13",
        "FREQ=YEARLY;BYMONTH=-1",
        "FREQ=WEEKLY;BYDAY=XX",
        "FREQ=DAILY; COUNT=5",
        "FREQ=DAILY;",
        "FREQ=DAILY;BYFOO=1",
    ],
)
def test_parse_recur_invalid(rule: str) -> None:
    """Test invalid recurrence rules."""
    with pytest.raises(ValueError):
        parse_recur(rule)
    assert not is_valid_recur(rule)


def test_is_valid_recur_none() -> None:
    """Test a missing rule is not valid."""
    assert not is_valid_recur(None)


def test_encoder_keeps_text() -> None:
    """Test the rule is kept exactly as written."""
    prop = ParsedProperty(name="rrule", value="FREQ=weekly;BYDAY=mo")
    assert RecurEncoder.__parse_property_value__(prop) == "FREQ=weekly;BYDAY=mo"
    assert RecurEncoder.__encode_property_value__(" FREQ=DAILY ") == "FREQ=DAILY"
    with pytest.raises(ValueError):
        RecurEncoder.__encode_property_value__("FREQ=NEVER")
