"""Tests for handling vCard and iCalendar properties and parameters."""

import pytest

from pimcodec.exceptions import CodecParseError
from pimcodec.parsing.property import ParsedProperty, ParsedPropertyParameter


@pytest.mark.parametrize(
    "line",
    [
        "PROP-VALUE",
        ";VALUE",
        ";:VALUE",
        'PROP;PARAM="unclosed:VALUE',
        "PROP;PARAM=value",
        "PROP:VALUE\x01",
    ],
)
def test_invalid_format(line: str) -> None:
    """Test parsing invalid property format."""
    with pytest.raises(CodecParseError):
        ParsedProperty.from_ics(line)


def test_parameters() -> None:
    """Test a property with multiple parameters and values."""
    prop = ParsedProperty.from_ics("TEL;VALUE=uri;TYPE=CELL,VOICE:tel:+1-555-0100")
    assert prop.name == "tel"
    assert prop.value == "tel:+1-555-0100"
    assert prop.params == [
        ParsedPropertyParameter(name="VALUE", values=["uri"]),
        ParsedPropertyParameter(name="TYPE", values=["CELL", "VOICE"]),
    ]
    assert prop.get_parameter_value("value") == "uri"
    assert prop.get_parameter_values("TYPE") == ["CELL", "VOICE"]


def test_quoted_parameter() -> None:
    """Test a quoted parameter value may contain delimiters."""
    prop = ParsedProperty.from_ics(
        'ATTENDEE;CN="Doe, Jane";ROLE=CHAIR:mailto:jane@example.com'
    )
    assert prop.get_parameter_value("CN") == "Doe, Jane"
    assert prop.value == "mailto:jane@example.com"


def test_blank_parameter() -> None:
    """Test a parameter with an empty value."""
    prop = ParsedProperty.from_ics("X-TEST;VALUE=URI;X-BLANK=:VALUE")
    assert prop.value == "VALUE"
    assert prop.params == [
        ParsedPropertyParameter(name="VALUE", values=["URI"]),
        ParsedPropertyParameter(name="X-BLANK", values=[""]),
    ]


def test_bare_parameters() -> None:
    """Test vCard 2.1 parameters without a name are read as TYPE values."""
    prop = ParsedProperty.from_ics("TEL;HOME;VOICE:555-0100")
    assert prop.get_parameter_values("TYPE") == ["HOME", "VOICE"]
    assert prop.value == "555-0100"


def test_repeated_parameter() -> None:
    """Test values of a repeated parameter are merged."""
    prop = ParsedProperty.from_ics("EMAIL;TYPE=work;TYPE=pref:a@example.com")
    assert prop.get_parameter_values("TYPE") == ["work", "pref"]
    assert prop.get_parameter_value("TYPE") == "work"


def test_group_prefix() -> None:
    """Test a vCard group prefix is separated from the name."""
    prop = ParsedProperty.from_ics("item1.EMAIL:a@example.com")
    assert prop.name == "email"
    assert prop.group == "item1"


@pytest.mark.parametrize(
    "line",
    [
        "BEGIN:VTODO",
        "begin:VTODO",
        "Begin:VTODO",
        "bEgiN:VTODO",
    ],
)
def test_mixed_case_property_name(line: str) -> None:
    """Test property name is case-insensitive."""
    prop = ParsedProperty.from_ics(line)
    assert prop.name == "begin"
    assert prop.value == "VTODO"
    assert prop.params is None


def test_value_with_colons() -> None:
    """Test only the first unquoted colon separates the value."""
    prop = ParsedProperty.from_ics("URL:https://example.com:8080/path")
    assert prop.value == "https://example.com:8080/path"


@pytest.mark.parametrize(
    ("prop", "expected"),
    [
        (ParsedProperty(name="summary", value="Example"), "SUMMARY:Example"),
        (
            ParsedProperty(
                name="attendee",
                value="mailto:jane@example.com",
                params=[ParsedPropertyParameter(name="CN", values=["Doe, Jane"])],
            ),
            'ATTENDEE;CN="Doe, Jane":mailto:jane@example.com',
        ),
        (
            ParsedProperty(
                name="email",
                value="a@example.com",
                params=[
                    ParsedPropertyParameter(name="TYPE", values=["WORK"]),
                    ParsedPropertyParameter(name="PREF", values=["1"]),
                ],
            ),
            "EMAIL;TYPE=WORK;PREF=1:a@example.com",
        ),
        (
            ParsedProperty(
                name="x-test",
                value="value",
                params=[ParsedPropertyParameter(name="X-NAME", values=['say "hi"'])],
            ),
            "X-TEST;X-NAME=say hi:value",
        ),
    ],
)
def test_encode(prop: ParsedProperty, expected: str) -> None:
    """Test encoding a property as a content line."""
    assert prop.ics() == expected
