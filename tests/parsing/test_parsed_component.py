"""Tests for scanning documents into records."""

import pytest

from pimcodec.parsing.component import (
    ParsedComponent,
    encode_content,
    fold_line,
    parse_records,
    unfold_lines,
)
from pimcodec.parsing.property import ParsedProperty


def test_parse_records() -> None:
    """Test records are split out of a document with nested components."""
    content = "\r\n".join(
        [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            "BEGIN:VTODO",
            "SUMMARY:First",
            "BEGIN:VALARM",
            "TRIGGER:-PT15M",
            "END:VALARM",
            "END:VTODO",
            "BEGIN:VTODO",
            "SUMMARY:Second",
            "END:VTODO",
            "END:VCALENDAR",
        ]
    )
    result = parse_records(content, "VTODO")
    assert not result.errors
    assert len(result.components) == 2

    first = result.components[0]
    assert first.name == "vtodo"
    assert first.index == 1
    assert first.properties == [ParsedProperty(name="summary", value="First")]
    assert len(first.components) == 1
    assert first.components[0].name == "valarm"
    assert first.components[0].get_property("trigger").value == "-PT15M"

    assert result.components[1].index == 2
    assert result.components[1].get_property("SUMMARY").value == "Second"


def test_lines_outside_records_skipped() -> None:
    """Test lines outside of a record of the requested kind are ignored."""
    content = "\n".join(
        [
            "BEGIN:VCALENDAR",
            "BEGIN:VTIMEZONE",
            "TZID:America/New_York",
            "END:VTIMEZONE",
            "not a content line",
            "BEGIN:VEVENT",
            "SUMMARY:Event",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
    )
    result = parse_records(content, "vtodo")
    assert not result.components
    assert not result.errors


def test_missing_end_at_next_begin() -> None:
    """Test a record without an END is discarded when the next one begins."""
    content = "\n".join(
        [
            "BEGIN:VCARD",
            "FN:Broken",
            "BEGIN:VCARD",
            "FN:Valid",
            "END:VCARD",
        ]
    )
    result = parse_records(content, "vcard")
    assert len(result.components) == 1
    assert result.components[0].get_property("fn").value == "Valid"
    assert result.components[0].index == 2
    assert result.errors == [
        "VCARD record #1 has no matching END:VCARD; record discarded"
    ]


def test_missing_end_at_end_of_input() -> None:
    """Test a record without an END at the end of the document."""
    content = "BEGIN:VCARD\nFN:Valid\nEND:VCARD\nBEGIN:VCARD\nFN:Truncated\n"
    result = parse_records(content, "vcard")
    assert len(result.components) == 1
    assert len(result.errors) == 1
    assert "#2" in result.errors[0]


def test_stray_end() -> None:
    """Test an END that matches nothing open is reported and ignored."""
    content = "BEGIN:VCARD\nFN:Valid\nEND:VALARM\nEND:VCARD\n"
    result = parse_records(content, "vcard")
    assert len(result.components) == 1
    assert result.errors == ["Unexpected END:VALARM in VCARD record #1; line ignored"]


def test_unclosed_nested_component() -> None:
    """Test a nested component without an END is closed with its record."""
    content = "\n".join(
        [
            "BEGIN:VTODO",
            "SUMMARY:Task",
            "BEGIN:VALARM",
            "TRIGGER:-PT5M",
            "END:VTODO",
        ]
    )
    result = parse_records(content, "vtodo")
    assert len(result.components) == 1
    assert result.components[0].components[0].name == "valarm"
    assert len(result.errors) == 1
    assert "VALARM" in result.errors[0]


def test_invalid_line_in_record() -> None:
    """Test a line that can't be tokenized is skipped with an error."""
    content = "BEGIN:VCARD\nFN:Valid\nthis is not a property\nEND:VCARD\n"
    result = parse_records(content, "vcard")
    assert len(result.components) == 1
    assert result.components[0].properties == [ParsedProperty(name="fn", value="Valid")]
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Failed to parse line in VCARD record #1")


def test_encode_content() -> None:
    """Test encoding components as CRLF terminated text."""
    component = ParsedComponent(
        name="vtodo",
        properties=[ParsedProperty(name="summary", value="Task")],
        components=[
            ParsedComponent(
                name="valarm", properties=[ParsedProperty(name="trigger", value="-PT5M")]
            )
        ],
    )
    assert encode_content([component]) == (
        "BEGIN:VTODO\r\n"
        "SUMMARY:Task\r\n"
        "BEGIN:VALARM\r\n"
        "TRIGGER:-PT5M\r\n"
        "END:VALARM\r\n"
        "END:VTODO\r\n"
    )


def test_fold_line() -> None:
    """Test folding a long line."""
    line = "NOTE:" + "x" * 100
    folded = fold_line(line)
    physical = folded.split("\r\n")
    assert len(physical) == 2
    assert len(physical[0]) == 75
    assert physical[1].startswith(" ")
    assert len(physical[1]) == 31
    assert unfold_lines(folded) == line


def test_fold_short_line() -> None:
    """Test a line that fits is unchanged."""
    assert fold_line("SUMMARY:Short") == "SUMMARY:Short"
    assert fold_line("") == ""


@pytest.mark.parametrize(
    "text",
    [
        "a" * 1000,
        "日本語のテキスト" * 50,
        "🎄 emoji " * 40,
        "ÄÖÜ äöü ß" * 30,
        "x",
    ],
)
def test_fold_multibyte(text: str) -> None:
    """Test folding by octets never splits a character."""
    line = f"NOTE:{text}"
    folded = fold_line(line)
    for physical in folded.split("\r\n"):
        assert len(physical.encode("utf-8")) <= 75
    assert unfold_lines(folded) == line


def test_unfold_tab() -> None:
    """Test a continuation line may start with a tab."""
    assert unfold_lines("DESCRIPTION:one\r\n\ttwo\n three") == "DESCRIPTION:onetwothree"
