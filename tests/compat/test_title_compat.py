"""Tests for the missing title compatibility mode."""

from pimcodec.compat import title_compat
from pimcodec.event_stream import parse_ics_file
from pimcodec.todo_stream import parse_todo_file

ICS = "\n".join(
    [
        "BEGIN:VCALENDAR",
        "BEGIN:VTODO",
        "UID:task-1",
        "END:VTODO",
        "BEGIN:VEVENT",
        "UID:event-1",
        "DTSTART;VALUE=DATE:20240315",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
)


def test_missing_title() -> None:
    """Test records without a SUMMARY are dropped by default."""
    assert parse_todo_file(ICS).errors == [
        "Task missing required SUMMARY property (VTODO #1)"
    ]
    assert parse_ics_file(ICS).errors == [
        "Event missing required SUMMARY property (VEVENT #1)"
    ]


def test_default_titles() -> None:
    """Test a placeholder title is used when enabled."""
    with title_compat.enable_default_titles():
        tasks = parse_todo_file(ICS)
        events = parse_ics_file(ICS)
    assert not title_compat.is_default_titles_enabled()

    assert not tasks.errors
    assert [(task.uid, task.summary) for task in tasks.items] == [
        ("task-1", "Untitled Task")
    ]
    assert not events.errors
    assert [(event.uid, event.summary) for event in events.items] == [
        ("event-1", "Untitled Event")
    ]
