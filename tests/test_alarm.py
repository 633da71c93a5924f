"""Tests for VALARM components."""

import datetime

import pytest

from pimcodec.alarm import Alarm, decode_alarm, encode_alarm
from pimcodec.parsing.component import ParsedComponent
from pimcodec.parsing.property import ParsedProperty
from pimcodec.types.const import AlarmAction


def _component(*lines: str) -> ParsedComponent:
    return ParsedComponent(
        name="valarm", properties=[ParsedProperty.from_ics(line) for line in lines]
    )


def test_decode_alarm() -> None:
    """Test decoding an alarm with repetition."""
    alarm, messages = decode_alarm(
        _component(
            "ACTION:audio",
            "TRIGGER:-PT30M",
            "REPEAT:2",
            "DURATION:PT5M",
            "ATTACH;FMTTYPE=audio/basic:https://example.com/ding.au",
        )
    )
    assert not messages
    assert alarm == Alarm(
        trigger=datetime.timedelta(minutes=-30),
        action=AlarmAction.AUDIO,
        repeat=2,
        duration=datetime.timedelta(minutes=5),
        attach_uri="https://example.com/ding.au",
    )


def test_decode_alarm_skips_invalid_properties() -> None:
    """Test a property that can't be parsed is reported and skipped."""
    alarm, messages = decode_alarm(
        _component("TRIGGER:PT0S", "REPEAT:-1", "DURATION:soon", "ACTION:X-VIBRATE")
    )
    assert alarm.trigger == datetime.timedelta(0)
    assert alarm.repeat is None
    assert alarm.duration is None
    assert alarm.action == "X-VIBRATE"
    assert len(messages) == 2
    assert messages[0] == "REPEAT: REPEAT must not be negative: -1"
    assert messages[1].startswith("DURATION: ")


@pytest.mark.parametrize(
    "lines", [("ACTION:DISPLAY",), ("ACTION:DISPLAY", "TRIGGER:whenever")]
)
def test_decode_alarm_missing_trigger(lines: tuple[str, ...]) -> None:
    """Test an alarm without a usable trigger is rejected."""
    with pytest.raises(ValueError, match="TRIGGER"):
        decode_alarm(_component(*lines))


def test_encode_alarm() -> None:
    """Test the order of properties and the summary fallback."""
    alarm = Alarm(
        trigger=datetime.timedelta(days=-1),
        action=AlarmAction.EMAIL,
        summary="Reminder",
        repeat=1,
        duration=datetime.timedelta(hours=1),
    )
    assert encode_alarm(alarm, "Dentist, 3pm").ics() == (
        "BEGIN:VALARM\r\n"
        "TRIGGER:-P1D\r\n"
        "ACTION:EMAIL\r\n"
        "DESCRIPTION:Dentist\\, 3pm\r\n"
        "SUMMARY:Reminder\r\n"
        "REPEAT:1\r\n"
        "DURATION:PT1H\r\n"
        "END:VALARM\r\n"
    )


def test_encode_alarm_own_description() -> None:
    """Test the alarm description is preferred over the summary."""
    alarm = Alarm(trigger=datetime.timedelta(minutes=-5), description="Leave now")
    component = encode_alarm(alarm, "Dentist")
    assert component.get_property("description").value == "Leave now"


def test_encode_alarm_floating_trigger() -> None:
    """Test an absolute trigger must have a timezone."""
    with pytest.raises(ValueError):
        encode_alarm(Alarm(trigger=datetime.datetime(2024, 3, 4, 9, 0)))
