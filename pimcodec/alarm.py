"""Alarm information for calendar components."""

from __future__ import annotations

import datetime
import logging
from typing import Optional, Union

from pydantic import Field

from .component import ComponentModel, PropertyRegistry, PropertyWriter, RecordBuilder
from .parsing.component import ParsedComponent
from .parsing.property import ParsedProperty
from .types.const import AlarmAction
from .types.duration import DurationEncoder
from .types.enum import OpenEnum
from .types.text import TextEncoder
from .types.trigger import TriggerEncoder

__all__ = [
    "Alarm",
    "decode_alarm",
    "encode_alarm",
]

_LOGGER = logging.getLogger(__name__)

VALARM = "valarm"


class Alarm(ComponentModel):
    """An alarm component for a calendar.

    The action (e.g. AUDIO, DISPLAY, EMAIL) determines which of the
    other properties are meaningful.
    """

    trigger: Union[datetime.timedelta, datetime.datetime]
    """May be either a relative time or absolute time.

    A negative relative time fires before the start of the component.
    """

    action: OpenEnum[AlarmAction] = AlarmAction.DISPLAY
    """Action to be taken when the alarm is triggered."""

    summary: Optional[str] = None
    """A summary, used as the subject for EMAIL actions."""

    description: Optional[str] = None
    """The notification text or email body.

    When not set, DISPLAY and EMAIL alarms are written with the summary of
    the parent component.
    """

    duration: Optional[datetime.timedelta] = None
    """Delay between repetitions of the alarm."""

    repeat: Optional[int] = Field(default=None, ge=0)
    """The number of additional times the alarm is repeated."""

    attach_uri: Optional[str] = None
    """A sound resource for AUDIO actions."""


ALARM_PROPERTIES = PropertyRegistry("VALARM")


@ALARM_PROPERTIES.register("trigger")
def _trigger(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.set("trigger", TriggerEncoder.__parse_property_value__(prop))


@ALARM_PROPERTIES.register("action")
def _action(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if value := prop.value.strip().upper():
        builder.set("action", value)


@ALARM_PROPERTIES.register("summary", "description")
def _text(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.set(prop.name, TextEncoder.__parse_property_value__(prop))


@ALARM_PROPERTIES.register("duration")
def _duration(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.set("duration", DurationEncoder.__parse_property_value__(prop))


@ALARM_PROPERTIES.register("repeat")
def _repeat(prop: ParsedProperty, builder: RecordBuilder) -> None:
    value = int(prop.value.strip())
    if value < 0:
        raise ValueError(f"REPEAT must not be negative: {value}")
    builder.set("repeat", value)


@ALARM_PROPERTIES.register("attach")
def _attach(prop: ParsedProperty, builder: RecordBuilder) -> None:
    if value := prop.value.strip():
        builder.set("attach_uri", value)


def decode_alarm(component: ParsedComponent) -> tuple[Alarm, list[str]]:
    """Decode a VALARM component.

    Returns the alarm and messages for any properties that were skipped.
    Raises ValueError when the alarm has no usable TRIGGER.
    """
    builder, errors = ALARM_PROPERTIES.decode(component)
    messages = [f"{error.name.upper()}: {error.message}" for error in errors]
    if builder.get("trigger") is None:
        raise ValueError("Alarm missing required TRIGGER property")
    return Alarm.model_validate(builder.values), messages


def encode_alarm(alarm: Alarm, summary_fallback: str | None = None) -> ParsedComponent:
    """Encode an alarm as a VALARM component.

    Raises ValueError if the trigger can't be encoded.
    """
    writer = PropertyWriter(VALARM)
    writer.component.properties.append(
        TriggerEncoder.encode_property("trigger", alarm.trigger)
    )
    action = alarm.action.value if isinstance(alarm.action, AlarmAction) else alarm.action.upper()
    writer.add("action", action)
    description = alarm.description
    if not description and action in (AlarmAction.DISPLAY, AlarmAction.EMAIL):
        description = summary_fallback
    writer.add("description", TextEncoder.__encode_property_value__(description or ""))
    writer.add("summary", TextEncoder.__encode_property_value__(alarm.summary or ""))
    if alarm.repeat is not None:
        writer.add("repeat", str(alarm.repeat))
    if alarm.duration is not None:
        writer.add("duration", DurationEncoder.__encode_property_value__(alarm.duration))
    writer.add("attach", alarm.attach_uri)
    return writer.component
