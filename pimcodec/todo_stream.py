"""Reading and writing to-do lists as iCalendar VTODO records.

Use `parse_todo_file` to read the tasks in a .ics file. Parsing is
best-effort and returns the tasks that could be read along with a list of
human readable errors:

```python
from pimcodec.todo_stream import parse_todo_file

result = parse_todo_file(ics_content)
for task in result.items:
    print(task.summary, task.due)
for error in result.errors:
    print(error)
```

Use `generate_todo_file` to write tasks in a VCALENDAR, or
`generate_single_todo` to write one bare VTODO component.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Optional

from .calendar_stream import (
    PERCENT_COMPLETE_RANGE,
    PRIORITY_RANGE,
    add_alarms,
    add_attachments,
    add_date,
    add_duration,
    add_geo,
    add_identity,
    add_people,
    add_related_to,
    add_request_status,
    add_scheduling,
    add_sequence,
    add_text,
    add_text_list,
    add_utc,
    clamp,
    date_handler,
    encode_calendar,
    enum_upper,
    in_range,
    parse_calendar_records,
    register_calendar_properties,
    require_summary,
)
from .compat import title_compat
from .component import (
    ParseResult,
    PropertyRegistry,
    PropertyWriter,
    RecordBuilder,
    log_rejected,
    validate_record,
)
from .parsing.component import ParsedComponent
from .parsing.property import ParsedProperty
from .todo import Task
from .types.cal_address import Organizer
from .util import IdGenerator, TODO_CALENDAR_NAME, TODO_PRODID, prodid_factory

__all__ = [
    "generate_single_todo",
    "generate_todo_file",
    "parse_todo_file",
]

_LOGGER = logging.getLogger(__name__)

VTODO = "vtodo"
MISSING_SUMMARY = "Task missing required SUMMARY property"
NO_TASKS = "No tasks found in the ICS file."
UNTITLED_TASK = "Untitled Task"


TODO_PROPERTIES = PropertyRegistry("VTODO")
register_calendar_properties(TODO_PROPERTIES)
TODO_PROPERTIES.register("due")(date_handler("due"))
TODO_PROPERTIES.register("completed")(date_handler("completed"))


@TODO_PROPERTIES.register("percent-complete")
def _percent_complete(prop: ParsedProperty, builder: RecordBuilder) -> None:
    builder.set("percent_complete", in_range(prop, PERCENT_COMPLETE_RANGE))


def _decode_task(
    component: ParsedComponent, builder: RecordBuilder, label: str, errors: list[str]
) -> Optional[Task]:
    if not builder.get("summary"):
        if not title_compat.is_default_titles_enabled():
            errors.append(f"{MISSING_SUMMARY} ({label})")
            log_rejected(component, MISSING_SUMMARY)
            return None
        builder.set("summary", UNTITLED_TASK)
    if (task := validate_record(Task, builder.values, label, errors)) is None:
        log_rejected(component, "validation failed")
    return task


def parse_todo_file(content: str) -> ParseResult[Task]:
    """Parse the VTODO records of an iCalendar document.

    Never raises for malformed content. A task missing its SUMMARY is
    dropped and a property that can't be parsed is left out of its task,
    each with a message in the result errors.
    """
    return parse_calendar_records(content, VTODO, TODO_PROPERTIES, _decode_task, NO_TASKS)


def encode_task(
    task: Task,
    *,
    id_generator: IdGenerator | None = None,
    index: int | None = None,
) -> ParsedComponent:
    """Encode a task as a VTODO component."""
    summary = require_summary(task, index)
    writer = PropertyWriter(VTODO)
    add_identity(writer, task.uid, id_generator)
    add_text(writer, "summary", summary)

    add_date(writer, "dtstart", task.dtstart)
    add_date(writer, "due", task.due)
    add_utc(writer, "completed", task.completed)
    add_utc(writer, "created", task.created)
    add_utc(writer, "last-modified", task.last_modified)

    writer.add("status", enum_upper(task.status))
    if task.percent_complete is not None:
        writer.add(
            "percent-complete", str(clamp(task.percent_complete, PERCENT_COMPLETE_RANGE))
        )
    if task.priority is not None:
        writer.add("priority", str(clamp(task.priority, PRIORITY_RANGE)))

    add_text(writer, "description", task.description)
    add_text(writer, "location", task.location)
    add_text(writer, "comment", task.comment)
    add_text(writer, "contact", task.contact)
    writer.add("url", task.url)
    writer.add("class", enum_upper(task.classification))
    add_geo(writer, task.geo)
    writer.add_encoded("organizer", task.organizer, Organizer.encode_property)

    add_scheduling(writer, task)
    add_duration(writer, task.duration)
    add_date(writer, "recurrence-id", task.recurrence_id)

    add_related_to(writer, task)
    add_sequence(writer, task.sequence)

    add_text_list(writer, "categories", task.categories)
    add_text_list(writer, "resources", task.resources)
    add_attachments(writer, task.attachments)
    add_people(writer, task.attendees)
    add_alarms(writer, task.alarms, summary)
    add_request_status(writer, task.request_status)
    writer.add("color", task.color)
    return writer.component


def generate_single_todo(task: Task, *, id_generator: IdGenerator | None = None) -> str:
    """Write a single task as a bare VTODO component.

    Raises CodecGenerateError if the task has no SUMMARY.
    """
    return encode_task(task, id_generator=id_generator).ics()


def generate_todo_file(
    tasks: Iterable[Task],
    *,
    calendar_name: str | None = None,
    prod_id: str | None = None,
    id_generator: IdGenerator | None = None,
) -> str:
    """Write tasks as an iCalendar document.

    Raises CodecGenerateError naming the index of the first task that has
    no SUMMARY. An empty list of tasks produces an empty string.
    """
    components = [
        encode_task(task, id_generator=id_generator, index=index)
        for index, task in enumerate(tasks)
    ]
    return encode_calendar(
        components,
        prodid_factory(TODO_PRODID, prod_id),
        calendar_name or TODO_CALENDAR_NAME,
    )
