"""
.. include:: ../README.md
"""

from .component import ParseResult
from .contact import Contact
from .event import Event
from .event_stream import generate_ics_file, generate_single_event, parse_ics_file
from .exceptions import CodecError, CodecGenerateError, CodecParseError
from .todo import Task
from .todo_stream import generate_single_todo, generate_todo_file, parse_todo_file
from .vcard_stream import generate_single_vcard, generate_vcard_file, parse_vcard_file

__all__ = [
    "alarm",
    "compat",
    "component",
    "contact",
    "diagnostics",
    "event",
    "event_stream",
    "exceptions",
    "parsing",
    "todo",
    "todo_stream",
    "types",
    "util",
    "validation",
    "vcard_stream",
    "CodecError",
    "CodecGenerateError",
    "CodecParseError",
    "Contact",
    "Event",
    "ParseResult",
    "Task",
    "generate_ics_file",
    "generate_single_event",
    "generate_single_todo",
    "generate_single_vcard",
    "generate_todo_file",
    "generate_vcard_file",
    "parse_ics_file",
    "parse_todo_file",
    "parse_vcard_file",
]
