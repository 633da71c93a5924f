"""Library for handling vCard and iCalendar components.

A document consists of one or more records (a VCARD, or a VTODO or VEVENT
inside a VCALENDAR), each of which has properties and possibly nested
components such as a VALARM.

Components created here have no semantic meaning, but hold all the
data needed to interpret based on the type (e.g. by a record decoder).

Parsing is best-effort: structural problems such as a BEGIN without a
matching END, or a line that can't be tokenized, are reported in the
returned error list and only the affected record or line is discarded.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field

from pimcodec.exceptions import CodecParseError

from .const import (
    ATTR_BEGIN,
    ATTR_BEGIN_LOWER,
    ATTR_END,
    ATTR_END_LOWER,
    CRLF,
    FOLD,
    FOLD_INDENT,
    FOLD_LEN,
)
from .property import ParsedProperty

_LOGGER = logging.getLogger(__name__)

FOLD_RE = re.compile(FOLD, flags=re.MULTILINE)
LINES_RE = re.compile(r"\r?\n|\r")


@dataclass
class ParsedComponent:
    """A component with properties and nested sub-components."""

    name: str
    properties: list[ParsedProperty] = field(default_factory=list)
    components: list[ParsedComponent] = field(default_factory=list)
    index: int = 0
    """Position of the record in its document, starting at 1."""

    def get_property(self, name: str) -> ParsedProperty | None:
        """Return the first property with the specified name."""
        for prop in self.properties:
            if prop.name == name.lower():
                return prop
        return None

    def ics(self) -> str:
        """Encode a component as folded, CRLF terminated text."""
        return "".join(f"{line}{CRLF}" for line in self.contentlines())

    def contentlines(self) -> Generator[str, None, None]:
        """Yield the folded physical lines for this component."""
        name = self.name.upper()
        yield f"{ATTR_BEGIN}:{name}"
        for prop in self.properties:
            yield from fold_line(prop.ics()).split(CRLF)
        for component in self.components:
            yield from component.contentlines()
        yield f"{ATTR_END}:{name}"


@dataclass
class ParsedContent:
    """Records found in a document along with any structural errors."""

    components: list[ParsedComponent] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ParserState(enum.Enum):
    """State of the per document record scanner."""

    SCANNING = "scanning"
    IN_RECORD = "in-record"


def _utf8_len(char: str) -> int:
    return len(char.encode("utf-8", errors="surrogatepass"))


def fold_line(line: str, max_length: int = FOLD_LEN) -> str:
    """Fold a content line so no physical line exceeds max_length octets.

    The first physical line holds up to max_length octets and each
    continuation holds up to max_length-1 octets after the single space
    indent. Lines are only broken between code points so a multi-byte
    UTF-8 sequence is never split.
    """
    if max_length < 2:
        raise ValueError(f"Fold length must be at least 2, got {max_length}")
    if _utf8_len(line) <= max_length:
        return line
    segments: list[str] = []
    current: list[str] = []
    current_len = 0
    limit = max_length
    for char in line:
        char_len = _utf8_len(char)
        if current and current_len + char_len > limit:
            segments.append("".join(current))
            current = []
            current_len = 0
            limit = max_length - len(FOLD_INDENT)
        current.append(char)
        current_len += char_len
    if current:
        segments.append("".join(current))
    return f"{CRLF}{FOLD_INDENT}".join(segments)


def unfold_lines(content: str) -> str:
    """Join continuation lines, removing a line break followed by a space or tab."""
    return FOLD_RE.sub("", content)


def unfolded_lines(content: str) -> Generator[str, None, None]:
    """Read content and yield the unfolded logical lines."""
    yield from LINES_RE.split(unfold_lines(content))


def parse_records(content: str, kind: str) -> ParsedContent:
    """Parse content into the records of the specified kind.

    This walks through each logical line and uses a stack to associate
    properties with the current record or its nested components. Lines
    outside of a record of the requested kind (e.g. VCALENDAR headers or a
    VTIMEZONE) are skipped.

    The scanner has only two states: SCANNING outside of a record, and
    IN_RECORD between a BEGIN and END of the requested kind.
    """
    kind = kind.lower()
    result = ParsedContent()
    state = ParserState.SCANNING
    stack: list[ParsedComponent] = []
    record_index = 0

    def discard(reason: str) -> None:
        result.errors.append(
            f"{kind.upper()} record #{record_index} {reason}; "
            "record discarded"
        )
        stack.clear()

    for line in unfolded_lines(content):
        if not line.strip():
            continue
        try:
            prop = ParsedProperty.from_ics(line)
        except CodecParseError as err:
            if state == ParserState.IN_RECORD:
                result.errors.append(
                    f"Failed to parse line in {kind.upper()} record "
                    f"#{record_index}: {err.message}"
                )
            else:
                _LOGGER.debug("Skipping unparsable line outside of record: %s", err)
            continue

        if prop.name == ATTR_BEGIN_LOWER:
            name = prop.value.strip().lower()
            if name == kind:
                if state == ParserState.IN_RECORD:
                    discard(f"has no matching {ATTR_END}:{kind.upper()}")
                state = ParserState.IN_RECORD
                record_index += 1
                stack.append(ParsedComponent(name=name, index=record_index))
            elif state == ParserState.IN_RECORD:
                stack.append(ParsedComponent(name=name))
        elif prop.name == ATTR_END_LOWER:
            if state != ParserState.IN_RECORD:
                continue
            name = prop.value.strip().lower()
            open_names = [component.name for component in stack]
            if name not in open_names:
                result.errors.append(
                    f"Unexpected {ATTR_END}:{name.upper()} in {kind.upper()} record "
                    f"#{record_index}; line ignored"
                )
                continue
            while stack[-1].name != name:
                component = stack.pop()
                result.errors.append(
                    f"{component.name.upper()} in {kind.upper()} record "
                    f"#{record_index} has no matching "
                    f"{ATTR_END}:{component.name.upper()}"
                )
                stack[-1].components.append(component)
            component = stack.pop()
            if stack:
                stack[-1].components.append(component)
            else:
                _LOGGER.debug("Found %s record #%d", kind, record_index)
                result.components.append(component)
                state = ParserState.SCANNING
        elif state == ParserState.IN_RECORD:
            stack[-1].properties.append(prop)

    if state == ParserState.IN_RECORD:
        discard(f"has no matching {ATTR_END}:{kind.upper()}")
    return result


def encode_content(components: Iterable[ParsedComponent]) -> str:
    """Encode a set of components into CRLF terminated content."""
    return "".join(component.ics() for component in components)
