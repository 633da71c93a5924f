"""Library for decoding and encoding records with pydantic.

The data model returned by the record scanner is a bag of ParsedProperty
objects that support all the flexibility of the vCard and iCalendar specs.
This library helps reduce boilerplate for translating that structure into
the simpler pydantic record models, and back again.

Decoding is best-effort. Each property is dispatched to a handler registered
for its name. A handler that raises ValueError produces an error message and
the property is left out of the record. The collected values are then
validated by the pydantic model, and a field or list entry the model rejects
is dropped in the same way, so one bad value never costs the whole record.

Encoding goes through a PropertyWriter that emits properties in a fixed
order and skips any value that can't be encoded.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
import logging
import re
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .diagnostics import redact_content
from .exceptions import CodecParseError
from .parsing.component import ParsedComponent, parse_records
from .parsing.const import PARAM_PREF, PARAM_TYPE
from .parsing.property import ParsedProperty, ParsedPropertyParameter

__all__ = [
    "ComponentModel",
    "ParseResult",
    "PropertyRegistry",
    "PropertyWriter",
    "RecordBuilder",
    "decode_records",
    "log_rejected",
    "record_label",
    "validate_record",
]

_LOGGER = logging.getLogger(__name__)

PREF_TYPE = "pref"
PRIMARY_PREF_VALUES = {"1", "true"}

# Control characters other than HTAB can't appear in a content line
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")

T = TypeVar("T", bound=BaseModel)


class ComponentModel(BaseModel):
    """Base class for the record models.

    Records are immutable value objects. Fields may be populated by name or
    by alias, and unknown fields are rejected.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
    )


@dataclass
class ParseResult(Generic[T]):
    """The records found in a document and the problems found along the way.

    Errors are human readable messages. A record with a problem may still be
    present in items with the offending field omitted.
    """

    items: list[T] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class RecordBuilder:
    """Field values collected from the properties of a single record."""

    def __init__(self) -> None:
        """Initialize RecordBuilder."""
        self.values: dict[str, Any] = {}

    def set(self, name: str, value: Any) -> None:
        """Set a single valued field, keeping the first value seen."""
        if value is None:
            return
        if name in self.values:
            _LOGGER.debug("Ignoring repeated value for field '%s'", name)
            return
        self.values[name] = value

    def append(self, name: str, value: Any) -> None:
        """Add an entry to a multi-valued field."""
        self.values.setdefault(name, []).append(value)

    def extend(self, name: str, values: Iterable[Any]) -> None:
        """Add entries to a multi-valued field."""
        self.values.setdefault(name, []).extend(values)

    def get(self, name: str) -> Any:
        """Return the current value of a field."""
        return self.values.get(name)


PropertyHandler = Callable[[ParsedProperty, RecordBuilder], None]
# Returns messages for problems that did not prevent decoding the component
ComponentHandler = Callable[[ParsedComponent, RecordBuilder], Optional[list[str]]]


@dataclass
class PropertyError:
    """A property or nested component that could not be decoded."""

    name: str
    message: str
    component: bool = False

    def format(self, label: str) -> str:
        """Return the error message for a record with the specified label."""
        kind = "component" if self.component else "property"
        return f"Failed to parse {kind} {self.name.upper()} in {label}: {self.message}"


class PropertyRegistry:
    """Registry of handlers for the properties of one record type."""

    def __init__(self, kind: str) -> None:
        """Initialize PropertyRegistry."""
        self._kind = kind
        self._properties: dict[str, PropertyHandler] = {}
        self._components: dict[str, ComponentHandler] = {}

    def register(self, *names: str) -> Callable[[PropertyHandler], PropertyHandler]:
        """Return decorator to register a handler for the property names."""

        def decorator(func: PropertyHandler) -> PropertyHandler:
            """Register decorated function."""
            for name in names:
                self._properties[name.lower()] = func
            return func

        return decorator

    def register_component(
        self, name: str
    ) -> Callable[[ComponentHandler], ComponentHandler]:
        """Return decorator to register a handler for a nested component."""

        def decorator(func: ComponentHandler) -> ComponentHandler:
            """Register decorated function."""
            self._components[name.lower()] = func
            return func

        return decorator

    def decode(
        self, component: ParsedComponent, builder: RecordBuilder | None = None
    ) -> tuple[RecordBuilder, list[PropertyError]]:
        """Run the registered handlers over the contents of a component."""
        builder = builder or RecordBuilder()
        errors: list[PropertyError] = []
        for prop in component.properties:
            if (handler := self._properties.get(prop.name)) is None:
                _LOGGER.debug("Ignoring unknown %s property '%s'", self._kind, prop.name)
                continue
            try:
                handler(prop, builder)
            except (ValueError, CodecParseError) as err:
                _LOGGER.debug("Failed to parse property '%s': %s", prop.name, err)
                errors.append(PropertyError(prop.name, _error_message(err)))
        for child in component.components:
            if (component_handler := self._components.get(child.name)) is None:
                _LOGGER.debug("Ignoring unknown %s component '%s'", self._kind, child.name)
                continue
            try:
                messages = component_handler(child, builder)
            except (ValueError, CodecParseError) as err:
                _LOGGER.debug("Failed to parse component '%s': %s", child.name, err)
                errors.append(PropertyError(child.name, _error_message(err), True))
                continue
            errors.extend(
                PropertyError(child.name, message, True) for message in messages or ()
            )
        return builder, errors


def _error_message(err: Exception) -> str:
    if isinstance(err, ValidationError):
        return "; ".join(_validation_messages(err))
    if isinstance(err, CodecParseError):
        return err.message
    return str(err)


def _validation_messages(err: ValidationError) -> list[str]:
    messages = []
    for error in err.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        msg = error.get("msg", "")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def log_rejected(component: ParsedComponent, reason: str) -> None:
    """Log the redacted content of a record that was dropped."""
    if _LOGGER.isEnabledFor(logging.DEBUG):
        _LOGGER.debug(
            "Rejected %s record #%d (%s):\n%s",
            component.name.upper(),
            component.index,
            reason,
            "\n".join(redact_content(component.ics())),
        )


def record_label(kind: str, index: int, name: str | None = None) -> str:
    """Return a label that identifies a record in error messages."""
    label = f"{kind.upper()} #{index}"
    if name:
        label += f' ("{name}")'
    return label


def validate_record(
    model: type[T], values: dict[str, Any], label: str, errors: list[str]
) -> T | None:
    """Validate collected values as a model, dropping fields that fail.

    A field or a list entry rejected by the model is removed and reported,
    then validation is attempted again with what remains. Returns None when
    the record can't be validated at all, e.g. the required name is invalid.
    """
    values = dict(values)
    while True:
        try:
            return model.model_validate(values)
        except ValidationError as err:
            _LOGGER.debug("Validation failed for %s: %s", label, err)
            if not _drop_invalid(values, err, label, errors):
                errors.append(
                    f"Failed to validate {label}: {'; '.join(_validation_messages(err))}"
                )
                return None


def _drop_invalid(
    values: dict[str, Any], err: ValidationError, label: str, errors: list[str]
) -> bool:
    """Remove the values reported by a validation error, returning if any were."""
    removed_fields: set[str] = set()
    removed_entries: dict[str, set[int]] = {}
    for error in err.errors():
        loc = error.get("loc", ())
        if not loc or (field_name := str(loc[0])) not in values:
            continue
        if field_name in removed_fields:
            continue
        msg = error.get("msg", "")
        value = values[field_name]
        if len(loc) > 1 and isinstance(loc[1], int) and isinstance(value, list):
            index = loc[1]
            if index in removed_entries.setdefault(field_name, set()):
                continue
            removed_entries[field_name].add(index)
            errors.append(f"Failed to validate {field_name}[{index}] in {label}: {msg}")
            continue
        removed_fields.add(field_name)
        errors.append(f"Failed to validate {field_name} in {label}: {msg}")

    for field_name in removed_fields:
        del values[field_name]
        removed_entries.pop(field_name, None)
    for field_name, indexes in removed_entries.items():
        values[field_name] = [
            entry for i, entry in enumerate(values[field_name]) if i not in indexes
        ]
    return bool(removed_fields or removed_entries)


def is_primary(prop: ParsedProperty) -> bool:
    """Return true if a property is marked as the preferred value of its group."""
    if any(value.lower() in PRIMARY_PREF_VALUES for value in prop.get_parameter_values(PARAM_PREF)):
        return True
    return any(value.lower() == PREF_TYPE for value in prop.get_parameter_values(PARAM_TYPE))


def get_type(prop: ParsedProperty) -> str | None:
    """Return the first TYPE value that is not the preference marker, lowercase."""
    for value in prop.get_parameter_values(PARAM_TYPE):
        for item in value.split(","):
            if (item := item.strip().lower()) and item != PREF_TYPE:
                return item
    return None


def has_control_chars(prop: ParsedProperty) -> bool:
    """Return True if the property value can't be written on a single line.

    Parameter values are sanitized when the property is serialized.
    """
    return _CONTROL_CHARS.search(prop.value) is not None


class PropertyWriter:
    """Collects the encoded properties of a record in emission order.

    Values that are absent are skipped so that no empty property is
    written. Values that can't be encoded, or that still contain a line
    break or other control character once encoded, are skipped and logged.
    """

    def __init__(self, name: str) -> None:
        """Initialize PropertyWriter."""
        self.component = ParsedComponent(name=name)

    def add(
        self,
        name: str,
        value: str | None,
        params: list[ParsedPropertyParameter] | None = None,
    ) -> None:
        """Add a property with an already encoded value."""
        if value is None or value == "":
            return
        self._append(ParsedProperty(name=name, value=value, params=params or None))

    def add_encoded(
        self,
        name: str,
        value: Any,
        encoder: Callable[[str, Any], ParsedProperty | list[ParsedProperty] | None],
    ) -> None:
        """Add properties created by an encoder, skipping them if encoding fails."""
        if value is None:
            return
        try:
            prop = encoder(name, value)
        except ValueError as err:
            _LOGGER.debug("Skipping property '%s' that can't be encoded: %s", name, err)
            return
        if prop is None:
            return
        for item in prop if isinstance(prop, list) else [prop]:
            if item.value != "":
                self._append(item)

    def _append(self, prop: ParsedProperty) -> None:
        if has_control_chars(prop):
            _LOGGER.debug(
                "Skipping property '%s' with a control character", prop.name.upper()
            )
            return
        self.component.properties.append(prop)

    def add_component(self, component: ParsedComponent | None) -> None:
        """Add a nested component."""
        if component is not None:
            self.component.components.append(component)


def params(**kwargs: str | None) -> list[ParsedPropertyParameter]:
    """Build a parameter list from keyword arguments, skipping empty values.

    Underscores in the names are written as dashes.
    """
    return [
        ParsedPropertyParameter(name=name.replace("_", "-").upper(), values=[value])
        for name, value in kwargs.items()
        if value
    ]


def decode_records(
    content: str,
    kind: str,
    decoder: Callable[[ParsedComponent, list[str]], T | None],
    empty_message: str,
) -> ParseResult[T]:
    """Parse the records of one kind from a document.

    The decoder is called for each record and appends any problems to the
    error list it is given. It returns None to drop the record.
    """
    if not isinstance(content, str):
        raise TypeError(f"Expected content to be str, got {type(content).__name__}")
    parsed = parse_records(content, kind)
    result: ParseResult[T] = ParseResult(errors=list(parsed.errors))
    for component in parsed.components:
        if (item := decoder(component, result.errors)) is not None:
            result.items.append(item)
    if not result.items and not result.errors:
        result.errors.append(empty_message)
    _LOGGER.debug(
        "Parsed %d %s records with %d errors", len(result.items), kind, len(result.errors)
    )
    return result
