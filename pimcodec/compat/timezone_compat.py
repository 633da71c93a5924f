"""Compatibility layer for allowing unknown timezones in iCalendar files."""

from collections.abc import Generator
import contextlib
import contextvars


_invalid_timezones = contextvars.ContextVar("invalid_timezones", default=False)


@contextlib.contextmanager
def enable_allow_invalid_timezones() -> Generator[None]:
    """Context manager to read unknown TZID values as floating times."""
    token = _invalid_timezones.set(True)
    try:
        yield
    finally:
        _invalid_timezones.reset(token)


def is_allow_invalid_timezones_enabled() -> bool:
    """Check if allowing invalid timezones is enabled."""
    return _invalid_timezones.get()
