"""Compatibility layer for calendar components without a SUMMARY.

Some producers omit SUMMARY entirely for untitled items. By default such a
record is dropped with an error; with this mode enabled a placeholder title
is used instead.
"""

from collections.abc import Generator
import contextlib
import contextvars


_default_titles = contextvars.ContextVar("default_titles", default=False)


@contextlib.contextmanager
def enable_default_titles() -> Generator[None]:
    """Context manager to substitute a placeholder for a missing SUMMARY."""
    token = _default_titles.set(True)
    try:
        yield
    finally:
        _default_titles.reset(token)


def is_default_titles_enabled() -> bool:
    """Check if placeholder titles are enabled."""
    return _default_titles.get()
