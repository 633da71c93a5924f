"""Compatibility modes selected by the producer of the content.

This module provides a context manager that can allow known broken
content to be parsed, based on the PRODID of the document.
"""

import contextlib
from collections.abc import Generator
import logging
import re

from . import timezone_compat, title_compat


_LOGGER = logging.getLogger(__name__)

# Capture group that extracts the PRODID from the content.
_PRODID_RE = re.compile(r"^PRODID[;:](?P<prodid>[^\r\n]+)", re.MULTILINE | re.IGNORECASE)

_EXCHANGE_PRODID = "Microsoft Exchange Server"

# Producers known to write components without a SUMMARY
_UNTITLED_PRODIDS = (
    "Microsoft Exchange Server",
    "Microsoft Corporation//Outlook",
)


def _get_prodid(content: str) -> str | None:
    """Extract the first PRODID from the content."""
    if match := _PRODID_RE.search(content):
        _LOGGER.debug("Extracted PRODID: %s", match.group("prodid"))
        return match.group("prodid")
    return None


@contextlib.contextmanager
def enable_compat_mode(content: str) -> Generator[str]:
    """Enable compatibility mode to fix known broken content."""
    prodid = _get_prodid(content) or ""
    with contextlib.ExitStack() as stack:
        if _EXCHANGE_PRODID in prodid:
            _LOGGER.debug("Enabling timezone compatibility for Microsoft Exchange Server")
            stack.enter_context(timezone_compat.enable_allow_invalid_timezones())
        if any(producer in prodid for producer in _UNTITLED_PRODIDS):
            _LOGGER.debug("Enabling default titles for %s", prodid)
            stack.enter_context(title_compat.enable_default_titles())
        yield content
