"""Compatibility layer for reading content from non-conformant producers.

Each toggle is a context variable so it only affects parsing done within the
enclosing context, on the current thread or asyncio task.
"""

from .make_compat import enable_compat_mode

__all__ = [
    "enable_compat_mode",
]
