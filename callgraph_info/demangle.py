"""
callgraph_info.demangle
=======================

Best-effort C++ symbol demangling.

GCC titles static functions with their translation unit, e.g.
``src/util.c:_ZL6helperv``.  Only the last ``:``-separated segment is
ever a symbol, so only that segment is handed to the Itanium demangler
(``cxxfilt``, a ``ctypes`` binding to ``__cxa_demangle``).  Anything
the demangler rejects comes back unchanged.
"""

from __future__ import annotations

import functools
import logging

import cxxfilt

from .config import DEMANGLE_CACHE_SIZE

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=DEMANGLE_CACHE_SIZE)
def maybe_demangle(text: str) -> str:
    """Demangle the trailing segment of *text* if it is a mangled symbol.

    >>> maybe_demangle("_Z3fooi")
    'foo(int)'
    >>> maybe_demangle("main.c:main")
    'main.c:main'
    """
    segments = text.split(":")
    try:
        demangled = cxxfilt.demangle(segments[-1])
    except cxxfilt.Error as exc:
        logger.debug("Leaving %r mangled: %s", segments[-1], exc)
        return text
    if demangled == segments[-1]:
        return text
    segments[-1] = demangled
    return ":".join(segments)
