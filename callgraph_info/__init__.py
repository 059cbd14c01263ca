"""
callgraph_info — call graphs from GCC ``-fcallgraph-info`` dumps
================================================================

Reads the ``*.ci`` files GCC writes with ``-fcallgraph-info=su,da`` and
accumulates them into one indexed call graph, ready for worst-case
stack-depth analysis together with the matching ``*.su`` reports.

Core modules
------------
grammar
    Parsimonious PEG grammar for the nested ``kind: { key: value }`` text.
ast
    ``RawObject`` / ``Field`` tree and field projection helpers.
location
    ``path:line:column`` parsing, including Windows drive letters.
demangle
    Best-effort Itanium C++ demangling of symbol names.
callgraph
    The ``CallGraph`` store: functions, call sites, lookups.
ingest
    Folds parsed dumps into a ``CallGraph``.

Quick start
-----------
>>> from callgraph_info import CallGraph
>>> cg = CallGraph()
>>> cg.parse_file("build/main.ci")                       # doctest: +SKIP
>>> [e.callee_name for e in cg.get_calls("main")]        # doctest: +SKIP
['init_board()', 'run_loop(int)']
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from .ast import Field, Item, RawObject, field_map, objects_of_kind
from .callgraph import CallEdge, CallGraph, DroppedCall, stable_function_id
from .config import IngestOptions
from .demangle import maybe_demangle
from .errors import (
    AmbiguousLocationError,
    CallGraphInfoError,
    DumpSyntaxError,
    IdCollisionError,
    LocationError,
    MissingEndpointError,
    SchemaError,
    UnknownFunctionError,
    UnknownLocationError,
)
from .grammar import parse_path, parse_text
from .ingest import IngestStats, ingest_files, ingest_object, parse_file
from .location import Location

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"

_log = logging.getLogger(__name__)
_handler: Optional[logging.Handler] = None


def configure_logging(verbosity: int = 0) -> logging.Handler:
    """Send ``callgraph_info`` log records to stderr.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.

    Calling it again replaces the handler installed by the previous call.
    """
    global _handler

    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    if _handler is not None:
        _log.removeHandler(_handler)
    _handler = handler
    _log.setLevel(level)
    _log.addHandler(handler)
    return handler


__all__: List[str] = [
    "AmbiguousLocationError",
    "CallEdge",
    "CallGraph",
    "CallGraphInfoError",
    "DroppedCall",
    "DumpSyntaxError",
    "Field",
    "IdCollisionError",
    "IngestOptions",
    "IngestStats",
    "Item",
    "Location",
    "LocationError",
    "MissingEndpointError",
    "RawObject",
    "SchemaError",
    "UnknownFunctionError",
    "UnknownLocationError",
    "configure_logging",
    "field_map",
    "ingest_files",
    "ingest_object",
    "maybe_demangle",
    "objects_of_kind",
    "parse_file",
    "parse_path",
    "parse_text",
    "stable_function_id",
]
