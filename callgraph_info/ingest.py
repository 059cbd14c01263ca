"""
callgraph_info.ingest
=====================

Folds parsed ``-fcallgraph-info`` dumps into a :class:`CallGraph`.

A dump has a single ``graph`` object at the top level.  Its ``node``
children become functions and its ``edge`` children become calls.  All
nodes of a file are registered before any of its edges, because edges
refer to nodes by name.

Node fields
-----------
``title``
    The (possibly mangled) function identity, demangled before use.
``label``
    ``name\\nlocation\\n...``.  The second line is the definition site;
    a single-line label is used as is.

Edge fields
-----------
``sourcename``, ``targetname``
    Endpoint titles, demangled before use.
``label``
    The call site, ``"intrinsic"`` when absent.

An edge whose endpoint was never registered (typically a function
defined in a translation unit that has not been loaded) is dropped: it
is recorded in :attr:`CallGraph.dropped_calls`, logged at DEBUG level
and ingestion continues.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .ast import RawObject
from .callgraph import CallGraph
from .config import (
    DEFAULT_OPTIONS,
    EDGE_KIND,
    EDGE_LABEL,
    EDGE_SOURCE,
    EDGE_TARGET,
    INTRINSIC_LABEL,
    LABEL_LINE_SEPARATOR,
    NODE_KIND,
    NODE_LABEL,
    NODE_TITLE,
    TOPLEVEL_KIND,
    IngestOptions,
)
from .demangle import maybe_demangle
from .errors import LocationError, MissingEndpointError, SchemaError
from .grammar import parse_path

logger = logging.getLogger(__name__)

_LABEL_LINES = re.compile(re.escape(LABEL_LINE_SEPARATOR) + "|\n")


# ---------------------------------------------------------------------------
# Records extracted from one dump
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FunctionRecord:
    name: str
    location: str


@dataclass(frozen=True)
class CallRecord:
    source: str
    target: str
    label: str


@dataclass
class DumpRecords:
    """The functions and calls of one dump, in file order."""

    source: str
    functions: List[FunctionRecord] = field(default_factory=list)
    calls: List[CallRecord] = field(default_factory=list)


@dataclass
class IngestStats:
    """What one dump contributed to the graph."""

    source: str
    functions: int = 0
    calls: int = 0
    dropped: int = 0


# ---------------------------------------------------------------------------
# AST → records
# ---------------------------------------------------------------------------

def _require(obj: RawObject, fields, key: str, source: str) -> str:
    try:
        return fields[key]
    except KeyError:
        raise SchemaError(
            f"'{obj.kind}' object has no '{key}' field", path=source
        ) from None


def label_location(label: str) -> str:
    """The location line of a node label."""
    lines = _LABEL_LINES.split(label)
    return lines[1] if len(lines) > 1 else lines[0]


def collect_records(
    tree: RawObject,
    source: str = "<string>",
    options: IngestOptions = DEFAULT_OPTIONS,
) -> DumpRecords:
    """Check that *tree* is a call graph and pull out its nodes and edges.

    Raises
    ------
    SchemaError
        If the top-level object is not a ``graph`` or a node/edge lacks a
        required field.
    """
    if tree.kind != TOPLEVEL_KIND:
        raise SchemaError(
            f"file does not contain a graph at the toplevel "
            f"(found '{tree.kind}')",
            path=source,
        )

    resolve = maybe_demangle if options.demangle else str
    records = DumpRecords(source)

    for node in tree.children(NODE_KIND):
        fields = node.fields()
        title = _require(node, fields, NODE_TITLE, source)
        label = _require(node, fields, NODE_LABEL, source)
        records.functions.append(
            FunctionRecord(resolve(title), label_location(label))
        )

    for edge in tree.children(EDGE_KIND):
        fields = edge.fields()
        records.calls.append(CallRecord(
            source=resolve(_require(edge, fields, EDGE_SOURCE, source)),
            target=resolve(_require(edge, fields, EDGE_TARGET, source)),
            label=fields.get(EDGE_LABEL, INTRINSIC_LABEL),
        ))

    return records


# ---------------------------------------------------------------------------
# records → graph
# ---------------------------------------------------------------------------

def _apply_functions(
    graph: CallGraph,
    records: DumpRecords,
    options: IngestOptions,
    stats: IngestStats,
) -> None:
    for fn in records.functions:
        try:
            graph.add_function(fn.name, fn.location, strict=options.strict_locations)
        except LocationError as exc:
            raise exc.with_path(records.source)
        stats.functions += 1


def _apply_calls(
    graph: CallGraph,
    records: DumpRecords,
    options: IngestOptions,
    stats: IngestStats,
) -> None:
    for call in records.calls:
        try:
            graph.add_call(
                call.source, call.target, call.label,
                strict=options.strict_locations,
            )
        except MissingEndpointError as exc:
            graph.record_dropped_call(
                exc, call.source, call.target, call.label, records.source
            )
            stats.dropped += 1
            logger.debug("%s: dropping call: %s", records.source, exc.message)
            continue
        except LocationError as exc:
            raise exc.with_path(records.source)
        stats.calls += 1


def _log_stats(stats: IngestStats) -> None:
    logger.info(
        "%s: %d functions, %d calls, %d dropped",
        stats.source, stats.functions, stats.calls, stats.dropped,
    )


def ingest_object(
    graph: CallGraph,
    tree: RawObject,
    source: str = "<string>",
    options: Optional[IngestOptions] = None,
) -> IngestStats:
    """Fold one parsed dump into *graph*; nodes first, then edges."""
    options = options or DEFAULT_OPTIONS
    records = collect_records(tree, source, options)
    stats = IngestStats(source)
    _apply_functions(graph, records, options, stats)
    _apply_calls(graph, records, options, stats)
    _log_stats(stats)
    return stats


def parse_file(
    graph: CallGraph,
    path: Union[str, Path],
    options: Optional[IngestOptions] = None,
) -> IngestStats:
    """Read, parse and fold one ``.ci`` file into *graph*.

    Raises
    ------
    DumpSyntaxError, SchemaError, LocationError
        The input is malformed.  Nothing from later files should be
        trusted after one of these.
    OSError
        The file cannot be read.
    """
    options = options or DEFAULT_OPTIONS
    tree = parse_path(path, encoding=options.encoding)
    return ingest_object(graph, tree, str(path), options)


def ingest_files(
    graph: CallGraph,
    paths: Iterable[Union[str, Path]],
    options: Optional[IngestOptions] = None,
) -> List[IngestStats]:
    """Fold several dumps into *graph*, in the order given.

    With ``options.resolve_across_files`` every file is parsed up front
    and the nodes of all files are registered before the first edge is
    added, so a call into a later file is not dropped.
    """
    options = options or DEFAULT_OPTIONS
    if not options.resolve_across_files:
        return [parse_file(graph, p, options) for p in paths]

    batches: List[Tuple[DumpRecords, IngestStats]] = []
    for p in paths:
        tree = parse_path(p, encoding=options.encoding)
        records = collect_records(tree, str(p), options)
        batches.append((records, IngestStats(str(p))))

    for records, stats in batches:
        _apply_functions(graph, records, options, stats)
    for records, stats in batches:
        _apply_calls(graph, records, options, stats)
        _log_stats(stats)
    return [stats for _, stats in batches]
