"""
callgraph_info.config
=====================

Constants describing the GCC ``-fcallgraph-info`` dump schema, and the
options that tune how dumps are folded into a :class:`CallGraph`.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Dump schema
# ---------------------------------------------------------------------------

DEFAULT_ENCODING: str = "utf-8"

TOPLEVEL_KIND: str = "graph"
NODE_KIND: str = "node"
EDGE_KIND: str = "edge"

# Required / optional field keys
NODE_TITLE: str = "title"
NODE_LABEL: str = "label"
EDGE_SOURCE: str = "sourcename"
EDGE_TARGET: str = "targetname"
EDGE_LABEL: str = "label"

# Label used for calls without a source-level call site
INTRINSIC_LABEL: str = "intrinsic"

# GCC writes multi-line labels with the two-character escape ``\n``
LABEL_LINE_SEPARATOR: str = "\\n"

# ---------------------------------------------------------------------------
# Function ids
# ---------------------------------------------------------------------------

# Bytes of the SHA-256 digest kept for a function id (64-bit ids)
ID_DIGEST_BYTES: int = 8

# ---------------------------------------------------------------------------
# Demangling
# ---------------------------------------------------------------------------

# Symbols whose demangled form is remembered (most recently used)
DEMANGLE_CACHE_SIZE: int = 16384


@dataclass(frozen=True)
class IngestOptions:
    """Knobs for :func:`callgraph_info.ingest.parse_file` and friends.

    Attributes
    ----------
    demangle : bool
        Run titles and edge endpoints through :func:`maybe_demangle`.
    strict_locations : bool
        When ``True`` a label whose line/column is not an integer aborts
        ingestion with :class:`LocationError`.  When ``False`` the
        offending function or call is stored without a location and a
        warning is logged.
    resolve_across_files : bool
        Only used by :func:`ingest_files`.  Register the nodes of *every*
        file before adding any edge, so that calls into functions
        defined in a later file are kept instead of dropped.
    encoding : str
        Text encoding of the dump files.
    """

    demangle: bool = True
    strict_locations: bool = True
    resolve_across_files: bool = False
    encoding: str = DEFAULT_ENCODING


DEFAULT_OPTIONS = IngestOptions()
