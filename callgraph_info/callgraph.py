"""
callgraph_info.callgraph
========================

The call-graph store: every function and call seen across any number of
``-fcallgraph-info`` dumps.

The graph is a directed multigraph.

- **Nodes** are functions, identified by a stable 64-bit id derived
  from the (demangled) function name alone.  Each node owns at most one
  definition-site :class:`Location`.
- **Edges** are call sites.  The same caller/callee pair may be linked
  several times, once per call site.  An edge's location is ``None`` for
  ``"intrinsic"`` calls and for labels that are not ``path:line:col``.

Nodes live in flat dicts keyed by id and edges in adjacency lists keyed
by id, so direct and mutual recursion need no special handling.

Public API
----------
    CallGraph            - the store
    CallEdge             - one call site
    DroppedCall          - an edge whose endpoint was never registered
    stable_function_id   - name → id

Typical usage::

    from callgraph_info import CallGraph

    cg = CallGraph()
    for path in sorted(Path("build").rglob("*.ci")):
        cg.parse_file(path)

    for edge in cg.get_calls("main"):
        print(edge.callee_name, edge.location)
"""

from __future__ import annotations

import hashlib
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Optional,
    Union,
)

from .config import ID_DIGEST_BYTES, INTRINSIC_LABEL
from .errors import (
    AmbiguousLocationError,
    IdCollisionError,
    LocationError,
    MissingEndpointError,
    UnknownFunctionError,
    UnknownLocationError,
)
from .location import Location

if TYPE_CHECKING:
    from .config import IngestOptions
    from .ingest import IngestStats

logger = logging.getLogger(__name__)

FunctionRef = Union[str, int]


def stable_function_id(name: str) -> int:
    """Return the numeric id of *name*.

    The id depends on *name* only, never on what was registered before.
    """
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:ID_DIGEST_BYTES], "big")


# ---------------------------------------------------------------------------
# Edge records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CallEdge:
    """One call site.

    Attributes
    ----------
    key : int
        Insertion sequence number, unique within a :class:`CallGraph`.
    caller, callee : int
        Function ids.
    caller_name, callee_name : str
        Function names.
    label : str
        The raw edge label from the dump.
    location : Location or None
        The parsed call site, if the label had one.
    """

    key: int
    caller: int
    callee: int
    caller_name: str
    callee_name: str
    label: str
    location: Optional[Location] = None

    @property
    def is_intrinsic(self) -> bool:
        return self.label == INTRINSIC_LABEL

    def __repr__(self) -> str:
        site = f" @ {self.location}" if self.location is not None else ""
        return f"CallEdge({self.caller_name} -> {self.callee_name}{site})"


@dataclass(frozen=True)
class DroppedCall:
    """A call that could not be added because an endpoint is unknown."""

    source: str
    target: str
    label: str
    missing: str
    path: Optional[str] = None


# ---------------------------------------------------------------------------
# CallGraph
# ---------------------------------------------------------------------------

class CallGraph:
    """Indexed directed multigraph of functions and call sites.

    Attributes
    ----------
    dropped_calls : list[DroppedCall]
        Calls skipped during ingestion because one endpoint had not been
        registered.

    Notes
    -----
    Not thread-safe.  Populate from a single writer.
    """

    def __init__(self) -> None:
        # name <-> id
        self._ids: Dict[str, int] = {}
        self._names: Dict[int, str] = {}
        # id <-> location
        self._locations: Dict[int, Optional[Location]] = {}
        self._sites: Dict[Location, List[int]] = defaultdict(list)
        # adjacency
        self._out: Dict[int, List[CallEdge]] = {}
        self._in: Dict[int, List[CallEdge]] = {}
        self._edges: List[CallEdge] = []
        self.dropped_calls: List[DroppedCall] = []

    # ----- mutation ---------------------------------------------------------

    def add_function(
        self,
        name: str,
        raw_location: Optional[str],
        strict: bool = True,
    ) -> int:
        """Register *name*, defined at *raw_location*.

        A location string without ``path:line:col`` shape registers the
        function without a location.  Registering a known name again
        rebinds its location.  Returns the function id.

        Raises
        ------
        LocationError
            If *raw_location* has a non-numeric line or column and
            *strict* is set.  Otherwise the location is dropped.
        IdCollisionError
            If a different name already owns the computed id.
        """
        location = _parse_location(raw_location, strict)
        node_id = stable_function_id(name)

        owner = self._names.get(node_id)
        if owner is not None and owner != name:
            raise IdCollisionError(node_id, owner, name)

        if owner is not None:
            self._unbind_location(node_id)
        else:
            self._ids[name] = node_id
            self._names[node_id] = name
            self._out[node_id] = []
            self._in[node_id] = []

        self._locations[node_id] = location
        if location is not None:
            self._sites[location].append(node_id)
        return node_id

    def add_call(
        self,
        from_name: str,
        to_name: str,
        raw_location: Optional[str],
        strict: bool = True,
    ) -> CallEdge:
        """Add a call edge between two registered functions.

        *raw_location* ``None`` is stored as an ``"intrinsic"`` call.

        Raises
        ------
        MissingEndpointError
            If *from_name* (checked first) or *to_name* is unknown.  The
            graph is left untouched.
        LocationError
            If *raw_location* has a non-numeric line or column and
            *strict* is set.
        """
        caller = self._ids.get(from_name)
        if caller is None:
            raise MissingEndpointError("source", from_name)
        callee = self._ids.get(to_name)
        if callee is None:
            raise MissingEndpointError("target", to_name)

        label = raw_location if raw_location is not None else INTRINSIC_LABEL
        location = _parse_location(label, strict)
        edge = CallEdge(
            key=len(self._edges),
            caller=caller,
            callee=callee,
            caller_name=from_name,
            callee_name=to_name,
            label=label,
            location=location,
        )
        self._edges.append(edge)
        self._out[caller].append(edge)
        self._in[callee].append(edge)
        return edge

    def record_dropped_call(
        self,
        error: MissingEndpointError,
        source: str,
        target: str,
        label: str,
        path: Optional[str] = None,
    ) -> DroppedCall:
        dropped = DroppedCall(source, target, label, error.side, path)
        self.dropped_calls.append(dropped)
        return dropped

    def parse_file(
        self,
        path: Union[str, Path],
        options: Optional["IngestOptions"] = None,
    ) -> "IngestStats":
        """Fold one ``.ci`` dump into this graph.

        See :func:`callgraph_info.ingest.parse_file`.
        """
        from .ingest import parse_file
        return parse_file(self, path, options)

    # ----- lookups ----------------------------------------------------------

    def function_id(self, name: str) -> int:
        try:
            return self._ids[name]
        except KeyError:
            raise UnknownFunctionError(name) from None

    def function_name(self, node_id: int) -> str:
        try:
            return self._names[node_id]
        except KeyError:
            raise UnknownFunctionError(node_id) from None

    def get_location(self, name: str) -> Optional[Location]:
        """Definition site of *name*, or ``None`` when it has none."""
        return self._locations[self.function_id(name)]

    def get_names(self, location: Location) -> List[str]:
        """All functions defined at *location*, sorted."""
        return sorted(self._names[i] for i in self._sites.get(location, ()))

    def get_name(self, location: Location) -> str:
        """The single function defined at *location*.

        Raises
        ------
        UnknownLocationError
            If no function is defined there.
        AmbiguousLocationError
            If more than one function is defined there.
        """
        names = self.get_names(location)
        if not names:
            raise UnknownLocationError(location)
        if len(names) > 1:
            raise AmbiguousLocationError(location, names)
        return names[0]

    def get_calls(self, function: FunctionRef) -> Iterator[CallEdge]:
        """Outgoing call edges of *function* (a name or an id)."""
        edges = self._out[self._resolve(function)]
        return (edge for edge in edges)

    def get_callers(self, function: FunctionRef) -> Iterator[CallEdge]:
        """Incoming call edges of *function* (a name or an id)."""
        edges = self._in[self._resolve(function)]
        return (edge for edge in edges)

    def functions(self) -> Iterator[str]:
        """Registered function names, in registration order."""
        return iter(self._ids)

    def edges(self) -> Iterator[CallEdge]:
        """All call edges, in insertion order."""
        return iter(self._edges)

    @property
    def node_count(self) -> int:
        return len(self._ids)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __repr__(self) -> str:
        return (
            f"CallGraph(functions={self.node_count}, "
            f"calls={self.edge_count}, dropped={len(self.dropped_calls)})"
        )

    # ----- statistics -------------------------------------------------------

    def statistics(self) -> Dict[str, Any]:
        """Return a dict with summary statistics."""
        return {
            "functions": self.node_count,
            "functions_without_location": sum(
                1 for loc in self._locations.values() if loc is None
            ),
            "calls": self.edge_count,
            "intrinsic_calls": sum(1 for e in self._edges if e.is_intrinsic),
            "dropped_calls": len(self.dropped_calls),
        }

    # ----- internals --------------------------------------------------------

    def _resolve(self, function: FunctionRef) -> int:
        if isinstance(function, int):
            if function not in self._names:
                raise UnknownFunctionError(function)
            return function
        return self.function_id(function)

    def _unbind_location(self, node_id: int) -> None:
        old = self._locations.get(node_id)
        if old is None:
            return
        owners = self._sites[old]
        owners.remove(node_id)
        if not owners:
            del self._sites[old]


def _parse_location(text: Optional[str], strict: bool = True) -> Optional[Location]:
    if text is None:
        return None
    try:
        return Location.from_string(text)
    except LocationError as exc:
        if strict:
            raise
        logger.warning("Ignoring malformed location: %s", exc)
        return None
