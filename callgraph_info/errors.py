"""
callgraph_info.errors
=====================

Exception types raised while parsing call-graph dumps and querying the
call graph.

Hierarchy
---------
::

    CallGraphInfoError (base)
    ├── DumpSyntaxError          - text does not match the dump grammar
    ├── SchemaError              - wrong top-level kind / missing field
    ├── LocationError            - ``path:line:col`` with a bad number
    ├── MissingEndpointError     - ``add_call`` with an unknown function
    ├── UnknownFunctionError     - query for an unregistered name / id
    ├── UnknownLocationError     - no function defined at a location
    ├── AmbiguousLocationError   - several functions share a location
    └── IdCollisionError         - two names hash to the same id

Every error carries an optional ``path`` / ``line`` / ``column`` and
formats itself the way GCC does (``file:line:column: message``).  The
lookup errors also derive from :class:`LookupError` and
:class:`LocationError` from :class:`ValueError`, so callers can use the
builtin categories.
"""

from __future__ import annotations

from typing import Optional, Sequence


class CallGraphInfoError(Exception):
    """Base exception for all callgraph_info errors."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        self.column = column

    def with_path(self, path: str) -> "CallGraphInfoError":
        """Attach the originating file, keeping any existing one."""
        if self.path is None:
            self.path = str(path)
        return self

    def to_gcc_format(self) -> str:
        if self.path is None:
            return self.message
        parts = [self.path]
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))
        return f"{':'.join(parts)}: {self.message}"

    def __str__(self) -> str:
        return self.to_gcc_format()


# ---------------------------------------------------------------------------
# Input errors (fatal)
# ---------------------------------------------------------------------------

class DumpSyntaxError(CallGraphInfoError):
    """The dump text does not match the nested-object grammar."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: int = 0,
        column: int = 0,
        excerpt: str = "",
    ) -> None:
        super().__init__(message, path=path, line=line, column=column)
        self.excerpt = excerpt


class SchemaError(CallGraphInfoError):
    """The dump parsed, but its objects are not a call graph."""


class LocationError(CallGraphInfoError, ValueError):
    """A location string committed to ``path:line:col`` but a number is bad."""

    def __init__(self, message: str, text: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.text = text


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------

class MissingEndpointError(CallGraphInfoError, LookupError):
    """``add_call`` referenced a function that was never registered.

    Attributes
    ----------
    side : str
        ``"source"`` or ``"target"``.
    name : str
        The unregistered function name.
    """

    def __init__(self, side: str, name: str) -> None:
        super().__init__(f"No such {side} found: '{name}'")
        self.side = side
        self.name = name


class UnknownFunctionError(CallGraphInfoError, LookupError):
    """No function is registered under this name or id."""

    def __init__(self, function) -> None:
        super().__init__(f"Unknown function: {function!r}")
        self.function = function


class UnknownLocationError(CallGraphInfoError, LookupError):
    """No function is defined at this location."""

    def __init__(self, location) -> None:
        super().__init__(f"No function defined at {location}")
        self.location = location


class AmbiguousLocationError(CallGraphInfoError, LookupError):
    """Several functions share one definition site."""

    def __init__(self, location, names: Sequence[str]) -> None:
        listed = ", ".join(repr(n) for n in names)
        super().__init__(
            f"{len(names)} functions defined at {location}: {listed}"
        )
        self.location = location
        self.names = list(names)


class IdCollisionError(CallGraphInfoError):
    """Two distinct function names produced the same numeric id."""

    def __init__(self, node_id: int, existing: str, incoming: str) -> None:
        super().__init__(
            f"Function id {node_id:#018x} already belongs to "
            f"'{existing}', cannot assign it to '{incoming}'"
        )
        self.node_id = node_id
        self.existing = existing
        self.incoming = incoming
