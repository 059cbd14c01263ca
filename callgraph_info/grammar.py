"""
callgraph_info.grammar
======================

PEG grammar (parsimonious) for the nested-object text format GCC emits
with ``-fcallgraph-info``::

    graph: { title: "main.c"
    node: { title: "main" label: "main\\nmain.c:3:5\\n16 bytes (static)" }
    node: { title: "puts" label: "puts" shape : ellipse }
    edge: { sourcename: "main" targetname: "puts" label: "main.c:4:3" }
    }

The grammar is schema-free: an object is a kind identifier followed by
a brace-delimited list of items, and an item is either a ``key: value``
field or another object.  Quoted values are kept verbatim (escape
sequences are not interpreted) so that labels can be split on the
literal ``\\n`` later on.

Parsing is all-or-nothing.  Any syntax error, including trailing
garbage, raises :class:`DumpSyntaxError` for the whole file.
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Optional, Union

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from .ast import Field, RawObject
from .config import DEFAULT_ENCODING
from .errors import DumpSyntaxError

logger = logging.getLogger(__name__)

# Python frames used per level of object nesting by the parser and the
# tree builder together
_FRAMES_PER_LEVEL = 25
_FRAME_HEADROOM = 200

_QUOTED = re.compile(r'"(?:\\.|[^"\\])*"', re.S)
_BRACE = re.compile(r"[{}]")


CALLGRAPH_GRAMMAR = Grammar(r'''
    document    = _ object _

    object      = identifier _ ":"? _ "{" _ items "}"
    items       = item*
    item        = entry _
    entry       = object / field

    field       = identifier _ ":" _ value
    value       = quoted / bare
    quoted      = ~r'"(?:\\.|[^"\\])*"'s
    bare        = ~r'[^\s{}"]+'

    identifier  = ~r"[A-Za-z_][A-Za-z0-9_.\-]*"
    _           = ~r"\s*"
''')


class CallGraphTreeBuilder(NodeVisitor):
    """Turns the parsimonious parse tree into :class:`RawObject` s."""

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_document(self, node, visited_children):
        _, obj, _ = visited_children
        return obj

    def visit_object(self, node, visited_children):
        kind, _, _, _, _, _, items, _ = visited_children
        return RawObject(kind=kind, items=tuple(items))

    def visit_items(self, node, visited_children):
        return list(visited_children)

    def visit_item(self, node, visited_children):
        entry, _ = visited_children
        return entry

    def visit_entry(self, node, visited_children):
        return visited_children[0]

    def visit_field(self, node, visited_children):
        key, _, _, _, value = visited_children
        return Field(key=key, value=value)

    def visit_value(self, node, visited_children):
        return visited_children[0]

    def visit_quoted(self, node, visited_children):
        return node.text[1:-1]

    def visit_bare(self, node, visited_children):
        return node.text

    def visit_identifier(self, node, visited_children):
        return node.text


def nesting_depth(text: str) -> int:
    """Deepest ``{`` nesting in *text*, not counting braces inside quotes."""
    depth = deepest = 0
    for match in _BRACE.finditer(_QUOTED.sub("", text)):
        if match.group() == "{":
            depth += 1
            deepest = max(deepest, depth)
        else:
            depth -= 1
    return deepest


def parse_text(text: str, source: Optional[str] = None) -> RawObject:
    """Parse a whole dump into its top-level :class:`RawObject`.

    Parameters
    ----------
    text : str
        The dump contents.
    source : str, optional
        File name used in error messages.

    Raises
    ------
    DumpSyntaxError
        If *text* does not match the grammar in full.
    """
    # Both the parser and the visitor recurse once per nesting level.
    sys_limit = sys.getrecursionlimit()
    needed = nesting_depth(text) * _FRAMES_PER_LEVEL + _FRAME_HEADROOM
    if needed > sys_limit:
        sys.setrecursionlimit(needed)
    try:
        tree = CALLGRAPH_GRAMMAR.parse(text)
        return CallGraphTreeBuilder().visit(tree)
    except ParseError as exc:
        excerpt = exc.text[exc.pos:exc.pos + 20]
        raise DumpSyntaxError(
            f"Syntax error in call-graph dump near {excerpt!r}",
            path=source,
            line=exc.line(),
            column=exc.column(),
            excerpt=excerpt,
        ) from exc
    except RecursionError as exc:
        raise DumpSyntaxError(
            "Call-graph dump is nested too deeply to parse",
            path=source,
        ) from exc
    finally:
        sys.setrecursionlimit(sys_limit)


def parse_path(
    path: Union[str, Path],
    encoding: str = DEFAULT_ENCODING,
) -> RawObject:
    """Read and parse one dump file."""
    p = Path(path)
    logger.debug("Parsing call-graph dump %s", p)
    return parse_text(p.read_text(encoding=encoding), source=str(p))
