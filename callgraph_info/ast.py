"""
callgraph_info.ast
==================

The generic tree produced by :mod:`callgraph_info.grammar`.

A dump is one :class:`RawObject` whose ``items`` are either
:class:`Field` (``key: value``) or nested :class:`RawObject` s.  Nothing
here knows what ``graph``, ``node`` or ``edge`` mean; that is the job of
:mod:`callgraph_info.ingest`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Field:
    """A ``key: value`` pair.  Both sides are raw source text."""

    key: str
    value: str


@dataclass(frozen=True)
class RawObject:
    """A ``kind: { ... }`` block."""

    kind: str
    items: Tuple["Item", ...] = ()

    def fields(self) -> Dict[str, str]:
        return field_map(self.items)

    def children(self, kind: Optional[str] = None) -> List["RawObject"]:
        """Nested objects, optionally only those of *kind*."""
        if kind is None:
            return [item for item in self.items if isinstance(item, RawObject)]
        return objects_of_kind(self.items, kind)


Item = Union[Field, RawObject]


def field_map(items: Iterable[Item]) -> Dict[str, str]:
    """Project the ``Field`` items to a dict.

    Nested objects are skipped.  When a key repeats, the later value wins.
    """
    return {item.key: item.value for item in items if isinstance(item, Field)}


def objects_of_kind(items: Iterable[Item], kind: str) -> List[RawObject]:
    """Nested objects whose kind is *kind*, in encounter order."""
    return [
        item for item in items
        if isinstance(item, RawObject) and item.kind == kind
    ]
