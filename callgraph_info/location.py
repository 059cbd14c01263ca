"""
callgraph_info.location
=======================

Source locations as written by GCC: ``path:line:column`` optionally
followed by ``:anything``.  The same shape is used by call-graph labels
and by the first column of ``*.su`` stack-usage records, so a
:class:`Location` is the join key between the two.

Windows paths start with a drive letter (``C:\\src\\a.c:3:4``); a
single-character head is therefore re-joined with the next segment.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import LocationError


def _parse_number(text: str, what: str, source: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise LocationError(
            f"Invalid {what} {text!r} in location {source!r}", text=source
        )
    return int(text)


@dataclass(frozen=True, order=True)
class Location:
    """A definition site or call site.

    Ordered by ``(file, line, column)``.
    """

    file: str
    line: int = 0
    column: int = 0

    @classmethod
    def parse(cls, text: str) -> Optional[Tuple["Location", str]]:
        """Parse ``path:line[:column[:rest]]``.

        Returns the location together with the unconsumed text after the
        column, or ``None`` when *text* has no location shape at all.

        Raises
        ------
        LocationError
            If the line or column field is present but not a
            non-negative integer.
        """
        head, sep, rest = text.partition(":")
        if not sep or not head:
            return None

        if len(head) == 1:
            # drive letter
            segment, sep, rest = rest.partition(":")
            if not sep:
                return None
            path = head + ":" + segment
        else:
            path = head

        line_text, sep, rest = rest.partition(":")
        if sep:
            column_text, _, rest = rest.partition(":")
        else:
            column_text = ""

        line = _parse_number(line_text, "line number", text)
        column = _parse_number(column_text, "column", text) if column_text else 0
        return cls(path, line, column), rest

    @classmethod
    def from_string(cls, text: str) -> Optional["Location"]:
        """Like :meth:`parse` but drop the trailing text."""
        parsed = cls.parse(text)
        return parsed[0] if parsed is not None else None

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
