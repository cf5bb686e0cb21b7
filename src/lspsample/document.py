"""
In-memory model of one open text document.

The editor always sends the full content (``TextDocumentSyncKind.Full``), so a
``TextDocument`` never diffs: ``update`` swaps the text and drops the cached
line index, which is rebuilt lazily on the next position/offset conversion.
"""
from __future__ import annotations

from bisect import bisect_right

from lsprotocol import types as lsp


class LineIndex:
    """Sorted table of line-start offsets for a piece of text.

    A line starts at offset 0, after ``\\n``, after a lone ``\\r`` and after
    ``\\r\\n`` (one break, two characters).  Text ending in a break gets a
    final entry equal to ``len(text)``.  Empty text has no entries.

    Out-of-range input is clamped, never rejected.  ``offset_at`` only reads
    ``line`` and ``character``, so negative values from a drifting editor
    (which ``lsp.Position`` itself refuses) can be passed in any object
    carrying those two attributes.
    """

    def __init__(self, text: str):
        self._length = len(text)
        self._starts = _line_starts(text)

    def __len__(self) -> int:
        return len(self._starts)

    def position_at(self, offset: int) -> lsp.Position:
        offset = max(min(offset, self._length), 0)
        if not self._starts:
            return lsp.Position(line=0, character=offset)
        # greatest line whose start is <= offset
        line = bisect_right(self._starts, offset) - 1
        return lsp.Position(line=line, character=offset - self._starts[line])

    def offset_at(self, position: lsp.Position) -> int:
        starts = self._starts
        if position.line >= len(starts):
            return self._length
        if position.line < 0:
            return 0
        line_offset = starts[position.line]
        if position.line + 1 < len(starts):
            next_line_offset = starts[position.line + 1]
        else:
            next_line_offset = self._length
        return max(min(line_offset + position.character, next_line_offset), line_offset)


def _line_starts(text: str) -> list[int]:
    starts: list[int] = []
    at_line_start = True
    i = 0
    n = len(text)
    while i < n:
        if at_line_start:
            starts.append(i)
        ch = text[i]
        at_line_start = ch in '\r\n'
        if ch == '\r' and i + 1 < n and text[i + 1] == '\n':
            i += 1
        i += 1
    if at_line_start and n > 0:
        starts.append(n)
    return starts


class TextDocument:
    """One open file: URI, language id, version and full text."""

    def __init__(self, uri: str, language_id: str, version: int, text: str):
        self._uri = uri
        self._language_id = language_id
        self.version = version
        self._text = text
        self._line_index: LineIndex | None = None

    def __repr__(self) -> str:
        return f'TextDocument({self._uri!r}, version={self.version})'

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def language_id(self) -> str:
        return self._language_id

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_index(self) -> LineIndex:
        if self._line_index is None:
            self._line_index = LineIndex(self._text)
        return self._line_index

    @property
    def line_count(self) -> int:
        return len(self.line_index)

    def update(self, text: str, version: int) -> None:
        """Replace the whole content and bump the version."""
        self._text = text
        self.version = version
        self._line_index = None

    def get_text(self, range: lsp.Range | None = None) -> str:
        """Return the full text, or the slice covered by *range*.

        The end offset is inclusive: ``get_text`` returns
        ``text[start:end + 1]``, so the character *at* ``range.end`` is part of
        the result.  Callers holding a half-open range must pass an end one
        position earlier.
        """
        if range is None:
            return self._text
        start = self.offset_at(range.start)
        end = self.offset_at(range.end)
        return self._text[start:end + 1]

    def position_at(self, offset: int) -> lsp.Position:
        return self.line_index.position_at(offset)

    def offset_at(self, position: lsp.Position) -> int:
        return self.line_index.offset_at(position)
