"""Ordered collection of rows with index-based editing operations.

``TextBuffer`` is the exclusive owner of its ``Row`` objects. Editing
operations that move the cursor take the current ``(cy, cx)`` and return
the new position; the caller decides where to store it.

``dirty`` counts content mutations since the last load or save.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from pi.edit.row import TAB_STOP, Row

LINE_TERMINATOR = "\n"


class TextBuffer:
    """An ordered sequence of :class:`Row` objects."""

    def __init__(self, *, tab_stop: int = TAB_STOP) -> None:
        self.tab_stop = tab_stop
        self._rows: list[Row] = []
        self.dirty: int = 0

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, index: int) -> Row:
        if index < 0 or index >= len(self._rows):
            raise IndexError(f"row index {index} out of range")
        return self._rows[index]

    @property
    def numrows(self) -> int:
        return len(self._rows)

    def row_size(self, cy: int) -> int:
        """Length of row *cy*, or 0 for the past-the-end sentinel row."""
        if 0 <= cy < len(self._rows):
            return self._rows[cy].size
        return 0

    # -- bulk load / save ---------------------------------------------------

    def load(self, lines: Iterable[str]) -> None:
        """Replace the contents with *lines* and mark the buffer clean."""
        self._rows = []
        for line in lines:
            self.insert_row(len(self._rows), line)
        self.dirty = 0

    def lines(self) -> list[str]:
        return [row.chars for row in self._rows]

    def rows_to_flat_text(self) -> str:
        """Concatenate every row, each followed by a line terminator."""
        return "".join(row.chars + LINE_TERMINATOR for row in self._rows)

    # -- row operations -----------------------------------------------------

    def insert_row(self, at: int, content: str) -> None:
        if at < 0 or at > len(self._rows):
            return
        self._rows.insert(at, Row(content, tab_stop=self.tab_stop))
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= len(self._rows):
            return
        del self._rows[at]
        self.dirty += 1

    # -- editing operations -------------------------------------------------

    def insert_char(self, cy: int, cx: int, ch: str) -> tuple[int, int]:
        """Insert *ch* at ``(cy, cx)``; typing past the last line creates it."""
        if cy == len(self._rows):
            self.insert_row(len(self._rows), "")
        row = self._rows[cy]
        if cx < 0 or cx > row.size:
            cx = row.size
        row.insert_char(cx, ch)
        self.dirty += 1
        return cy, cx + 1

    def insert_newline(self, cy: int, cx: int) -> tuple[int, int]:
        """Break the line at ``(cy, cx)`` and return the start of the next line."""
        if cx == 0:
            self.insert_row(cy, "")
        else:
            tail = self._rows[cy].truncate(cx)
            self.insert_row(cy + 1, tail)
        return cy + 1, 0

    def delete_char(self, cy: int, cx: int) -> tuple[int, int]:
        """Delete the character left of ``(cy, cx)``, joining lines at column 0."""
        if cy >= len(self._rows):
            return cy, cx
        if cx == 0 and cy == 0:
            return cy, cx

        row = self._rows[cy]
        if cx > 0:
            if not row.delete_char(cx - 1):
                return cy, cx
            self.dirty += 1
            return cy, cx - 1

        prev = self._rows[cy - 1]
        join_at = prev.size
        prev.append(row.chars)
        self.dirty += 1
        self.delete_row(cy)
        return cy - 1, join_at
