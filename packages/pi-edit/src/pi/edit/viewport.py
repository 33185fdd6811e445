"""Cursor position and the scroll window that keeps it visible.

``cx``/``cy`` are buffer coordinates. ``cy`` may equal ``numrows``, the
empty line past the end of the buffer. ``rx`` is derived from ``cx`` on
each :meth:`Viewport.scroll` pass and is never edited directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from pi.edit.keys import Key
from pi.edit.text_buffer import TextBuffer


@dataclass(frozen=True)
class ViewportState:
    """Snapshot of the cursor and scroll origin."""

    cx: int
    cy: int
    rowoff: int
    coloff: int


class Viewport:
    def __init__(self, screenrows: int, screencols: int) -> None:
        self.cx = 0
        self.cy = 0
        self.rx = 0
        self.rowoff = 0
        self.coloff = 0
        self.screenrows = max(screenrows, 1)
        self.screencols = max(screencols, 1)

    def resize(self, screenrows: int, screencols: int) -> None:
        self.screenrows = max(screenrows, 1)
        self.screencols = max(screencols, 1)

    # -- snapshots ----------------------------------------------------------

    def save(self) -> ViewportState:
        return ViewportState(self.cx, self.cy, self.rowoff, self.coloff)

    def restore(self, state: ViewportState) -> None:
        self.cx = state.cx
        self.cy = state.cy
        self.rowoff = state.rowoff
        self.coloff = state.coloff

    # -- scrolling ----------------------------------------------------------

    def scroll(self, buffer: TextBuffer) -> None:
        """Recompute ``rx`` and clamp the scroll origin around the cursor."""
        self.rx = 0
        if self.cy < buffer.numrows:
            self.rx = buffer[self.cy].cx_to_rx(self.cx)

        if self.cy < self.rowoff:
            self.rowoff = self.cy
        if self.cy >= self.rowoff + self.screenrows:
            self.rowoff = self.cy - self.screenrows + 1
        if self.rx < self.coloff:
            self.coloff = self.rx
        if self.rx >= self.coloff + self.screencols:
            self.coloff = self.rx - self.screencols + 1

    def scroll_to_top(self, buffer: TextBuffer) -> None:
        """Make the next scroll pass put the cursor row at the top of the window."""
        self.rowoff = buffer.numrows

    # -- cursor movement ----------------------------------------------------

    def move_cursor(self, key: str, buffer: TextBuffer) -> None:
        """Move one step in the direction of an arrow *key*."""
        numrows = buffer.numrows
        on_row = self.cy < numrows

        if key == Key.left:
            if self.cx != 0:
                self.cx -= 1
            elif self.cy > 0:
                self.cy -= 1
                self.cx = buffer[self.cy].size
        elif key == Key.right:
            if on_row and self.cx < buffer[self.cy].size:
                self.cx += 1
            elif on_row and self.cx == buffer[self.cy].size:
                self.cy += 1
                self.cx = 0
        elif key == Key.up:
            if self.cy != 0:
                self.cy -= 1
        elif key == Key.down:
            if self.cy < numrows:
                self.cy += 1

        rowlen = buffer.row_size(self.cy)
        if self.cx > rowlen:
            self.cx = rowlen

    def line_start(self) -> None:
        self.cx = 0

    def line_end(self, buffer: TextBuffer) -> None:
        if self.cy < buffer.numrows:
            self.cx = buffer[self.cy].size

    def page(self, key: str, buffer: TextBuffer) -> None:
        """Move a screenful up (``Key.page_up``) or down (``Key.page_down``)."""
        if key == Key.page_up:
            self.cy = self.rowoff
            step = Key.up
        else:
            self.cy = min(self.rowoff + self.screenrows - 1, buffer.numrows)
            step = Key.down
        for _ in range(self.screenrows):
            self.move_cursor(step, buffer)
