"""Incremental search.

``SearchSession`` is the per-prompt state object. It remembers where the
cursor was when the search started, the row of the last hit and the scan
direction. ``step`` is fed every key the prompt receives together with
the current query and moves the viewport to the next hit, if any.

``SearchController`` wires a ``SearchSession`` to the session's prompt
loop.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from pi.edit.keybindings import EditorKeybindingsManager
from pi.edit.text_buffer import TextBuffer
from pi.edit.viewport import Viewport, ViewportState

if TYPE_CHECKING:
    from pi.edit.session import EditorSession

SEARCH_PROMPT = "Search: {} (Use ESC/Arrows/Enter)"

FORWARD = 1
BACKWARD = -1


class SearchState(enum.Enum):
    IDLE = "idle"
    PROMPTING = "prompting"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class SearchSession:
    def __init__(self, keybindings: EditorKeybindingsManager) -> None:
        self._keybindings = keybindings
        self.state = SearchState.IDLE
        self.saved: ViewportState | None = None
        self.last_match: int | None = None
        self.direction = FORWARD

    def begin(self, viewport: Viewport) -> None:
        self.saved = viewport.save()
        self.last_match = None
        self.direction = FORWARD
        self.state = SearchState.PROMPTING

    def commit(self) -> None:
        self.state = SearchState.COMMITTED

    def cancel(self, viewport: Viewport) -> None:
        if self.saved is not None:
            viewport.restore(self.saved)
        self.state = SearchState.CANCELLED

    def step(
        self, query: str, key: str, buffer: TextBuffer, viewport: Viewport
    ) -> int | None:
        """Advance the search after *key*; return the matched row or ``None``."""
        kb = self._keybindings

        if kb.matches(key, "promptSubmit") or kb.matches(key, "promptCancel"):
            self.last_match = None
            self.direction = FORWARD
            return None
        if kb.matches(key, "searchNext"):
            self.direction = FORWARD
        elif kb.matches(key, "searchPrevious"):
            self.direction = BACKWARD
        else:
            self.last_match = None
            self.direction = FORWARD

        if self.last_match is None:
            self.direction = FORWARD
        if not query:
            return None

        numrows = buffer.numrows
        current = -1 if self.last_match is None else self.last_match
        for _ in range(numrows):
            current += self.direction
            if current == -1:
                current = numrows - 1
            elif current == numrows:
                current = 0

            row = buffer[current]
            offset = row.render.find(query)
            if offset != -1:
                self.last_match = current
                viewport.cy = current
                viewport.cx = row.rx_to_cx(offset)
                viewport.scroll_to_top(buffer)
                return current
        return None


class SearchController:
    """Runs one search prompt against an editor session."""

    def __init__(self, session: EditorSession) -> None:
        self._session = session
        self.search = SearchSession(session.keybindings)

    def run(self) -> str | None:
        session = self._session
        self.search.begin(session.viewport)

        def on_key(query: str, key: str) -> None:
            self.search.step(query, key, session.buffer, session.viewport)

        query = session.prompt(SEARCH_PROMPT, on_key)
        if query is None:
            self.search.cancel(session.viewport)
        else:
            self.search.commit()
        return query
