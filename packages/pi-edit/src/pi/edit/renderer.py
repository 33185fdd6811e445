"""Full-frame renderer.

Every frame is built in memory and handed back as one string so the
caller can emit it with a single write:

1.  hide cursor, cursor home
2.  one line per screen row: buffer text (sliced by ``coloff``) or a
    ``~`` filler, each followed by erase-to-end-of-line
3.  inverse-video status bar
4.  message bar (only while the message is fresh)
5.  cursor placement, show cursor
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from pi.edit.text_buffer import TextBuffer
from pi.edit.utils import truncate_to_width, visible_width
from pi.edit.viewport import Viewport

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CURSOR_HOME = "\x1b[H"
ERASE_LINE = "\x1b[K"
INVERSE_ON = "\x1b[7m"
INVERSE_OFF = "\x1b[m"
CURSOR_POSITION_FMT = "\x1b[{};{}H"

NO_NAME = "[No Name]"
FILENAME_WIDTH = 20


@dataclass
class StatusMessage:
    """Message bar text and the time it was set."""

    text: str = ""
    timestamp: float = field(default_factory=time.time)


class Renderer:
    """Composes output frames from a buffer, a viewport and session status."""

    def __init__(
        self,
        *,
        welcome: str = "",
        message_timeout: float = 5.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.welcome = welcome
        self.message_timeout = message_timeout
        self._clock = clock

    def draw_frame(
        self,
        buffer: TextBuffer,
        viewport: Viewport,
        *,
        filename: str | None,
        message: StatusMessage,
    ) -> str:
        out: list[str] = [HIDE_CURSOR, CURSOR_HOME]
        self._draw_rows(out, buffer, viewport)
        self._draw_status_bar(out, buffer, viewport, filename)
        self._draw_message_bar(out, viewport, message)
        out.append(
            CURSOR_POSITION_FMT.format(
                viewport.cy - viewport.rowoff + 1,
                viewport.rx - viewport.coloff + 1,
            )
        )
        out.append(SHOW_CURSOR)
        return "".join(out)

    # -- sections -----------------------------------------------------------

    def _draw_rows(self, out: list[str], buffer: TextBuffer, viewport: Viewport) -> None:
        cols = viewport.screencols
        for y in range(viewport.screenrows):
            filerow = y + viewport.rowoff
            if filerow >= buffer.numrows:
                if buffer.numrows == 0 and y == viewport.screenrows // 3 and self.welcome:
                    out.append(self._welcome_line(cols))
                else:
                    out.append("~")
            else:
                render = buffer[filerow].render
                out.append(render[viewport.coloff : viewport.coloff + cols])
            out.append(ERASE_LINE)
            out.append("\r\n")

    def _welcome_line(self, cols: int) -> str:
        welcome = self.welcome[:cols]
        padding = (cols - len(welcome)) // 2
        line = ""
        if padding:
            line = "~"
            padding -= 1
        return line + " " * padding + welcome

    def _draw_status_bar(
        self,
        out: list[str],
        buffer: TextBuffer,
        viewport: Viewport,
        filename: str | None,
    ) -> None:
        cols = viewport.screencols
        name = truncate_to_width(filename or NO_NAME, FILENAME_WIDTH)
        modified = " (modified)" if buffer.dirty else ""
        status = truncate_to_width(f"{name} - {buffer.numrows} lines{modified}", cols)
        rstatus = f"{viewport.cy + 1}/{buffer.numrows}"

        out.append(INVERSE_ON)
        out.append(status)
        length = visible_width(status)
        while length < cols:
            if cols - length == len(rstatus):
                out.append(rstatus)
                break
            out.append(" ")
            length += 1
        out.append(INVERSE_OFF)
        out.append("\r\n")

    def _draw_message_bar(
        self, out: list[str], viewport: Viewport, message: StatusMessage
    ) -> None:
        out.append(ERASE_LINE)
        if message.text and self._clock() - message.timestamp < self.message_timeout:
            out.append(truncate_to_width(message.text, viewport.screencols))
