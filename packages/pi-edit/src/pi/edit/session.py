"""Editor session: owns the buffer and viewport and drives the main loop.

One ``EditorSession`` is created per process. It reads keys through the
``KeyDecoder``, dispatches them to buffer edits or cursor movement via
the keybindings manager, and redraws a full frame before every read.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from pi.edit import __version__
from pi.edit.files import encode, load_lines, write_bytes
from pi.edit.key_decoder import KeyDecoder
from pi.edit.keybindings import EditorKeybindingsManager
from pi.edit.keys import Key, is_insertable
from pi.edit.prompt import Prompt, PromptResult
from pi.edit.renderer import Renderer, StatusMessage
from pi.edit.search import SearchController
from pi.edit.settings import EditorSettings
from pi.edit.terminal import Terminal
from pi.edit.text_buffer import TextBuffer
from pi.edit.viewport import Viewport

logger = logging.getLogger(__name__)

# Rows taken by the status bar and the message bar.
STATUS_ROWS = 2

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"
SAVE_AS_PROMPT = "Save as: {} (ESC to cancel)"
QUIT_WARNING = (
    "WARNING!!! File has unsaved changes. Press Ctrl-Q {} more times to quit."
)


class EditorSession:
    def __init__(
        self,
        terminal: Terminal,
        *,
        settings: EditorSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.terminal = terminal
        self.settings = settings or EditorSettings()
        self._clock = clock

        self.buffer = TextBuffer(tab_stop=self.settings.tab_stop)
        self.keybindings = EditorKeybindingsManager(self.settings.keybindings)
        self.decoder = KeyDecoder()
        self.renderer = Renderer(
            welcome=f"pi-edit -- version {__version__}",
            message_timeout=self.settings.message_timeout,
            clock=clock,
        )

        self.filename: str | None = None
        self.status = StatusMessage("", 0.0)
        self.quit_times = self.settings.quit_times
        self._resized = False

        self.viewport = Viewport(1, 1)
        self.update_window_size()

    @property
    def dirty(self) -> int:
        return self.buffer.dirty

    # -- status / window ----------------------------------------------------

    def set_status_message(self, text: str) -> None:
        self.status = StatusMessage(text, self._clock())

    def update_window_size(self) -> None:
        rows, cols = self.terminal.get_window_size()
        self.viewport.resize(rows - STATUS_ROWS, cols)
        logger.debug("Window size %dx%d", cols, rows)

    def request_resize(self) -> None:
        """Signal-safe: only flags the resize for the main loop."""
        self._resized = True

    # -- file operations ----------------------------------------------------

    def open(self, filename: str) -> None:
        """Load *filename* into the buffer. ``OSError`` propagates."""
        self.filename = filename
        self.buffer.load(load_lines(filename))
        logger.info("Opened %s (%d lines)", filename, self.buffer.numrows)

    def save(self) -> None:
        if self.filename is None:
            self.filename = self.prompt(SAVE_AS_PROMPT)
            if self.filename is None:
                self.set_status_message("Save aborted")
                return

        data = encode(self.buffer.rows_to_flat_text())
        try:
            written = write_bytes(self.filename, data)
        except OSError as e:
            logger.warning("Saving %s failed: %s", self.filename, e)
            self.set_status_message(f"Can't save! I/O error: {e.strerror or e}")
            return

        self.buffer.dirty = 0
        logger.info("Wrote %d bytes to %s", written, self.filename)
        self.set_status_message(f"{written} bytes written to disk")

    def find(self) -> str | None:
        return SearchController(self).run()

    # -- input --------------------------------------------------------------

    def read_key(self) -> str | None:
        """Wait for the next key; ``None`` means the window was resized."""
        while True:
            key = self.decoder.read_key(self.terminal.read_byte)
            if key is not None:
                return key
            if self._resized:
                return None

    def prompt(
        self,
        template: str,
        on_key: Callable[[str, str], None] | None = None,
    ) -> str | None:
        """Read a line in the message bar. Returns ``None`` when cancelled.

        *on_key* is called with ``(value, key)`` after every key.
        """
        prompt = Prompt(template, self.keybindings)
        while True:
            self.set_status_message(prompt.text())
            self.refresh_screen()

            key = self.read_key()
            if key is None:
                continue
            result = prompt.handle_key(key)
            if on_key is not None:
                on_key(prompt.value, key)

            if result is PromptResult.CANCELLED:
                self.set_status_message("")
                return None
            if result is PromptResult.SUBMITTED:
                self.set_status_message("")
                return prompt.value

    def process_keypress(self, key: str) -> bool:
        """Apply one key. Returns ``False`` when the editor should quit."""
        kb = self.keybindings
        viewport = self.viewport
        buffer = self.buffer

        if kb.matches(key, "quit"):
            if self.dirty and self.quit_times > 0:
                self.set_status_message(QUIT_WARNING.format(self.quit_times))
                self.quit_times -= 1
                return True
            return False

        if kb.matches(key, "save"):
            self.save()
        elif kb.matches(key, "find"):
            self.find()
        elif kb.matches(key, "newLine"):
            viewport.cy, viewport.cx = buffer.insert_newline(viewport.cy, viewport.cx)
        elif kb.matches(key, "deleteCharBackward"):
            viewport.cy, viewport.cx = buffer.delete_char(viewport.cy, viewport.cx)
        elif kb.matches(key, "deleteCharForward"):
            viewport.move_cursor(Key.right, buffer)
            viewport.cy, viewport.cx = buffer.delete_char(viewport.cy, viewport.cx)
        elif kb.matches(key, "cursorLineStart"):
            viewport.line_start()
        elif kb.matches(key, "cursorLineEnd"):
            viewport.line_end(buffer)
        elif kb.matches(key, "pageUp"):
            viewport.page(Key.page_up, buffer)
        elif kb.matches(key, "pageDown"):
            viewport.page(Key.page_down, buffer)
        elif kb.matches(key, "cursorUp"):
            viewport.move_cursor(Key.up, buffer)
        elif kb.matches(key, "cursorDown"):
            viewport.move_cursor(Key.down, buffer)
        elif kb.matches(key, "cursorLeft"):
            viewport.move_cursor(Key.left, buffer)
        elif kb.matches(key, "cursorRight"):
            viewport.move_cursor(Key.right, buffer)
        elif kb.matches(key, "refresh"):
            pass
        elif is_insertable(key):
            viewport.cy, viewport.cx = buffer.insert_char(viewport.cy, viewport.cx, key)

        self.quit_times = self.settings.quit_times
        return True

    # -- output -------------------------------------------------------------

    def refresh_screen(self) -> None:
        if self._resized:
            self._resized = False
            self.update_window_size()
        self.viewport.scroll(self.buffer)
        frame = self.renderer.draw_frame(
            self.buffer,
            self.viewport,
            filename=self.filename,
            message=self.status,
        )
        self.terminal.write(frame)

    # -- main loop ----------------------------------------------------------

    def run(self) -> None:
        """Redraw and process keys until the quit key is accepted."""
        self.terminal.set_resize_handler(self.request_resize)
        try:
            while True:
                self.refresh_screen()
                key = self.read_key()
                if key is None:
                    continue
                if not self.process_keypress(key):
                    break
        finally:
            self.terminal.set_resize_handler(None)
        self.terminal.clear_screen()
