"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that switches the controlling terminal into raw mode,
reads single bytes with a short timeout, queries the window size and
writes whole frames.
"""

from __future__ import annotations

import errno
import logging
import os
import re
import signal
import sys
import termios
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_CURSOR_TO_BOTTOM_RIGHT = "\x1b[999C\x1b[999B"
_CURSOR_POSITION_QUERY = "\x1b[6n"

_CURSOR_POSITION_RE = re.compile(r"^\x1b\[(\d+);(\d+)$")

# termios attribute list indices
_IFLAG, _OFLAG, _CFLAG, _LFLAG, _CC = 0, 1, 2, 3, 6


class TerminalError(Exception):
    """Unrecoverable terminal failure, tagged with the failing operation."""

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        reason = ""
        if isinstance(cause, OSError) and cause.strerror:
            reason = cause.strerror
        elif cause is not None:
            reason = str(cause)
        super().__init__(f"{operation}: {reason}" if reason else operation)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self) -> None: ...

    def set_resize_handler(self, handler: Callable[[], None] | None) -> None: ...

    def stop(self) -> None: ...

    def read_byte(self) -> int | None: ...

    def write(self, data: str) -> None: ...

    def get_window_size(self) -> tuple[int, int]: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by the process's stdin/stdout descriptors.

    ``read_byte`` returns ``None`` when nothing arrived within the
    terminal's read timeout (a tenth of a second in raw mode).
    """

    def __init__(self, in_fd: int | None = None, out_fd: int | None = None) -> None:
        self._in_fd = sys.stdin.fileno() if in_fd is None else in_fd
        self._out_fd = sys.stdout.fileno() if out_fd is None else out_fd
        self._original_termios: list | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Switch the terminal into raw mode."""
        self.enable_raw_mode()

    def set_resize_handler(self, handler: Callable[[], None] | None) -> None:
        """Call *handler* whenever the window is resized (SIGWINCH)."""
        if handler is None:
            self._restore_sigwinch()
            return
        if self._prev_sigwinch_handler is None:
            self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        self._resize_handler = handler
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

    def stop(self) -> None:
        """Restore the signal handler and the original terminal attributes."""
        self._restore_sigwinch()
        self.disable_raw_mode()

    def _restore_sigwinch(self) -> None:
        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None
        self._resize_handler = None

    def enable_raw_mode(self) -> None:
        try:
            self._original_termios = termios.tcgetattr(self._in_fd)
        except termios.error as e:
            raise TerminalError("tcgetattr", _termios_cause(e)) from e

        raw = termios.tcgetattr(self._in_fd)
        raw[_IFLAG] &= ~(
            termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
        )
        raw[_OFLAG] &= ~termios.OPOST
        raw[_CFLAG] |= termios.CS8
        raw[_LFLAG] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[_CC][termios.VMIN] = 0
        raw[_CC][termios.VTIME] = 1

        try:
            termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, raw)
        except termios.error as e:
            raise TerminalError("tcsetattr", _termios_cause(e)) from e

    def disable_raw_mode(self) -> None:
        if self._original_termios is None:
            return
        original, self._original_termios = self._original_termios, None
        try:
            termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, original)
        except termios.error as e:
            raise TerminalError("tcsetattr", _termios_cause(e)) from e

    # -- input --------------------------------------------------------------

    def read_byte(self) -> int | None:
        try:
            data = os.read(self._in_fd, 1)
        except OSError as e:
            if e.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalError("read", e) from e
        if not data:
            return None
        return data[0]

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write *data* to the terminal in one call."""
        payload = memoryview(data.encode("utf-8", errors="surrogateescape"))
        try:
            while payload:
                written = os.write(self._out_fd, payload)
                payload = payload[written:]
        except OSError as e:
            raise TerminalError("write", e) from e

    def clear_screen(self) -> None:
        self.write(_CLEAR_SCREEN)

    # -- window size --------------------------------------------------------

    def get_window_size(self) -> tuple[int, int]:
        """Return ``(rows, columns)`` of the terminal window."""
        try:
            size = os.get_terminal_size(self._out_fd)
        except OSError:
            size = None
        if size is not None and size.columns > 0:
            return size.lines, size.columns

        logger.debug("Window size ioctl unavailable, probing cursor position")
        try:
            self.write(_CURSOR_TO_BOTTOM_RIGHT)
            return self.get_cursor_position()
        except TerminalError as e:
            raise TerminalError("getWindowSize", e.cause) from e

    def get_cursor_position(self) -> tuple[int, int]:
        self.write(_CURSOR_POSITION_QUERY)
        reply: list[str] = []
        while len(reply) < 31:
            byte = self.read_byte()
            if byte is None or byte == ord("R"):
                break
            reply.append(chr(byte))
        return parse_cursor_position("".join(reply))

    # -- private: SIGWINCH -------------------------------------------------

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        if self._resize_handler is not None:
            self._resize_handler()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_cursor_position(reply: str) -> tuple[int, int]:
    """Parse a ``ESC [ rows ; cols`` cursor report (without the final ``R``)."""
    match = _CURSOR_POSITION_RE.match(reply)
    if not match:
        raise TerminalError("getCursorPosition", ValueError(f"bad reply {reply!r}"))
    return int(match.group(1)), int(match.group(2))


def _termios_cause(error: termios.error) -> OSError:
    # termios.error carries (errno, message) but is not an OSError.
    if len(error.args) >= 2 and isinstance(error.args[0], int):
        return OSError(error.args[0], error.args[1])
    return OSError(str(error))
