"""Finite-state decoder turning raw input bytes into logical keys.

The byte source used by :meth:`KeyDecoder.read_key` returns ``None`` when
no byte arrived within its read timeout. An escape prefix that is not
completed before such a timeout resolves to :attr:`Key.escape`, so a lone
Esc press is never held back waiting for more input.

Recognised sequences::

    ESC [ A|B|C|D|H|F         arrows, home, end
    ESC [ 1|3|4|5|6|7|8 ~     home, delete, end, page up/down, home, end
    ESC O H|F                 home, end

Anything else after ESC collapses to a single ``"escape"`` key.
"""

from __future__ import annotations

import enum
from typing import Callable, Optional

from pi.edit.files import decode
from pi.edit.keys import ESC, Key

ByteSource = Callable[[], Optional[int]]


class DecoderState(enum.Enum):
    NORMAL = "normal"
    ESCAPE_SEEN = "escape_seen"
    CSI = "csi"
    CSI_NUMERIC = "csi_numeric"
    SS3 = "ss3"
    DISCARD = "discard"


# Final byte of ``ESC [ <final>``
CSI_FINAL_KEYS: dict[str, str] = {
    "A": Key.up,
    "B": Key.down,
    "C": Key.right,
    "D": Key.left,
    "H": Key.home,
    "F": Key.end,
}

# Parameter digit of ``ESC [ <digit> ~``
CSI_TILDE_KEYS: dict[str, str] = {
    "1": Key.home,
    "3": Key.delete,
    "4": Key.end,
    "5": Key.page_up,
    "6": Key.page_down,
    "7": Key.home,
    "8": Key.end,
}

# Final byte of ``ESC O <final>``
SS3_FINAL_KEYS: dict[str, str] = {
    "H": Key.home,
    "F": Key.end,
}


def byte_to_char(byte: int) -> str:
    """Map one input byte to a one-character string.

    Uses the same byte-per-character codec as file loading, so a typed
    byte and the same byte read from disk are the same buffer character.
    """
    return decode(bytes([byte]))


class KeyDecoder:
    """Escape-sequence state machine.

    ``feed`` consumes one byte and returns a key once the sequence is
    resolved, else ``None``. ``timeout`` resolves a pending prefix.
    """

    def __init__(self) -> None:
        self.state: DecoderState = DecoderState.NORMAL
        self._param: str = ""
        self._transitions: dict[DecoderState, Callable[[str], str | None]] = {
            DecoderState.NORMAL: self._on_normal,
            DecoderState.ESCAPE_SEEN: self._on_escape_seen,
            DecoderState.CSI: self._on_csi,
            DecoderState.CSI_NUMERIC: self._on_csi_numeric,
            DecoderState.SS3: self._on_ss3,
            DecoderState.DISCARD: self._on_discard,
        }

    @property
    def pending(self) -> bool:
        return self.state is not DecoderState.NORMAL

    def reset(self) -> None:
        self.state = DecoderState.NORMAL
        self._param = ""

    def feed(self, byte: int) -> str | None:
        return self._transitions[self.state](byte_to_char(byte))

    def timeout(self) -> str | None:
        """Called when the byte source ran dry mid-sequence."""
        if not self.pending:
            return None
        return self._resolve(Key.escape)

    def read_key(self, read_byte: ByteSource) -> str | None:
        """Read bytes from *read_byte* until one key is decoded.

        Returns ``None`` when no byte at all is available, which callers
        treat as "no key yet".
        """
        byte = read_byte()
        if byte is None:
            return None
        key = self.feed(byte)
        while key is None:
            byte = read_byte()
            if byte is None:
                return self.timeout()
            key = self.feed(byte)
        return key

    # -- transitions --------------------------------------------------------

    def _resolve(self, key: str) -> str:
        self.reset()
        return key

    def _on_normal(self, ch: str) -> str | None:
        if ch == ESC:
            self.state = DecoderState.ESCAPE_SEEN
            return None
        return ch

    def _on_escape_seen(self, ch: str) -> str | None:
        if ch == "[":
            self.state = DecoderState.CSI
        elif ch == "O":
            self.state = DecoderState.SS3
        else:
            # Escape sequences are always two bytes past ESC here.
            self.state = DecoderState.DISCARD
        return None

    def _on_csi(self, ch: str) -> str | None:
        if ch.isascii() and ch.isdigit():
            self._param = ch
            self.state = DecoderState.CSI_NUMERIC
            return None
        return self._resolve(CSI_FINAL_KEYS.get(ch, Key.escape))

    def _on_csi_numeric(self, ch: str) -> str | None:
        if ch == "~":
            return self._resolve(CSI_TILDE_KEYS.get(self._param, Key.escape))
        return self._resolve(Key.escape)

    def _on_ss3(self, ch: str) -> str | None:
        return self._resolve(SS3_FINAL_KEYS.get(ch, Key.escape))

    def _on_discard(self, ch: str) -> str | None:
        return self._resolve(Key.escape)
