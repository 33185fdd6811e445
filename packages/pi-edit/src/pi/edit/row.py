"""A single logical line of the text buffer.

Each ``Row`` owns its raw content (``chars``) and a derived, tab-expanded
``render`` form that is regenerated on every mutation. Buffer columns
(``cx``) count raw characters; render columns (``rx``) count screen cells
after tab expansion. Every character other than a tab occupies one cell.
"""

from __future__ import annotations

TAB_STOP = 8


def expand_tabs(chars: str, tab_stop: int = TAB_STOP) -> str:
    """Return *chars* with each tab padded out to the next tab stop."""
    if "\t" not in chars:
        return chars
    out: list[str] = []
    col = 0
    for ch in chars:
        if ch == "\t":
            out.append(" ")
            col += 1
            while col % tab_stop != 0:
                out.append(" ")
                col += 1
        else:
            out.append(ch)
            col += 1
    return "".join(out)


def cx_to_rx(chars: str, cx: int, tab_stop: int = TAB_STOP) -> int:
    """Convert buffer column *cx* into a render column."""
    rx = 0
    for ch in chars[:cx]:
        if ch == "\t":
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


def rx_to_cx(chars: str, rx: int, tab_stop: int = TAB_STOP) -> int:
    """Convert render column *rx* back into a buffer column.

    Returns the index of the character whose cells cover *rx*, or
    ``len(chars)`` when *rx* lies at or beyond the end of the line.
    """
    cur_rx = 0
    for cx, ch in enumerate(chars):
        if ch == "\t":
            cur_rx += (tab_stop - 1) - (cur_rx % tab_stop)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return len(chars)


class Row:
    """One line of text plus its rendered form."""

    __slots__ = ("_chars", "_render", "tab_stop")

    def __init__(self, chars: str = "", *, tab_stop: int = TAB_STOP) -> None:
        self.tab_stop = tab_stop
        self._chars = chars
        self._render = expand_tabs(chars, tab_stop)

    def __repr__(self) -> str:
        return f"Row({self._chars!r})"

    def __len__(self) -> int:
        return len(self._chars)

    @property
    def chars(self) -> str:
        return self._chars

    @chars.setter
    def chars(self, value: str) -> None:
        # The render form is never allowed to go stale.
        self._chars = value
        self._render = expand_tabs(value, self.tab_stop)

    @property
    def render(self) -> str:
        return self._render

    @property
    def size(self) -> int:
        return len(self._chars)

    @property
    def rsize(self) -> int:
        return len(self._render)

    def cx_to_rx(self, cx: int) -> int:
        return cx_to_rx(self._chars, cx, self.tab_stop)

    def rx_to_cx(self, rx: int) -> int:
        return rx_to_cx(self._chars, rx, self.tab_stop)

    # -- mutation -----------------------------------------------------------

    def insert_char(self, at: int, ch: str) -> None:
        """Insert *ch* before index *at*; out-of-range *at* appends."""
        if at < 0 or at > len(self._chars):
            at = len(self._chars)
        self.chars = self._chars[:at] + ch + self._chars[at:]

    def delete_char(self, at: int) -> bool:
        """Remove the character at *at*. Returns ``False`` when out of range."""
        if at < 0 or at >= len(self._chars):
            return False
        self.chars = self._chars[:at] + self._chars[at + 1 :]
        return True

    def append(self, text: str) -> None:
        self.chars = self._chars + text

    def truncate(self, at: int) -> str:
        """Cut the row at *at* and return the removed tail."""
        tail = self._chars[at:]
        self.chars = self._chars[:at]
        return tail
