"""Tests for pi.edit.search -- incremental search state machine."""

from __future__ import annotations

from pi.edit.keybindings import EditorKeybindingsManager
from pi.edit.keys import Key
from pi.edit.search import BACKWARD, FORWARD, SearchSession, SearchState
from pi.edit.text_buffer import TextBuffer
from pi.edit.viewport import Viewport, ViewportState

KEY_ENTER = "\r"


def make_buffer(*lines: str) -> TextBuffer:
    buf = TextBuffer()
    buf.load(lines)
    return buf


def start(buf: TextBuffer, vp: Viewport | None = None) -> tuple[SearchSession, Viewport]:
    vp = vp or Viewport(10, 40)
    search = SearchSession(EditorKeybindingsManager())
    search.begin(vp)
    return search, vp


def type_query(search: SearchSession, query: str, buf: TextBuffer, vp: Viewport) -> int | None:
    """Type *query* one key at a time, as the prompt would report it."""
    hit = None
    for i, ch in enumerate(query):
        hit = search.step(query[: i + 1], ch, buf, vp)
    return hit


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestSearchLifecycle:
    def test_begin_saves_state(self) -> None:
        buf = make_buffer("a", "b")
        vp = Viewport(10, 40)
        vp.cy, vp.cx, vp.rowoff, vp.coloff = 1, 1, 0, 0
        search, _ = start(buf, vp)
        assert search.state is SearchState.PROMPTING
        assert search.saved == ViewportState(cx=1, cy=1, rowoff=0, coloff=0)
        assert search.last_match is None
        assert search.direction == FORWARD

    def test_cancel_restores_cursor_and_scroll(self) -> None:
        buf = make_buffer(*[f"line {i}" for i in range(40)] + ["needle"])
        vp = Viewport(10, 40)
        vp.cy, vp.cx, vp.rowoff, vp.coloff = 3, 2, 1, 0
        search, _ = start(buf, vp)
        assert type_query(search, "needle", buf, vp) == 40
        vp.scroll(buf)
        assert vp.cy == 40

        search.cancel(vp)
        assert search.state is SearchState.CANCELLED
        assert (vp.cx, vp.cy, vp.rowoff, vp.coloff) == (2, 3, 1, 0)

    def test_commit_keeps_position(self) -> None:
        buf = make_buffer("abc", "xyz")
        search, vp = start(buf)
        type_query(search, "yz", buf, vp)
        search.commit()
        assert search.state is SearchState.COMMITTED
        assert (vp.cy, vp.cx) == (1, 1)


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


class TestSearchStep:
    def test_wraps_forward(self) -> None:
        buf = make_buffer("foo", "bar", "foo")
        search, vp = start(buf)
        assert type_query(search, "foo", buf, vp) == 0
        assert search.step("foo", Key.right, buf, vp) == 2
        assert search.step("foo", Key.down, buf, vp) == 0
        assert vp.cy == 0

    def test_backward_wraps_to_last_row(self) -> None:
        buf = make_buffer("foo", "bar", "foo")
        search, vp = start(buf)
        type_query(search, "foo", buf, vp)
        assert search.step("foo", Key.left, buf, vp) == 2
        assert search.direction == BACKWARD
        assert search.step("foo", Key.up, buf, vp) == 0

    def test_editing_query_restarts_from_top(self) -> None:
        buf = make_buffer("ab", "abc", "abcd")
        search, vp = start(buf)
        type_query(search, "ab", buf, vp)
        search.step("ab", Key.right, buf, vp)
        assert vp.cy == 1
        assert search.step("abc", "c", buf, vp) == 1
        assert search.step("abcd", "d", buf, vp) == 2

    def test_no_match_leaves_cursor(self) -> None:
        buf = make_buffer("abc", "def")
        vp = Viewport(10, 40)
        vp.cy, vp.cx = 1, 2
        search, _ = start(buf, vp)
        assert type_query(search, "zzz", buf, vp) is None
        assert (vp.cy, vp.cx) == (1, 2)

    def test_empty_query_does_not_scan(self) -> None:
        buf = make_buffer("abc")
        vp = Viewport(10, 40)
        vp.cy = 1
        search, _ = start(buf, vp)
        assert search.step("", "\x7f", buf, vp) is None
        assert vp.cy == 1

    def test_empty_buffer(self) -> None:
        buf = make_buffer()
        search, vp = start(buf)
        assert type_query(search, "a", buf, vp) is None

    def test_cursor_placed_at_match_column(self) -> None:
        buf = make_buffer("xx hello")
        search, vp = start(buf)
        type_query(search, "hello", buf, vp)
        assert vp.cx == 3

    def test_match_column_accounts_for_tabs(self) -> None:
        buf = make_buffer("\tneedle")
        search, vp = start(buf)
        type_query(search, "needle", buf, vp)
        assert vp.cx == 1
        vp.scroll(buf)
        assert vp.rx == 8

    def test_hit_scrolls_match_to_top(self) -> None:
        buf = make_buffer(*["x"] * 30 + ["target"] + ["x"] * 30)
        search, vp = start(buf)
        type_query(search, "target", buf, vp)
        vp.scroll(buf)
        assert vp.rowoff == 30

    def test_submit_and_cancel_keys_reset_state(self) -> None:
        buf = make_buffer("foo", "foo")
        search, vp = start(buf)
        type_query(search, "foo", buf, vp)
        search.step("foo", Key.left, buf, vp)
        assert search.step("foo", KEY_ENTER, buf, vp) is None
        assert search.last_match is None
        assert search.direction == FORWARD
