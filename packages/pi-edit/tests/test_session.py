"""Tests for pi.edit.session.EditorSession -- dispatch, save, quit, loop."""

from __future__ import annotations

from pathlib import Path

from pi.edit.keys import Key
from pi.edit.session import HELP_MESSAGE, EditorSession
from pi.edit.settings import EditorSettings

from .virtual_terminal import VirtualTerminal

CTRL_Q = "\x11"
CTRL_S = "\x13"
CTRL_F = "\x06"
CTRL_L = "\x0c"
KEY_ENTER = "\r"
KEY_BACKSPACE = "\x7f"
KEY_RIGHT = "\x1b[C"


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_session(
    *lines: str,
    rows: int = 24,
    columns: int = 80,
    settings: EditorSettings | None = None,
) -> tuple[EditorSession, VirtualTerminal]:
    term = VirtualTerminal(rows=rows, columns=columns)
    session = EditorSession(term, settings=settings, clock=FakeClock())
    session.buffer.load(lines)
    return session, term


def press(session: EditorSession, *keys: str) -> bool:
    result = True
    for key in keys:
        result = session.process_keypress(key)
    return result


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


class TestSessionSetup:
    def test_reserves_status_rows(self) -> None:
        session, _ = make_session(rows=24, columns=80)
        assert session.viewport.screenrows == 22
        assert session.viewport.screencols == 80

    def test_starts_clean(self) -> None:
        session, _ = make_session()
        assert session.dirty == 0
        assert session.filename is None
        assert session.quit_times == 3

    def test_status_message_is_timestamped(self) -> None:
        session, _ = make_session()
        session._clock.now = 1234.0
        session.set_status_message(HELP_MESSAGE)
        assert session.status.text == HELP_MESSAGE
        assert session.status.timestamp == 1234.0


# ---------------------------------------------------------------------------
# Editing dispatch
# ---------------------------------------------------------------------------


class TestEditing:
    def test_typing_into_empty_buffer_creates_row(self) -> None:
        session, _ = make_session()
        press(session, "h", "i")
        assert session.buffer.lines() == ["hi"]
        assert (session.viewport.cy, session.viewport.cx) == (0, 2)
        assert session.dirty > 0

    def test_tab_is_inserted(self) -> None:
        session, _ = make_session("ab")
        session.viewport.cx = 1
        press(session, "\t")
        assert session.buffer.lines() == ["a\tb"]

    def test_enter_splits_line(self) -> None:
        session, _ = make_session("abc")
        session.viewport.cx = 1
        press(session, KEY_ENTER)
        assert session.buffer.lines() == ["a", "bc"]
        assert (session.viewport.cy, session.viewport.cx) == (1, 0)

    def test_backspace_joins_lines(self) -> None:
        session, _ = make_session("ab", "cd")
        session.viewport.cy = 1
        press(session, KEY_BACKSPACE)
        assert session.buffer.lines() == ["abcd"]
        assert (session.viewport.cy, session.viewport.cx) == (0, 2)

    def test_ctrl_h_deletes_backward(self) -> None:
        session, _ = make_session("ab")
        session.viewport.cx = 2
        press(session, "\x08")
        assert session.buffer.lines() == ["a"]

    def test_delete_removes_char_under_cursor(self) -> None:
        session, _ = make_session("abc")
        session.viewport.cx = 1
        press(session, Key.delete)
        assert session.buffer.lines() == ["ac"]
        assert session.viewport.cx == 1

    def test_delete_at_line_end_joins_next(self) -> None:
        session, _ = make_session("ab", "cd")
        session.viewport.cx = 2
        press(session, Key.delete)
        assert session.buffer.lines() == ["abcd"]
        assert (session.viewport.cy, session.viewport.cx) == (0, 2)

    def test_unbound_control_chars_ignored(self) -> None:
        session, _ = make_session("abc")
        press(session, "\x01", "\x02", CTRL_L, Key.escape)
        assert session.buffer.lines() == ["abc"]
        assert session.dirty == 0

    def test_high_bytes_are_inserted(self) -> None:
        session, _ = make_session()
        high = bytes([0xE9]).decode("utf-8", errors="surrogateescape")
        press(session, high)
        assert session.buffer.lines() == [high]


# ---------------------------------------------------------------------------
# Cursor movement dispatch
# ---------------------------------------------------------------------------


class TestMovement:
    def test_arrows(self) -> None:
        session, _ = make_session("abc", "de")
        press(session, Key.right, Key.right, Key.down)
        assert (session.viewport.cy, session.viewport.cx) == (1, 2)
        press(session, Key.up, Key.left)
        assert (session.viewport.cy, session.viewport.cx) == (0, 1)

    def test_home_and_end(self) -> None:
        session, _ = make_session("hello")
        press(session, Key.end)
        assert session.viewport.cx == 5
        press(session, Key.home)
        assert session.viewport.cx == 0

    def test_page_down_and_up(self) -> None:
        session, _ = make_session(*[str(i) for i in range(100)])
        press(session, Key.page_down)
        assert session.viewport.cy == 43
        session.viewport.scroll(session.buffer)
        press(session, Key.page_up)
        assert session.viewport.cy == 0

    def test_page_down_stops_at_sentinel(self) -> None:
        session, _ = make_session("a", "b")
        press(session, Key.page_down)
        assert session.viewport.cy == 2


# ---------------------------------------------------------------------------
# Quit confirmation
# ---------------------------------------------------------------------------


class TestQuit:
    def test_clean_buffer_quits_immediately(self) -> None:
        session, _ = make_session("abc")
        assert press(session, CTRL_Q) is False

    def test_dirty_buffer_needs_confirmation(self) -> None:
        session, _ = make_session()
        press(session, "x")
        for remaining in (3, 2, 1):
            assert press(session, CTRL_Q) is True
            assert session.status.text == (
                f"WARNING!!! File has unsaved changes. Press Ctrl-Q {remaining} more times to quit."
            )
        assert press(session, CTRL_Q) is False

    def test_other_key_resets_counter(self) -> None:
        session, _ = make_session()
        press(session, "x", CTRL_Q, CTRL_Q)
        assert session.quit_times == 1
        press(session, Key.left)
        assert session.quit_times == 3

    def test_configured_quit_times(self) -> None:
        session, _ = make_session(settings=EditorSettings(quit_times=1))
        press(session, "x")
        assert press(session, CTRL_Q) is True
        assert press(session, CTRL_Q) is False

    def test_save_bypasses_confirmation(self, tmp_path: Path) -> None:
        session, _ = make_session()
        session.filename = str(tmp_path / "out.txt")
        press(session, "x", CTRL_Q)
        press(session, CTRL_S)
        assert session.dirty == 0
        assert press(session, CTRL_Q) is False


# ---------------------------------------------------------------------------
# Open / save
# ---------------------------------------------------------------------------


class TestOpenSave:
    def test_open_loads_lines_clean(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_bytes(b"one\ntwo\n")
        session, _ = make_session()
        session.open(str(path))
        assert session.buffer.lines() == ["one", "two"]
        assert session.filename == str(path)
        assert session.dirty == 0

    def test_load_then_save_is_byte_identical(self, tmp_path: Path) -> None:
        content = b"first\n\tindented\n\nlast \xff byte\n"
        path = tmp_path / "a.txt"
        path.write_bytes(content)
        session, _ = make_session()
        session.open(str(path))
        session.save()
        assert path.read_bytes() == content
        assert session.status.text == f"{len(content)} bytes written to disk"

    def test_crlf_normalized_on_save(self, tmp_path: Path) -> None:
        path = tmp_path / "dos.txt"
        path.write_bytes(b"a\r\nb\r\n")
        session, _ = make_session()
        session.open(str(path))
        session.save()
        assert path.read_bytes() == b"a\nb\n"

    def test_save_resets_dirty(self, tmp_path: Path) -> None:
        session, _ = make_session("abc")
        session.filename = str(tmp_path / "out.txt")
        press(session, "x")
        press(session, CTRL_S)
        assert session.dirty == 0
        assert (tmp_path / "out.txt").read_bytes() == b"xabc\n"

    def test_save_failure_keeps_buffer_dirty(self, tmp_path: Path) -> None:
        session, _ = make_session("abc")
        session.filename = str(tmp_path)  # a directory cannot be written
        press(session, "x")
        dirty = session.dirty
        press(session, CTRL_S)
        assert session.dirty == dirty
        assert session.buffer.lines() == ["xabc"]
        assert session.status.text.startswith("Can't save! I/O error: ")

    def test_save_as_prompts_for_name(self, tmp_path: Path) -> None:
        session, term = make_session("hello")
        target = tmp_path / "new.txt"
        term.feed(str(target), KEY_ENTER)
        press(session, CTRL_S)
        assert session.filename == str(target)
        assert target.read_bytes() == b"hello\n"
        assert "Save as: " in term.output

    def test_loaded_and_typed_text_share_columns(self, tmp_path: Path) -> None:
        path = tmp_path / "u.txt"
        path.write_bytes("é\n".encode("utf-8"))
        session, term = make_session()
        session.open(str(path))
        press(session, Key.end)
        loaded_cx = session.viewport.cx

        term.feed("é")
        press(session, session.read_key(), session.read_key())
        assert loaded_cx == 2
        assert session.viewport.cx - loaded_cx == loaded_cx
        assert session.buffer[0].size == 4

    def test_backspace_removes_one_byte_of_loaded_or_typed_text(self, tmp_path: Path) -> None:
        path = tmp_path / "u.txt"
        path.write_bytes("é\n".encode("utf-8"))
        session, term = make_session()
        session.open(str(path))
        press(session, Key.end)
        term.feed("é")
        press(session, session.read_key(), session.read_key())

        press(session, KEY_BACKSPACE, KEY_BACKSPACE)
        session.save()
        assert path.read_bytes() == "é\n".encode("utf-8")

    def test_save_as_cancelled(self) -> None:
        session, term = make_session("hello")
        press(session, "x")
        term.feed("name", "\x1b")
        press(session, CTRL_S)
        assert session.filename is None
        assert session.status.text == "Save aborted"
        assert session.dirty > 0


# ---------------------------------------------------------------------------
# Search through the prompt
# ---------------------------------------------------------------------------


class TestFind:
    def test_search_commit_moves_cursor(self) -> None:
        session, term = make_session("foo", "bar", "foo")
        term.feed("bar", KEY_ENTER)
        press(session, CTRL_F)
        assert (session.viewport.cy, session.viewport.cx) == (1, 0)
        assert "Search: bar (Use ESC/Arrows/Enter)" in term.output

    def test_search_arrow_jumps_to_next_hit(self) -> None:
        session, term = make_session("foo", "bar", "foo")
        term.feed("foo", KEY_RIGHT, KEY_ENTER)
        press(session, CTRL_F)
        assert session.viewport.cy == 2

    def test_search_cancel_restores_cursor(self) -> None:
        session, term = make_session("abc", "def", "needle")
        session.viewport.cy, session.viewport.cx = 1, 2
        term.feed("needle", "\x1b")
        press(session, CTRL_F)
        assert (session.viewport.cy, session.viewport.cx) == (1, 2)
        assert session.status.text == ""

    def test_search_does_not_modify_buffer(self) -> None:
        session, term = make_session("abc")
        term.feed("b", KEY_ENTER)
        press(session, CTRL_F)
        assert session.buffer.lines() == ["abc"]
        assert session.dirty == 0


# ---------------------------------------------------------------------------
# Screen refresh and main loop
# ---------------------------------------------------------------------------


class TestLoop:
    def test_refresh_writes_one_frame(self) -> None:
        session, term = make_session("abc")
        session.refresh_screen()
        assert term.write_count == 1
        assert "abc" in term.output

    def test_resize_applied_before_next_frame(self) -> None:
        session, term = make_session()
        term.set_resize_handler(session.request_resize)
        term.simulate_resize(rows=12, columns=40)
        assert session.viewport.screenrows == 22
        session.refresh_screen()
        assert session.viewport.screenrows == 10
        assert session.viewport.screencols == 40

    def test_read_key_returns_none_on_resize(self) -> None:
        session, _ = make_session()
        session.request_resize()
        assert session.read_key() is None

    def test_read_key_skips_timeouts(self) -> None:
        session, term = make_session()
        term.feed(None, None, "a")
        assert session.read_key() == "a"

    def test_run_edits_then_quits(self) -> None:
        session, term = make_session()
        term.feed("hi", CTRL_Q, CTRL_Q, CTRL_Q, CTRL_Q)
        session.run()
        assert session.buffer.lines() == ["hi"]
        assert term.output.endswith("\x1b[2J\x1b[H")
        assert term.pending_input == 0

    def test_run_quits_immediately_when_clean(self) -> None:
        session, term = make_session("abc")
        term.feed(CTRL_Q, "x")
        session.run()
        assert term.pending_input == 1
        assert session.buffer.lines() == ["abc"]
