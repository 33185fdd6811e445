"""Logical key identifiers and key matching.

Decoded keys are plain strings: a one-character string for an ordinary
byte (printable or control), or one of the named identifiers on
:class:`Key` for multi-byte escape sequences. Key *ids* such as
``"ctrl+q"`` or ``"backspace"`` are the vocabulary used by keybindings.
"""

from __future__ import annotations

KeyId = str

ESC = "\x1b"


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    backspace = "backspace"
    delete = "delete"
    home = "home"
    end = "end"
    page_up = "pageUp"
    page_down = "pageDown"
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"


# Named keys produced by the decoder for escape sequences.
NAMED_KEYS: frozenset[str] = frozenset(
    {
        Key.escape,
        Key.delete,
        Key.home,
        Key.end,
        Key.page_up,
        Key.page_down,
        Key.up,
        Key.down,
        Key.left,
        Key.right,
    }
)

# Key ids that stand for a single raw byte.
CHAR_KEYS: dict[str, str] = {
    Key.enter: "\r",
    Key.tab: "\t",
    Key.backspace: "\x7f",
}


def raw_ctrl_char(key: str) -> str | None:
    """Return the control character for a key, or ``None`` if not applicable.

    For example, ``raw_ctrl_char("a")`` returns ``"\\x01"``.
    """
    if len(key) != 1:
        return None
    code = ord(key.lower())
    if ord("a") <= code <= ord("z"):
        return chr(code & 0x1F)
    ctrl_map: dict[str, str] = {
        "[": chr(27),
        "\\": chr(28),
        "]": chr(29),
        "^": chr(30),
        "_": chr(31),
        "@": chr(0),
        "?": chr(127),
    }
    return ctrl_map.get(key)


def is_ctrl_char(key: str) -> bool:
    """True for a single ASCII control character (including DEL)."""
    return len(key) == 1 and (ord(key) < 0x20 or ord(key) == 0x7F)


def is_insertable(key: str) -> bool:
    """True when *key* should be inserted into the buffer as text."""
    if len(key) != 1:
        return False
    return key == "\t" or not is_ctrl_char(key)


def is_prompt_char(key: str) -> bool:
    """Printable ASCII accepted by single-line prompts."""
    return len(key) == 1 and 0x20 <= ord(key) < 0x7F


def matches_key(key: str, key_id: KeyId) -> bool:
    """Check whether a decoded *key* corresponds to *key_id*.

    Supports named keys (``"up"``, ``"pageDown"``), single-byte names
    (``"enter"``, ``"tab"``, ``"backspace"``), ``"ctrl+<char>"`` and
    literal single characters.
    """
    if not key or not key_id:
        return False

    if key_id in NAMED_KEYS:
        return key == key_id

    raw = CHAR_KEYS.get(key_id)
    if raw is not None:
        return key == raw

    if key_id.startswith("ctrl+"):
        ctrl = raw_ctrl_char(key_id[len("ctrl+") :])
        return ctrl is not None and key == ctrl

    return len(key_id) == 1 and key == key_id
