"""Editor keybindings manager."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pi.edit.keys import KeyId, matches_key

logger = logging.getLogger(__name__)

EditorAction = Literal[
    # Session
    "quit",
    "save",
    "find",
    "refresh",
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    "pageUp",
    "pageDown",
    # Editing
    "newLine",
    "deleteCharBackward",
    "deleteCharForward",
    # Prompt
    "promptSubmit",
    "promptCancel",
    "promptBackspace",
    # Search
    "searchNext",
    "searchPrevious",
]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Session
    "quit": "ctrl+q",
    "save": "ctrl+s",
    "find": "ctrl+f",
    "refresh": ["ctrl+l", "escape"],
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorLineStart": "home",
    "cursorLineEnd": "end",
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    # Editing
    "newLine": "enter",
    "deleteCharBackward": ["backspace", "ctrl+h"],
    "deleteCharForward": "delete",
    # Prompt
    "promptSubmit": "enter",
    "promptCancel": "escape",
    "promptBackspace": ["backspace", "ctrl+h", "delete"],
    # Search
    "searchNext": ["right", "down"],
    "searchPrevious": ["left", "up"],
}


def _as_key_list(keys: object) -> list[KeyId] | None:
    if isinstance(keys, str):
        return [keys]
    if isinstance(keys, list) and all(isinstance(k, str) for k in keys):
        return list(keys)
    return None


class EditorKeybindingsManager:
    """Resolves decoded keys to editor actions.

    *config* comes from the ``keybindings`` settings object. Each entry
    replaces the default keys of one action; entries naming an unknown
    action or holding anything but a key id or list of key ids are
    skipped with a warning.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self._bindings: dict[str, list[KeyId]] = {
            action: _as_key_list(keys) or []
            for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items()
        }
        for action, keys in (config or {}).items():
            if action not in self._bindings:
                logger.warning("Ignoring keybinding for unknown action %r", action)
                continue
            key_list = _as_key_list(keys)
            if key_list is None:
                logger.warning("Ignoring keybinding for %s: %r is not a key id", action, keys)
                continue
            self._bindings[action] = key_list

    def matches(self, key: str, action: EditorAction) -> bool:
        """Check if a decoded key is bound to *action*."""
        return any(matches_key(key, key_id) for key_id in self._bindings.get(action, ()))
