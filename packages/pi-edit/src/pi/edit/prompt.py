"""Prompt - single-line input shown in the message bar."""

from __future__ import annotations

import enum

from pi.edit.keybindings import EditorKeybindingsManager
from pi.edit.keys import is_prompt_char


class PromptResult(enum.Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    CANCELLED = "cancelled"


class Prompt:
    """Accumulates a value one key at a time.

    ``template`` holds a single ``{}`` placeholder for the current value.
    """

    def __init__(self, template: str, keybindings: EditorKeybindingsManager) -> None:
        self.template = template
        self._keybindings = keybindings
        self._value: list[str] = []
        self.result = PromptResult.PENDING

    @property
    def value(self) -> str:
        return "".join(self._value)

    @property
    def done(self) -> bool:
        return self.result is not PromptResult.PENDING

    def text(self) -> str:
        return self.template.format(self.value)

    def handle_key(self, key: str) -> PromptResult:
        kb = self._keybindings

        if kb.matches(key, "promptBackspace"):
            if self._value:
                self._value.pop()
        elif kb.matches(key, "promptCancel"):
            self.result = PromptResult.CANCELLED
        elif kb.matches(key, "promptSubmit"):
            if self._value:
                self.result = PromptResult.SUBMITTED
        elif is_prompt_char(key):
            self._value.append(key)

        return self.result
