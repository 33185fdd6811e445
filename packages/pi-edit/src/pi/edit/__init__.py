"""pi-edit: minimal raw-mode terminal text editor."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Buffer model
from pi.edit.row import TAB_STOP, Row, cx_to_rx, rx_to_cx  # noqa: E402
from pi.edit.text_buffer import TextBuffer  # noqa: E402

# Input
from pi.edit.key_decoder import DecoderState, KeyDecoder  # noqa: E402
from pi.edit.keybindings import (  # noqa: E402
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
)
from pi.edit.keys import Key, KeyId, matches_key  # noqa: E402

# Display
from pi.edit.renderer import Renderer, StatusMessage  # noqa: E402
from pi.edit.viewport import Viewport, ViewportState  # noqa: E402

# Prompt and search
from pi.edit.prompt import Prompt, PromptResult  # noqa: E402
from pi.edit.search import SearchController, SearchSession, SearchState  # noqa: E402

# Session and collaborators
from pi.edit.session import EditorSession  # noqa: E402
from pi.edit.settings import EditorSettings, load_settings  # noqa: E402
from pi.edit.terminal import ProcessTerminal, Terminal, TerminalError  # noqa: E402

__all__ = [
    "__version__",
    # Buffer model
    "TAB_STOP",
    "Row",
    "TextBuffer",
    "cx_to_rx",
    "rx_to_cx",
    # Input
    "DEFAULT_EDITOR_KEYBINDINGS",
    "DecoderState",
    "EditorAction",
    "EditorKeybindingsManager",
    "Key",
    "KeyDecoder",
    "KeyId",
    "matches_key",
    # Display
    "Renderer",
    "StatusMessage",
    "Viewport",
    "ViewportState",
    # Prompt and search
    "Prompt",
    "PromptResult",
    "SearchController",
    "SearchSession",
    "SearchState",
    # Session and collaborators
    "EditorSession",
    "EditorSettings",
    "ProcessTerminal",
    "Terminal",
    "TerminalError",
    "load_settings",
]
