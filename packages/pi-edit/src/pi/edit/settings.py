"""Editor settings. Stored at ~/.pi/edit.json (or $PI_CONFIG_DIR/edit.json)."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pi.edit.row import TAB_STOP

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "edit.json"

QUIT_TIMES = 3
MESSAGE_TIMEOUT = 5.0


@dataclass
class EditorSettings:
    """Tunable editor constants."""

    tab_stop: int = TAB_STOP
    quit_times: int = QUIT_TIMES
    message_timeout: float = MESSAGE_TIMEOUT
    keybindings: dict[str, Any] = field(default_factory=dict)


def _get_config_dir() -> Path:
    return Path(os.environ.get("PI_CONFIG_DIR", Path.home() / ".pi"))


def get_settings_path() -> Path:
    return _get_config_dir() / SETTINGS_FILE_NAME


def _is_number(value: Any) -> bool:
    # JSON true/false load as bool, which is an int subclass.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def settings_from_dict(data: dict[str, Any]) -> EditorSettings:
    settings = EditorSettings()
    if _is_int(data.get("tabStop")) and data["tabStop"] > 0:
        settings.tab_stop = data["tabStop"]
    if _is_int(data.get("quitTimes")) and data["quitTimes"] >= 0:
        settings.quit_times = data["quitTimes"]
    if _is_number(data.get("messageTimeout")):
        settings.message_timeout = float(data["messageTimeout"])
    if isinstance(data.get("keybindings"), dict):
        settings.keybindings = dict(data["keybindings"])
    return settings


def load_settings(path: Path | None = None) -> EditorSettings:
    settings_path = path or get_settings_path()
    if not settings_path.exists():
        return EditorSettings()
    try:
        data = json.loads(settings_path.read_text())
    except (OSError, ValueError) as e:
        logger.warning("Error reading settings %s: %s", settings_path, e)
        return EditorSettings()
    if not isinstance(data, dict):
        logger.warning("Ignoring settings %s: expected a JSON object", settings_path)
        return EditorSettings()
    return settings_from_dict(data)
