from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pianokeys.core.config import (
    APP_NAME,
    DEFAULT_FIRST_NOTE,
    DEFAULT_LAST_NOTE,
    DEFAULT_SHORTCUT_LAYOUT,
    DEFAULT_THEME_MODE,
    MIDI_NUMBER_MAX,
    MIDI_NUMBER_MIN,
    ShortcutLayoutName,
)
from pianokeys.core.keymap import LAYOUTS, NoteRange, ShortcutEntry, build_keyboard_shortcuts
from pianokeys.core.theme import ThemeMode

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "PianoKeys_config.json"
_LAYOUT_NAMES = {"home_row", "bottom_row", "qwerty_row", "custom", "none"}


@dataclass(frozen=True, slots=True)
class PianoSettings:
    first_note: int = DEFAULT_FIRST_NOTE
    last_note: int = DEFAULT_LAST_NOTE
    shortcut_layout: ShortcutLayoutName = DEFAULT_SHORTCUT_LAYOUT
    custom_shortcuts: tuple[ShortcutEntry, ...] = field(default_factory=tuple)
    disabled: bool = False
    theme_mode: ThemeMode = DEFAULT_THEME_MODE

    @property
    def note_range(self) -> NoteRange:
        return NoteRange(self.first_note, self.last_note)


def _settings_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or os.environ.get("LOCALAPPDATA")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / f".{APP_NAME.lower()}"


def _settings_path(path: Path | None = None) -> Path:
    if path is not None:
        return path
    return _settings_dir() / SETTINGS_FILE_NAME


def _clamp_midi(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(MIDI_NUMBER_MIN, min(MIDI_NUMBER_MAX, parsed))


def _clamp_range(first: Any, last: Any) -> tuple[int, int]:
    first_note = _clamp_midi(first, DEFAULT_FIRST_NOTE)
    last_note = _clamp_midi(last, DEFAULT_LAST_NOTE)
    if first_note >= last_note:
        return DEFAULT_FIRST_NOTE, DEFAULT_LAST_NOTE
    return first_note, last_note


def _clamp_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _clamp_layout(value: Any) -> ShortcutLayoutName:
    return value if value in _LAYOUT_NAMES else DEFAULT_SHORTCUT_LAYOUT


def _clamp_theme_mode(value: Any) -> ThemeMode:
    return value if value in {"dark", "light"} else DEFAULT_THEME_MODE


def _clamp_custom_shortcuts(value: Any) -> tuple[ShortcutEntry, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    parsed: list[ShortcutEntry] = []
    for item in value:
        if isinstance(item, ShortcutEntry):
            parsed.append(item)
            continue
        if not isinstance(item, dict):
            continue
        key = item.get("key")
        midi_number = item.get("midi_number", item.get("midiNumber"))
        if not isinstance(key, str) or not key:
            continue
        if isinstance(midi_number, bool) or not isinstance(midi_number, int):
            continue
        if midi_number < MIDI_NUMBER_MIN or midi_number > MIDI_NUMBER_MAX:
            continue
        parsed.append(ShortcutEntry(key=key, midi_number=midi_number))
    return tuple(parsed)


def shortcuts_for(settings: PianoSettings) -> list[ShortcutEntry] | None:
    if settings.shortcut_layout == "none":
        return None
    if settings.shortcut_layout == "custom":
        return list(settings.custom_shortcuts)
    layout = LAYOUTS[settings.shortcut_layout]
    return build_keyboard_shortcuts(settings.first_note, settings.last_note, layout)


def load_settings(path: Path | None = None) -> PianoSettings:
    file_path = _settings_path(path)
    if not file_path.exists():
        return PianoSettings()
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read settings from %s: %s", file_path, exc)
        return PianoSettings()
    if not isinstance(payload, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", file_path)
        return PianoSettings()

    first_note, last_note = _clamp_range(payload.get("first_note"), payload.get("last_note"))
    return PianoSettings(
        first_note=first_note,
        last_note=last_note,
        shortcut_layout=_clamp_layout(payload.get("shortcut_layout")),
        custom_shortcuts=_clamp_custom_shortcuts(payload.get("custom_shortcuts")),
        disabled=_clamp_bool(payload.get("disabled"), False),
        theme_mode=_clamp_theme_mode(payload.get("theme_mode")),
    )


def save_settings(settings: PianoSettings, path: Path | None = None) -> None:
    first_note, last_note = _clamp_range(settings.first_note, settings.last_note)
    payload = {
        "first_note": first_note,
        "last_note": last_note,
        "shortcut_layout": _clamp_layout(settings.shortcut_layout),
        "custom_shortcuts": [
            {"key": entry.key, "midi_number": entry.midi_number}
            for entry in _clamp_custom_shortcuts(settings.custom_shortcuts)
        ],
        "disabled": _clamp_bool(settings.disabled, False),
        "theme_mode": _clamp_theme_mode(settings.theme_mode),
    }
    raw = json.dumps(payload, indent=2)

    file_path = _settings_path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(raw, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not save settings to %s: %s", file_path, exc)
