from __future__ import annotations

from typing import Literal

APP_NAME = "PianoKeys"
APP_VERSION = "1.0.0"

MIDI_NUMBER_MIN = 0
MIDI_NUMBER_MAX = 127

DEFAULT_FIRST_NOTE = 48
DEFAULT_LAST_NOTE = 77

LABEL_CLASS = "PianoKeys__NoteLabel"
LABEL_CLASS_ACTIVE = "PianoKeys__NoteLabel--active"
LABEL_CLASS_ACCIDENTAL = "PianoKeys__NoteLabel--accidental"
LABEL_CLASS_NATURAL = "PianoKeys__NoteLabel--natural"

DEFAULT_THEME_MODE: Literal["dark", "light"] = "dark"

ShortcutLayoutName = Literal["home_row", "bottom_row", "qwerty_row", "custom", "none"]
DEFAULT_SHORTCUT_LAYOUT: ShortcutLayoutName = "home_row"

RECORDING_TEMPO = 500000
