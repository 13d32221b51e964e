from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from pianokeys.core.keymap import NoteRange, ShortcutEntry
from pianokeys.piano_controller import PianoController


class NoteLog:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, tuple[int, ...]]] = []

    def on_play_note(self, midi_number: int, previous: tuple[int, ...]) -> None:
        self.calls.append(("play", midi_number, tuple(previous)))

    def on_stop_note(self, midi_number: int, previous: tuple[int, ...]) -> None:
        self.calls.append(("stop", midi_number, tuple(previous)))

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.calls]

    def notes(self, kind: str) -> list[int]:
        return [note for call_kind, note, _ in self.calls if call_kind == kind]


class RecordingRenderer:
    def __init__(self) -> None:
        self.props = []

    def apply_props(self, props) -> None:
        self.props.append(props)

    @property
    def last(self):
        return self.props[-1]


@pytest.fixture
def note_log() -> NoteLog:
    return NoteLog()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def shortcuts() -> list[ShortcutEntry]:
    return [
        ShortcutEntry("a", 60),
        ShortcutEntry("s", 62),
        ShortcutEntry("d", 64),
        ShortcutEntry("g", 67),
    ]


@pytest.fixture
def controller(note_log, renderer, shortcuts) -> PianoController:
    return PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        keyboard_shortcuts=shortcuts,
        renderer=renderer,
    )


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
