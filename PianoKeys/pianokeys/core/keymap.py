from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from pianokeys.core.config import MIDI_NUMBER_MAX, MIDI_NUMBER_MIN

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
BLACK_NOTES = {1, 3, 6, 8, 10}

_PITCH_INDEX = {
    "c": 0,
    "d": 2,
    "e": 4,
    "f": 5,
    "g": 7,
    "a": 9,
    "b": 11,
}
_ACCIDENTAL_OFFSET = {"": 0, "#": 1, "b": -1}


@dataclass(frozen=True, slots=True)
class ShortcutEntry:
    key: str
    midi_number: int


@dataclass(frozen=True, slots=True)
class LayoutKey:
    natural: str
    flat: str


@dataclass(frozen=True, slots=True)
class NoteRange:
    first: int
    last: int

    def __post_init__(self) -> None:
        for value in (self.first, self.last):
            if value < MIDI_NUMBER_MIN or value > MIDI_NUMBER_MAX:
                raise ValueError(f"MIDI number out of range: {value}")
        if self.first >= self.last:
            raise ValueError(f"Invalid note range: first={self.first} must be below last={self.last}")

    def notes(self) -> range:
        return range(self.first, self.last + 1)

    def __contains__(self, midi_number: object) -> bool:
        return isinstance(midi_number, int) and self.first <= midi_number <= self.last


class ShortcutIndex:
    """First-match lookups between input keys and MIDI numbers.

    The caller's table is read on every lookup, so in-place edits apply at
    once. Duplicate keys or MIDI numbers are tolerated; the earliest entry
    wins in both directions.
    """

    def __init__(self, entries: Sequence[ShortcutEntry] | None = None) -> None:
        self._source = entries

    @property
    def source(self) -> Sequence[ShortcutEntry] | None:
        return self._source

    @property
    def entries(self) -> tuple[ShortcutEntry, ...]:
        return tuple(self._source or ())

    def key_to_note(self, key: str) -> int | None:
        for entry in self._source or ():
            if entry.key == key:
                return entry.midi_number
        return None

    def note_to_key(self, midi_number: int) -> str | None:
        for entry in self._source or ():
            if entry.midi_number == midi_number:
                return entry.key
        return None

    def __len__(self) -> int:
        return len(self._source or ())


HOME_ROW: tuple[LayoutKey, ...] = (
    LayoutKey(natural="a", flat="q"),
    LayoutKey(natural="s", flat="w"),
    LayoutKey(natural="d", flat="e"),
    LayoutKey(natural="f", flat="r"),
    LayoutKey(natural="g", flat="t"),
    LayoutKey(natural="h", flat="y"),
    LayoutKey(natural="j", flat="u"),
    LayoutKey(natural="k", flat="i"),
    LayoutKey(natural="l", flat="o"),
    LayoutKey(natural=";", flat="p"),
    LayoutKey(natural="'", flat="["),
)

BOTTOM_ROW: tuple[LayoutKey, ...] = (
    LayoutKey(natural="z", flat="a"),
    LayoutKey(natural="x", flat="s"),
    LayoutKey(natural="c", flat="d"),
    LayoutKey(natural="v", flat="f"),
    LayoutKey(natural="b", flat="g"),
    LayoutKey(natural="n", flat="h"),
    LayoutKey(natural="m", flat="j"),
    LayoutKey(natural=",", flat="k"),
    LayoutKey(natural=".", flat="l"),
    LayoutKey(natural="/", flat=";"),
)

QWERTY_ROW: tuple[LayoutKey, ...] = (
    LayoutKey(natural="q", flat="1"),
    LayoutKey(natural="w", flat="2"),
    LayoutKey(natural="e", flat="3"),
    LayoutKey(natural="r", flat="4"),
    LayoutKey(natural="t", flat="5"),
    LayoutKey(natural="y", flat="6"),
    LayoutKey(natural="u", flat="7"),
    LayoutKey(natural="i", flat="8"),
    LayoutKey(natural="o", flat="9"),
    LayoutKey(natural="p", flat="0"),
    LayoutKey(natural="[", flat="-"),
)

LAYOUTS: dict[str, tuple[LayoutKey, ...]] = {
    "home_row": HOME_ROW,
    "bottom_row": BOTTOM_ROW,
    "qwerty_row": QWERTY_ROW,
}


def is_accidental(midi_number: int) -> bool:
    return midi_number % 12 in BLACK_NOTES


def note_name(midi_number: int) -> str:
    return f"{NOTE_NAMES[midi_number % 12]}{(midi_number // 12) - 1}"


def midi_from_note_name(name: str) -> int:
    text = (name or "").strip().lower()
    if len(text) < 2 or text[0] not in _PITCH_INDEX:
        raise ValueError(f"Invalid note name: {name!r}")
    pitch = _PITCH_INDEX[text[0]]
    rest = text[1:]
    accidental = rest[0] if rest[0] in {"#", "b"} and len(rest) > 1 else ""
    octave_text = rest[len(accidental):]
    try:
        octave = int(octave_text)
    except ValueError:
        raise ValueError(f"Invalid note name: {name!r}") from None
    midi_number = (octave + 1) * 12 + pitch + _ACCIDENTAL_OFFSET[accidental]
    if midi_number < MIDI_NUMBER_MIN or midi_number > MIDI_NUMBER_MAX:
        raise ValueError(f"Note out of MIDI range: {name!r}")
    return midi_number


def build_keyboard_shortcuts(
    first_note: int,
    last_note: int,
    layout: Sequence[LayoutKey],
) -> list[ShortcutEntry]:
    shortcuts: list[ShortcutEntry] = []
    note = int(first_note)
    index = 0
    while index < len(layout) and note <= last_note:
        row_key = layout[index]
        if is_accidental(note):
            shortcuts.append(ShortcutEntry(key=row_key.flat, midi_number=note))
        else:
            shortcuts.append(ShortcutEntry(key=row_key.natural, midi_number=note))
            index += 1
        note += 1
    return shortcuts


def find_duplicate_shortcuts(entries: Iterable[ShortcutEntry]) -> tuple[list[str], list[int]]:
    seen_keys: set[str] = set()
    seen_notes: set[int] = set()
    duplicate_keys: list[str] = []
    duplicate_notes: list[int] = []
    for entry in entries:
        if entry.key in seen_keys and entry.key not in duplicate_keys:
            duplicate_keys.append(entry.key)
        if entry.midi_number in seen_notes and entry.midi_number not in duplicate_notes:
            duplicate_notes.append(entry.midi_number)
        seen_keys.add(entry.key)
        seen_notes.add(entry.midi_number)
    return duplicate_keys, duplicate_notes
