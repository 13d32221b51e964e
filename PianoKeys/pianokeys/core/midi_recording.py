from __future__ import annotations

import importlib
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from pianokeys.core.config import MIDI_NUMBER_MAX, MIDI_NUMBER_MIN, RECORDING_TEMPO


@dataclass(frozen=True, slots=True)
class RecordedNoteEvent:
    at_seconds: float
    kind: str
    note: int
    chord: tuple[int, ...]


class NoteRecorder:
    """Records controller notifications into a take.

    ``on_play_note`` and ``on_stop_note`` match the controller callback
    signature, so the recorder can be passed in directly. The previous active
    notes each callback receives are used to keep the sounding chord.
    """

    def __init__(self, velocity: int = 100, clock: Callable[[], float] = time.monotonic) -> None:
        self._events: list[RecordedNoteEvent] = []
        self._recording = False
        self._start_time = 0.0
        self._velocity = max(1, min(127, int(velocity)))
        self._clock = clock
        self._mido_module = self._load_mido_module()

    @staticmethod
    def _load_mido_module():
        try:
            return importlib.import_module("mido")
        except ImportError:
            return None

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start(self) -> None:
        self._events.clear()
        self._recording = True
        self._start_time = self._clock()

    def stop(self) -> None:
        self._recording = False

    def clear(self) -> None:
        self._events.clear()
        self._recording = False

    def on_play_note(self, midi_number: int, previous_notes: Sequence[int]) -> None:
        if not self._recording:
            return
        chord = tuple(sorted(set(previous_notes) | {midi_number}))
        self._append("note_on", midi_number, chord)

    def on_stop_note(self, midi_number: int, previous_notes: Sequence[int]) -> None:
        if not self._recording:
            return
        chord = tuple(note for note in sorted(set(previous_notes)) if note != midi_number)
        self._append("note_off", midi_number, chord)

    def events(self) -> tuple[RecordedNoteEvent, ...]:
        return tuple(self._events)

    def chords(self) -> list[tuple[int, ...]]:
        """Distinct chords in the order they first sounded, skipping silence."""
        seen: list[tuple[int, ...]] = []
        for event in self._events:
            if event.kind == "note_on" and event.chord not in seen:
                seen.append(event.chord)
        return seen

    def has_take(self) -> bool:
        return len(self._events) > 0

    def save_as(self, path: Path) -> None:
        if self._mido_module is None:
            raise RuntimeError("MIDI recording requires mido.")
        if not self._events:
            raise RuntimeError("No recording data available.")

        destination = Path(path)
        destination.parent.mkdir(parents=True, exist_ok=True)

        mido = self._mido_module
        midi_file = mido.MidiFile(type=0)
        track = mido.MidiTrack()
        midi_file.tracks.append(track)

        ticks_per_beat = int(getattr(midi_file, "ticks_per_beat", 480))
        last_tick = 0
        for event in sorted(self._events, key=lambda item: item.at_seconds):
            absolute_tick = int(round(mido.second2tick(max(0.0, event.at_seconds), ticks_per_beat, RECORDING_TEMPO)))
            delta = max(0, absolute_tick - last_tick)
            last_tick = absolute_tick
            velocity = self._velocity if event.kind == "note_on" else 0
            note = max(MIDI_NUMBER_MIN, min(MIDI_NUMBER_MAX, event.note))
            track.append(mido.Message(event.kind, note=note, velocity=velocity, time=delta))
        track.append(mido.MetaMessage("end_of_track", time=0))
        midi_file.save(str(destination))

    def _append(self, kind: str, midi_number: int, chord: tuple[int, ...]) -> None:
        self._events.append(
            RecordedNoteEvent(
                at_seconds=max(0.0, self._clock() - self._start_time),
                kind=kind,
                note=int(midi_number),
                chord=chord,
            )
        )
