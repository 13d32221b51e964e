from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence

from pianokeys.core.active_notes import ActiveNoteSet
from pianokeys.core.interaction_mode import InteractionMode
from pianokeys.core.keymap import NoteRange, ShortcutEntry, ShortcutIndex
from pianokeys.core.note_labels import NoteLabel, NoteLabelContext, NoteLabelRenderer, ShortcutLabelRenderer
from pianokeys.core.reconcile import NoteCallback, NoteChanges, reconcile
from pianokeys.services.input_router import InputRouter

logger = logging.getLogger(__name__)

LabelCallback = Callable[[int, bool, bool], NoteLabel | None]


@dataclass(frozen=True, slots=True)
class KeyboardProps:
    note_range: NoteRange
    active_notes: tuple[int, ...]
    disabled: bool
    pointer_held: bool
    prefer_touch: bool
    on_play_note: Callable[[int], bool]
    on_stop_note: Callable[[int], bool]
    render_note_label: LabelCallback


class KeyboardRenderer(Protocol):

    def apply_props(self, props: KeyboardProps) -> None:
        ...


class EventSource(Protocol):

    def attach(self, router: InputRouter) -> None:
        ...

    def detach(self) -> None:
        ...


class PianoController:
    """Owns the active note state of one keyboard and reports every transition.

    Play/stop requests arrive from the input router or straight from the
    renderer; wholesale changes (shortcut table swaps, explicit syncs) go
    through ``reconcile`` so callers still see one stop per released note and
    one start per new note, stops first.
    """

    def __init__(
        self,
        note_range: NoteRange,
        on_play_note: NoteCallback,
        on_stop_note: NoteCallback,
        *,
        keyboard_shortcuts: Sequence[ShortcutEntry] | None = None,
        disabled: bool = False,
        playback_notes: Sequence[int] | None = None,
        label_renderer: NoteLabelRenderer | None = None,
        renderer: KeyboardRenderer | None = None,
        event_sources: Iterable[EventSource] = (),
    ) -> None:
        self._note_range = note_range
        self._on_play_note = on_play_note
        self._on_stop_note = on_stop_note
        self._shortcuts = ShortcutIndex(keyboard_shortcuts)
        self._disabled = bool(disabled)
        self._playback_notes: tuple[int, ...] | None = (
            tuple(playback_notes) if playback_notes is not None else None
        )
        self._label_renderer: NoteLabelRenderer = label_renderer or ShortcutLabelRenderer()
        self._renderer = renderer
        self._event_sources: list[EventSource] = list(event_sources)
        self._attached_sources: list[EventSource] = []
        self._running = False
        self._active_notes = ActiveNoteSet()
        self._mode = InteractionMode()
        self.router = InputRouter(
            self._mode,
            resolve_key=self._shortcuts_key_to_note,
            play_note=self.play_note,
            stop_note=self.stop_note,
            mode_changed=self._render,
            release_all=self.release_all,
        )

    @property
    def active_notes(self) -> tuple[int, ...]:
        return self._active_notes.snapshot()

    @property
    def rendered_notes(self) -> tuple[int, ...]:
        if self._playback_notes is not None:
            return self._playback_notes
        return self._active_notes.snapshot()

    @property
    def interaction_mode(self) -> InteractionMode:
        return self._mode

    @property
    def shortcuts(self) -> ShortcutIndex:
        return self._shortcuts

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def note_range(self) -> NoteRange:
        return self._note_range

    @property
    def is_running(self) -> bool:
        return self._running

    def play_note(self, midi_number: int) -> bool:
        if self._disabled:
            return False
        if midi_number in self._active_notes:
            return False
        previous = self._active_notes.snapshot()
        self._on_play_note(midi_number, previous)
        self._active_notes.activate(midi_number)
        logger.debug("Note started: %s (active=%s)", midi_number, self._active_notes.snapshot())
        self._render()
        return True

    def stop_note(self, midi_number: int) -> bool:
        if self._disabled:
            return False
        if midi_number not in self._active_notes:
            return False
        previous = self._active_notes.snapshot()
        self._on_stop_note(midi_number, previous)
        self._active_notes.deactivate(midi_number)
        logger.debug("Note stopped: %s (active=%s)", midi_number, self._active_notes.snapshot())
        self._render()
        return True

    def sync_active_notes(self, notes: Iterable[int]) -> NoteChanges:
        previous = self._active_notes.snapshot()
        self._active_notes.replace(notes)
        changes = reconcile(previous, self._active_notes.snapshot())
        if changes.is_empty:
            return changes
        changes.emit(previous, on_stop=self._on_stop_note, on_start=self._on_play_note)
        logger.debug("Active notes replaced: stopped=%s started=%s", changes.stopped, changes.started)
        self._render()
        return changes

    def release_all(self) -> NoteChanges:
        return self.sync_active_notes(())

    def set_keyboard_shortcuts(self, keyboard_shortcuts: Sequence[ShortcutEntry] | None) -> None:
        if keyboard_shortcuts is self._shortcuts.source:
            return
        self._shortcuts = ShortcutIndex(keyboard_shortcuts)
        # Key-ups would resolve against the new table, so held notes could never stop.
        changes = self.release_all()
        if changes.is_empty:
            self._render()

    def set_playback_notes(self, playback_notes: Sequence[int] | None) -> NoteChanges:
        previous = self.rendered_notes
        self._playback_notes = tuple(playback_notes) if playback_notes is not None else None
        changes = reconcile(previous, self.rendered_notes)
        self._render()
        return changes

    def set_disabled(self, disabled: bool) -> None:
        value = bool(disabled)
        if value == self._disabled:
            return
        self._disabled = value
        self._render()

    def set_note_range(self, note_range: NoteRange) -> None:
        if note_range == self._note_range:
            return
        self._note_range = note_range
        self._render()

    def set_label_renderer(self, label_renderer: NoteLabelRenderer | None) -> None:
        self._label_renderer = label_renderer or ShortcutLabelRenderer()
        self._render()

    def set_renderer(self, renderer: KeyboardRenderer | None) -> None:
        self._renderer = renderer
        self._render()

    def render_note_label(self, midi_number: int, is_active: bool, is_accidental: bool) -> NoteLabel | None:
        context = NoteLabelContext(
            midi_number=midi_number,
            is_active=is_active,
            is_accidental=is_accidental,
            keyboard_shortcut=self._shortcuts.note_to_key(midi_number),
        )
        return self._label_renderer.render(context)

    def keyboard_props(self) -> KeyboardProps:
        return KeyboardProps(
            note_range=self._note_range,
            active_notes=self.rendered_notes,
            disabled=self._disabled,
            pointer_held=self._mode.pointer_held,
            prefer_touch=self._mode.prefer_touch,
            on_play_note=self.play_note,
            on_stop_note=self.stop_note,
            render_note_label=self.render_note_label,
        )

    def add_event_source(self, source: EventSource) -> None:
        self._event_sources.append(source)
        if self.is_running:
            source.attach(self.router)
            self._attached_sources.append(source)

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        try:
            for source in self._event_sources:
                source.attach(self.router)
                self._attached_sources.append(source)
        except Exception:
            self.stop()
            raise
        logger.debug("Controller started with %d event source(s)", len(self._attached_sources))
        self._render()

    def stop(self) -> None:
        self._running = False
        first_error: Exception | None = None
        while self._attached_sources:
            source = self._attached_sources.pop()
            try:
                source.detach()
            except Exception as exc:
                logger.exception("Failed to detach event source %r", source)
                if first_error is None:
                    first_error = exc
        logger.debug("Controller stopped")
        if first_error is not None:
            raise first_error

    def __enter__(self) -> "PianoController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _shortcuts_key_to_note(self, key: str) -> int | None:
        return self._shortcuts.key_to_note(key)

    def _render(self) -> None:
        if self._renderer is None:
            return
        self._renderer.apply_props(self.keyboard_props())
