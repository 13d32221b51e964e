from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from pianokeys.core.interaction_mode import InteractionMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KeyInput:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.ctrl or self.meta or self.shift


class InputRouter:
    def __init__(
        self,
        mode: InteractionMode,
        *,
        resolve_key: Callable[[str], int | None],
        play_note: Callable[[int], bool],
        stop_note: Callable[[int], bool],
        mode_changed: Callable[[], None] | None = None,
        release_all: Callable[[], object] | None = None,
    ) -> None:
        self._mode = mode
        self._resolve_key = resolve_key
        self._play_note = play_note
        self._stop_note = stop_note
        self._mode_changed = mode_changed
        self._release_all = release_all

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    def key_down(self, event: KeyInput) -> bool:
        # Leave ctrl/meta/shift combinations to the OS and host application.
        if event.has_modifier:
            return False
        midi_number = self._resolve_key(event.key)
        if midi_number is None:
            return False
        self._play_note(midi_number)
        return True

    def key_up(self, event: KeyInput) -> bool:
        # No modifier filter here: some platforms report stray modifier flags
        # while many keys are released at once, and a skipped stop leaves a
        # stuck note whereas a redundant stop is a no-op.
        midi_number = self._resolve_key(event.key)
        if midi_number is None:
            return False
        self._stop_note(midi_number)
        return True

    def pointer_down(self) -> None:
        if self._mode.press_pointer():
            self._notify_mode_changed()

    def pointer_up(self) -> None:
        if self._mode.release_pointer():
            self._notify_mode_changed()

    def touch_start(self) -> None:
        if self._mode.latch_touch():
            logger.debug("Touch input detected; preferring touch events")
            self._notify_mode_changed()

    def focus_lost(self) -> None:
        # Key-ups are not delivered once focus is gone; release what is held.
        pointer_changed = self._mode.release_pointer()
        if self._release_all is not None:
            self._release_all()
        if pointer_changed:
            self._notify_mode_changed()

    def _notify_mode_changed(self) -> None:
        if self._mode_changed is not None:
            self._mode_changed()
