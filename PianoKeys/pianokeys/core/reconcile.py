from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

NoteCallback = Callable[[int, tuple[int, ...]], None]


@dataclass(frozen=True, slots=True)
class NoteChanges:
    stopped: tuple[int, ...] = ()
    started: tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.stopped and not self.started

    def emit(
        self,
        previous: Sequence[int],
        *,
        on_stop: NoteCallback,
        on_start: NoteCallback,
    ) -> tuple[int, ...]:
        """Deliver every stop, then every start.

        Each callback receives the snapshot as it stood right before that
        single transition. Returns the final snapshot.
        """
        current = tuple(sorted(set(previous)))
        for note in self.stopped:
            on_stop(note, current)
            current = tuple(value for value in current if value != note)
        for note in self.started:
            on_start(note, current)
            current = tuple(sorted(current + (note,)))
        return current


def reconcile(previous: Sequence[int], following: Sequence[int]) -> NoteChanges:
    previous_set = set(previous)
    following_set = set(following)
    stopped = tuple(_unique(note for note in previous if note not in following_set))
    started = tuple(_unique(note for note in following if note not in previous_set))
    return NoteChanges(stopped=stopped, started=started)


def _unique(notes) -> list[int]:
    seen: set[int] = set()
    ordered: list[int] = []
    for note in notes:
        if note in seen:
            continue
        seen.add(note)
        ordered.append(note)
    return ordered
