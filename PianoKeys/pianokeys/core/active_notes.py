from __future__ import annotations

from typing import Iterable, Iterator


class ActiveNoteSet:
    """Currently sounding MIDI numbers, always ascending and unique."""

    def __init__(self, notes: Iterable[int] = ()) -> None:
        self._notes: tuple[int, ...] = tuple(sorted(set(notes)))

    def activate(self, note: int) -> bool:
        if note in self._notes:
            return False
        self._notes = tuple(sorted(self._notes + (note,)))
        return True

    def deactivate(self, note: int) -> bool:
        if note not in self._notes:
            return False
        self._notes = tuple(value for value in self._notes if value != note)
        return True

    def replace(self, notes: Iterable[int]) -> None:
        self._notes = tuple(sorted(set(notes)))

    def snapshot(self) -> tuple[int, ...]:
        return self._notes

    def __contains__(self, note: object) -> bool:
        return note in self._notes

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[int]:
        return iter(self._notes)

    def __repr__(self) -> str:
        return f"ActiveNoteSet({list(self._notes)!r})"
