from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class InteractionMode:
    pointer_held: bool = False
    prefer_touch: bool = False

    def press_pointer(self) -> bool:
        if self.pointer_held:
            return False
        self.pointer_held = True
        return True

    def release_pointer(self) -> bool:
        if not self.pointer_held:
            return False
        self.pointer_held = False
        return True

    def latch_touch(self) -> bool:
        # One-way: nothing clears it once a real touch was seen.
        if self.prefer_touch:
            return False
        self.prefer_touch = True
        return True
