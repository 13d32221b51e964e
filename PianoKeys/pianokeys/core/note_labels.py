from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from pianokeys.core.config import (
    LABEL_CLASS,
    LABEL_CLASS_ACCIDENTAL,
    LABEL_CLASS_ACTIVE,
    LABEL_CLASS_NATURAL,
)
from pianokeys.core.keymap import note_name


@dataclass(frozen=True, slots=True)
class NoteLabelContext:
    midi_number: int
    is_active: bool
    is_accidental: bool
    keyboard_shortcut: str | None


@dataclass(frozen=True, slots=True)
class NoteLabel:
    text: str
    is_active: bool = False
    is_accidental: bool = False

    @property
    def style_classes(self) -> tuple[str, ...]:
        classes = [LABEL_CLASS]
        if self.is_active:
            classes.append(LABEL_CLASS_ACTIVE)
        classes.append(LABEL_CLASS_ACCIDENTAL if self.is_accidental else LABEL_CLASS_NATURAL)
        return tuple(classes)


class NoteLabelRenderer(Protocol):

    def render(self, context: NoteLabelContext) -> NoteLabel | None:
        ...


class ShortcutLabelRenderer:
    """Shows the bound keyboard shortcut, nothing for unbound keys."""

    def render(self, context: NoteLabelContext) -> NoteLabel | None:
        if not context.keyboard_shortcut:
            return None
        return NoteLabel(
            text=context.keyboard_shortcut,
            is_active=context.is_active,
            is_accidental=context.is_accidental,
        )


class NoteNameLabelRenderer:

    def render(self, context: NoteLabelContext) -> NoteLabel | None:
        return NoteLabel(
            text=note_name(context.midi_number),
            is_active=context.is_active,
            is_accidental=context.is_accidental,
        )
