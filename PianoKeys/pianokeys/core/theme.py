from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ThemeMode = Literal["dark", "light"]


@dataclass(frozen=True, slots=True)
class KeyboardPalette:
    background: str
    border: str
    white_key: str
    white_key_active: str
    black_key: str
    black_key_active: str
    disabled_overlay: str
    label_natural: str
    label_accidental: str
    label_active: str


THEMES: dict[ThemeMode, KeyboardPalette] = {
    "dark": KeyboardPalette(
        background="#141416",
        border="#2A2A2D",
        white_key="#F5F5F5",
        white_key_active="#FFD7DF",
        black_key="#111113",
        black_key_active="#A10E2D",
        disabled_overlay="#80141416",
        label_natural="#111827",
        label_accidental="#F6F6F6",
        label_active="#D20F39",
    ),
    "light": KeyboardPalette(
        background="#FAFAFB",
        border="#D1D3D8",
        white_key="#FFFFFF",
        white_key_active="#FFE4EA",
        black_key="#1A1C21",
        black_key_active="#B31C3A",
        disabled_overlay="#80FAFAFB",
        label_natural="#1B1F2A",
        label_accidental="#F4F4F5",
        label_active="#C51E3A",
    ),
}


def get_theme(mode: ThemeMode = "dark") -> KeyboardPalette:
    return THEMES.get(mode, THEMES["dark"])
