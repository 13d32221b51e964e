from pianokeys.core.config import LABEL_CLASS, LABEL_CLASS_ACCIDENTAL, LABEL_CLASS_ACTIVE, LABEL_CLASS_NATURAL
from pianokeys.core.note_labels import NoteLabelContext, NoteNameLabelRenderer, ShortcutLabelRenderer


def test_shortcut_renderer_skips_unbound_keys():
    context = NoteLabelContext(midi_number=60, is_active=False, is_accidental=False, keyboard_shortcut=None)
    assert ShortcutLabelRenderer().render(context) is None


def test_shortcut_renderer_style_classes():
    natural = ShortcutLabelRenderer().render(
        NoteLabelContext(midi_number=60, is_active=True, is_accidental=False, keyboard_shortcut="a")
    )
    assert natural.text == "a"
    assert natural.style_classes == (LABEL_CLASS, LABEL_CLASS_ACTIVE, LABEL_CLASS_NATURAL)

    accidental = ShortcutLabelRenderer().render(
        NoteLabelContext(midi_number=61, is_active=False, is_accidental=True, keyboard_shortcut="w")
    )
    assert accidental.style_classes == (LABEL_CLASS, LABEL_CLASS_ACCIDENTAL)


def test_note_name_renderer_labels_every_key():
    label = NoteNameLabelRenderer().render(
        NoteLabelContext(midi_number=69, is_active=False, is_accidental=False, keyboard_shortcut=None)
    )
    assert label.text == "A4"
