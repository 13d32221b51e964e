import pytest

from pianokeys.core.keymap import NoteRange, ShortcutEntry
from pianokeys.core.note_labels import NoteLabel, NoteNameLabelRenderer
from pianokeys.piano_controller import PianoController
from pianokeys.services.input_router import KeyInput


def test_end_to_end_keyboard_scenario(note_log):
    controller = PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        keyboard_shortcuts=[ShortcutEntry("a", 60)],
    )
    controller.router.key_down(KeyInput("a"))
    assert note_log.calls == [("play", 60, ())]
    assert controller.active_notes == (60,)

    controller.router.key_down(KeyInput("a"))
    assert len(note_log.calls) == 1

    controller.router.key_up(KeyInput("a"))
    assert note_log.calls[-1] == ("stop", 60, (60,))
    assert controller.active_notes == ()


def test_play_is_idempotent(controller, note_log):
    assert controller.play_note(64)
    assert not controller.play_note(64)
    assert note_log.notes("play") == [64]
    assert controller.active_notes == (64,)


def test_play_then_stop_restores_state(controller, note_log):
    controller.play_note(60)
    before = controller.active_notes
    controller.play_note(67)
    controller.stop_note(67)
    assert controller.active_notes == before
    assert note_log.calls[-2:] == [("play", 67, (60,)), ("stop", 67, (60, 67))]


def test_stop_of_inactive_note_is_ignored(controller, note_log):
    assert not controller.stop_note(60)
    assert note_log.calls == []


def test_disabled_controller_drops_requests(controller, note_log):
    controller.set_disabled(True)
    assert not controller.play_note(60)
    controller.router.key_down(KeyInput("a"))
    assert note_log.calls == []
    assert controller.active_notes == ()


def test_modifier_filtering_with_spurious_release_flags(controller, note_log):
    controller.router.key_down(KeyInput("s", ctrl=True))
    assert note_log.calls == []

    controller.router.key_down(KeyInput("s"))
    controller.router.key_up(KeyInput("s", ctrl=True))
    assert note_log.calls == [("play", 62, ()), ("stop", 62, (62,))]


def test_new_shortcut_table_releases_active_notes(controller, note_log):
    for note in (67, 60, 64):
        controller.play_note(note)
    note_log.calls.clear()

    controller.set_keyboard_shortcuts([ShortcutEntry("a", 60)])

    assert note_log.kinds() == ["stop", "stop", "stop"]
    assert note_log.notes("stop") == [60, 64, 67]
    assert note_log.calls[0] == ("stop", 60, (60, 64, 67))
    assert controller.active_notes == ()


def test_same_shortcut_table_keeps_active_notes(controller, note_log, shortcuts):
    controller.play_note(60)
    note_log.calls.clear()
    controller.set_keyboard_shortcuts(shortcuts)
    assert note_log.calls == []
    assert controller.active_notes == (60,)


def test_shortcut_table_edited_in_place_is_seen(note_log):
    table = [ShortcutEntry("a", 60)]
    controller = PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        keyboard_shortcuts=table,
    )
    assert not controller.router.key_down(KeyInput("s"))

    table.append(ShortcutEntry("s", 62))
    assert controller.router.key_down(KeyInput("s"))
    assert note_log.calls == [("play", 62, ())]
    assert controller.render_note_label(62, False, False).text == "s"


def test_equal_but_new_table_still_resets(controller, note_log, shortcuts):
    controller.play_note(60)
    controller.set_keyboard_shortcuts(list(shortcuts))
    assert note_log.calls[-1] == ("stop", 60, (60,))


def test_sync_active_notes_orders_stops_first(controller, note_log):
    controller.play_note(60)
    controller.play_note(62)
    note_log.calls.clear()

    changes = controller.sync_active_notes([62, 65, 69])

    assert changes.stopped == (60,)
    assert changes.started == (65, 69)
    assert note_log.kinds() == ["stop", "play", "play"]
    assert controller.active_notes == (62, 65, 69)


def test_playback_override_takes_precedence(controller, note_log, renderer):
    controller.play_note(48)
    changes = controller.set_playback_notes([60, 62])

    assert controller.rendered_notes == (60, 62)
    assert renderer.last.active_notes == (60, 62)
    assert changes.stopped == (48,)
    assert changes.started == (60, 62)
    assert note_log.notes("play") == [48]

    controller.play_note(50)
    controller.stop_note(48)
    assert controller.active_notes == (50,)
    assert renderer.last.active_notes == (60, 62)
    assert note_log.calls[-2:] == [("play", 50, (48,)), ("stop", 48, (48, 50))]

    controller.set_playback_notes(None)
    assert renderer.last.active_notes == (50,)


def test_renderer_receives_interaction_flags(controller, renderer):
    controller.router.pointer_down()
    assert renderer.last.pointer_held
    controller.router.touch_start()
    controller.router.pointer_up()
    assert not renderer.last.pointer_held
    assert renderer.last.prefer_touch


def test_renderer_callbacks_drive_the_controller(controller, renderer, note_log):
    controller.set_disabled(False)
    controller.set_note_range(NoteRange(60, 72))
    props = renderer.last
    assert props.note_range == NoteRange(60, 72)
    props.on_play_note(61)
    assert renderer.last.active_notes == (61,)
    renderer.last.on_stop_note(61)
    assert note_log.kinds() == ["play", "stop"]


def test_default_note_labels(controller):
    label = controller.render_note_label(60, is_active=True, is_accidental=False)
    assert label == NoteLabel(text="a", is_active=True, is_accidental=False)
    assert controller.render_note_label(61, is_active=False, is_accidental=True) is None


def test_custom_label_renderer(controller):
    controller.set_label_renderer(NoteNameLabelRenderer())
    label = controller.render_note_label(61, is_active=False, is_accidental=True)
    assert label.text == "C#4"
    controller.set_label_renderer(None)
    assert controller.render_note_label(61, False, True) is None


class FakeSource:
    def __init__(self, fail_detach=False):
        self.router = None
        self.attach_count = 0
        self.detach_count = 0
        self.fail_detach = fail_detach

    def attach(self, router):
        self.router = router
        self.attach_count += 1

    def detach(self):
        self.detach_count += 1
        self.router = None
        if self.fail_detach:
            raise RuntimeError("detach failed")


def test_context_manager_attaches_and_detaches(note_log):
    source = FakeSource()
    controller = PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        event_sources=[source],
    )
    with controller:
        assert controller.is_running
        assert source.router is controller.router
        controller.start()
        assert source.attach_count == 1
    assert not controller.is_running
    assert source.detach_count == 1


def test_sources_are_released_on_abnormal_exit(note_log):
    sources = [FakeSource(), FakeSource()]
    controller = PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        event_sources=sources,
    )
    with pytest.raises(KeyError):
        with controller:
            raise KeyError("boom")
    assert [source.detach_count for source in sources] == [1, 1]


def test_failing_detach_still_releases_other_sources(note_log):
    healthy = FakeSource()
    controller = PianoController(
        NoteRange(48, 77),
        note_log.on_play_note,
        note_log.on_stop_note,
        event_sources=[healthy, FakeSource(fail_detach=True)],
    )
    controller.start()
    with pytest.raises(RuntimeError):
        controller.stop()
    assert healthy.detach_count == 1
    assert not controller.is_running


def test_source_added_while_running_is_attached(note_log):
    controller = PianoController(NoteRange(48, 77), note_log.on_play_note, note_log.on_stop_note)
    controller.start()
    source = FakeSource()
    controller.add_event_source(source)
    assert source.router is controller.router
    controller.stop()
    assert source.detach_count == 1
