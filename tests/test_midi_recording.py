import mido
import pytest

from pianokeys.core.midi_recording import NoteRecorder


class FakeClock:
    def __init__(self):
        self.now = 10.0

    def __call__(self):
        return self.now


def test_callbacks_ignored_until_started():
    recorder = NoteRecorder(clock=FakeClock())
    recorder.on_play_note(60, ())
    assert not recorder.has_take()


def test_records_chords_from_previous_notes():
    clock = FakeClock()
    recorder = NoteRecorder(clock=clock)
    recorder.start()
    recorder.on_play_note(60, ())
    clock.now = 10.5
    recorder.on_play_note(64, (60,))
    clock.now = 11.0
    recorder.on_stop_note(60, (60, 64))

    events = recorder.events()
    assert [event.kind for event in events] == ["note_on", "note_on", "note_off"]
    assert [event.at_seconds for event in events] == [0.0, 0.5, 1.0]
    assert events[1].chord == (60, 64)
    assert events[2].chord == (64,)
    assert recorder.chords() == [(60,), (60, 64)]


def test_save_without_take_raises(tmp_path):
    recorder = NoteRecorder()
    with pytest.raises(RuntimeError):
        recorder.save_as(tmp_path / "take.mid")


def test_save_writes_midi_file(tmp_path):
    clock = FakeClock()
    recorder = NoteRecorder(velocity=90, clock=clock)
    recorder.start()
    recorder.on_play_note(60, ())
    clock.now = 11.0
    recorder.on_stop_note(60, (60,))
    recorder.stop()

    target = tmp_path / "out" / "take.mid"
    recorder.save_as(target)

    messages = [message for message in mido.MidiFile(str(target)).tracks[0] if not message.is_meta]
    assert [message.type for message in messages] == ["note_on", "note_off"]
    assert messages[0].note == 60
    assert messages[0].velocity == 90
    assert messages[1].time > 0
