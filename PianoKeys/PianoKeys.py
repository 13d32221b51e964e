from __future__ import annotations

import argparse
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtWidgets import QApplication

from pianokeys.core.config import APP_NAME
from pianokeys.core.keymap import note_name
from pianokeys.core.midi_recording import NoteRecorder
from pianokeys.core.settings_store import load_settings, shortcuts_for
from pianokeys.core.theme import get_theme
from pianokeys.piano_controller import PianoController
from pianokeys.ui.event_bridge import QtInputEventSource
from pianokeys.ui.piano_widget import PianoWidget

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(APP_NAME)


def _init_logging(verbose: bool, log_file: Path | None) -> None:
    if logging.getLogger().handlers:
        return
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    if log_file is None:
        return
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    except OSError as exc:
        logger.warning("File logging disabled: %s", exc)
        return
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=APP_NAME)
    parser.add_argument("--settings", type=Path, default=None, help="path to a settings JSON file")
    parser.add_argument("--record", type=Path, default=None, help="save the played notes to this .mid file on exit")
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args, _ = parser.parse_known_args(argv)
    return args


def main() -> int:
    args = _parse_args(sys.argv[1:])
    _init_logging(args.verbose, args.log_file)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_NAME)

    settings = load_settings(args.settings)
    recorder = NoteRecorder()

    def on_play_note(midi_number: int, previous: tuple[int, ...]) -> None:
        logger.info("play %s (%d) over %s", note_name(midi_number), midi_number, list(previous))
        recorder.on_play_note(midi_number, previous)

    def on_stop_note(midi_number: int, previous: tuple[int, ...]) -> None:
        logger.info("stop %s (%d)", note_name(midi_number), midi_number)
        recorder.on_stop_note(midi_number, previous)

    widget = PianoWidget(get_theme(settings.theme_mode))
    widget.setWindowTitle(APP_NAME)
    controller = PianoController(
        settings.note_range,
        on_play_note,
        on_stop_note,
        keyboard_shortcuts=shortcuts_for(settings),
        disabled=settings.disabled,
        renderer=widget,
        event_sources=[QtInputEventSource(app)],
    )
    if args.record is not None:
        recorder.start()

    with controller:
        widget.show()
        exit_code = app.exec()
        controller.release_all()

    if args.record is not None and recorder.has_take():
        recorder.stop()
        try:
            recorder.save_as(args.record)
        except (OSError, RuntimeError) as exc:
            logger.error("Could not save recording: %s", exc)
            return 1
        logger.info("Recording saved to %s", args.record)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
