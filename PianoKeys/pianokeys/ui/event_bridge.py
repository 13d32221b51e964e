from __future__ import annotations

import logging
from dataclasses import replace

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QApplication, QWidget

from pianokeys.services.input_router import InputRouter, KeyInput

logger = logging.getLogger(__name__)

_NAMED_KEYS: dict[int, str] = {
    int(Qt.Key.Key_Space): " ",
    int(Qt.Key.Key_Return): "Enter",
    int(Qt.Key.Key_Enter): "Enter",
    int(Qt.Key.Key_Tab): "Tab",
    int(Qt.Key.Key_Backspace): "Backspace",
    int(Qt.Key.Key_Escape): "Escape",
    int(Qt.Key.Key_Left): "ArrowLeft",
    int(Qt.Key.Key_Right): "ArrowRight",
    int(Qt.Key.Key_Up): "ArrowUp",
    int(Qt.Key.Key_Down): "ArrowDown",
}

_POINTER_DOWN_EVENTS = {QEvent.Type.MouseButtonPress, QEvent.Type.MouseButtonDblClick}
_FOCUS_LOST_EVENTS = {QEvent.Type.ApplicationDeactivate, QEvent.Type.WindowDeactivate}


def key_identifier(event: QKeyEvent) -> str:
    text = event.text()
    if len(text) == 1 and text.isprintable():
        return text
    # With ctrl/meta held Qt reports control characters as text.
    key = int(event.key())
    if int(Qt.Key.Key_A) <= key <= int(Qt.Key.Key_Z):
        letter = chr(ord("a") + (key - int(Qt.Key.Key_A)))
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        return letter.upper() if shift else letter
    if int(Qt.Key.Key_0) <= key <= int(Qt.Key.Key_9):
        return str(key - int(Qt.Key.Key_0))
    return _NAMED_KEYS.get(key, "")


def key_input_from_event(event: QKeyEvent) -> KeyInput:
    modifiers = event.modifiers()
    return KeyInput(
        key=key_identifier(event),
        ctrl=bool(modifiers & Qt.KeyboardModifier.ControlModifier),
        meta=bool(modifiers & Qt.KeyboardModifier.MetaModifier),
        shift=bool(modifiers & Qt.KeyboardModifier.ShiftModifier),
    )


class QtInputEventSource(QObject):
    """Feeds application-wide Qt input events into an ``InputRouter``.

    The filter sits on the application object, so a pointer released outside
    the keyboard widget still clears the held state.
    """

    def __init__(self, target: QObject | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._target = target
        self._installed_on: QObject | None = None
        self._router: InputRouter | None = None
        self._pressed_keys: dict[int, str] = {}

    @property
    def is_attached(self) -> bool:
        return self._installed_on is not None

    def attach(self, router: InputRouter) -> None:
        if self._installed_on is not None:
            self._router = router
            return
        target = self._target if self._target is not None else QApplication.instance()
        if target is None:
            raise RuntimeError("A QApplication must exist before attaching input events.")
        self._router = router
        target.installEventFilter(self)
        self._installed_on = target
        logger.debug("Input event filter installed on %r", target)

    def detach(self) -> None:
        target = self._installed_on
        self._installed_on = None
        self._router = None
        self._pressed_keys.clear()
        if target is None:
            return
        target.removeEventFilter(self)
        logger.debug("Input event filter removed from %r", target)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        router = self._router
        if router is None:
            return super().eventFilter(watched, event)
        event_type = event.type()
        if event_type == QEvent.Type.KeyPress and isinstance(event, QKeyEvent):
            if event.isAutoRepeat():
                return False
            key_input = key_input_from_event(event)
            self._pressed_keys[int(event.key())] = key_input.key
            return router.key_down(key_input)
        if event_type == QEvent.Type.KeyRelease and isinstance(event, QKeyEvent):
            # Qt emits a release before every auto-repeated press.
            if event.isAutoRepeat():
                return False
            key_input = key_input_from_event(event)
            # Resolve by the key reported at press time: a modifier pressed in
            # between changes the text (shift turns "a" into "A").
            pressed_as = self._pressed_keys.pop(int(event.key()), None)
            if pressed_as is not None and pressed_as != key_input.key:
                key_input = replace(key_input, key=pressed_as)
            return router.key_up(key_input)
        if event_type in _POINTER_DOWN_EVENTS:
            router.pointer_down()
        elif event_type == QEvent.Type.MouseButtonRelease:
            router.pointer_up()
        elif event_type == QEvent.Type.TouchBegin:
            router.touch_start()
        elif event_type in _FOCUS_LOST_EVENTS or (
            event_type == QEvent.Type.FocusOut and self._is_focus_root(watched)
        ):
            self._pressed_keys.clear()
            router.focus_lost()
        return super().eventFilter(watched, event)

    def _is_focus_root(self, watched: QObject) -> bool:
        if watched is self._installed_on:
            return True
        return isinstance(watched, QWidget) and watched.isWindow()
