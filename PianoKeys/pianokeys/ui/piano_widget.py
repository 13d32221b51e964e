from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from PySide6.QtCore import QEvent, QPoint, QPointF, QRectF, QSize, Qt
from PySide6.QtGui import QColor, QEventPoint, QFont, QInputDevice, QMouseEvent, QPaintEvent, QPainter, QPen, QTouchEvent
from PySide6.QtWidgets import QWidget

from pianokeys.core.keymap import is_accidental
from pianokeys.core.theme import KeyboardPalette, get_theme

if TYPE_CHECKING:
    from pianokeys.core.keymap import NoteRange
    from pianokeys.piano_controller import KeyboardProps


@dataclass(slots=True)
class _KeyRect:
    note: int
    rect: QRectF


class PianoWidget(QWidget):
    """Paints a keyboard from ``KeyboardProps`` and reports key interactions.

    The widget never changes the active notes on its own; it asks the
    controller through ``on_play_note`` / ``on_stop_note`` and repaints
    whatever the next ``apply_props`` call hands back.
    """

    def __init__(self, palette: KeyboardPalette | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._palette = palette or get_theme()
        self._props: KeyboardProps | None = None
        self._note_range: NoteRange | None = None
        self._white_rects: list[_KeyRect] = []
        self._black_rects: list[_KeyRect] = []
        self._rect_by_note: dict[int, QRectF] = {}
        self._white_note_count = 0
        self._mouse_note: int | None = None
        self._touch_notes: dict[int, int] = {}
        self.setMouseTracking(True)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)

    @staticmethod
    def _white_width() -> int:
        return 26

    @staticmethod
    def _white_height() -> int:
        return 160

    @staticmethod
    def _black_width() -> int:
        return 18

    @staticmethod
    def _black_height() -> int:
        return 100

    @staticmethod
    def _margin() -> int:
        return 8

    def sizeHint(self) -> QSize:
        white_count = max(1, self._white_note_count)
        width = (self._margin() * 2) + (white_count * self._white_width())
        height = (self._margin() * 2) + self._white_height()
        return QSize(width, height)

    def minimumSizeHint(self) -> QSize:
        return self.sizeHint()

    @property
    def props(self) -> KeyboardProps | None:
        return self._props

    def set_palette(self, palette: KeyboardPalette) -> None:
        self._palette = palette
        self.update()

    def apply_props(self, props: KeyboardProps) -> None:
        range_changed = props.note_range != self._note_range
        self._props = props
        if range_changed:
            self._note_range = props.note_range
            self._release_pointer_note()
            self._rebuild_geometry()
            self.updateGeometry()
        self.update()

    def note_at(self, pos: QPoint | QPointF) -> int | None:
        point = QPointF(pos)
        for item in self._black_rects:
            if item.rect.contains(point):
                return item.note
        for item in self._white_rects:
            if item.rect.contains(point):
                return item.note
        return None

    def key_rect(self, note: int) -> QRectF | None:
        return self._rect_by_note.get(note)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._rebuild_geometry()

    def _rebuild_geometry(self) -> None:
        self._white_rects.clear()
        self._black_rects.clear()
        self._rect_by_note.clear()
        self._white_note_count = 0
        if self._note_range is None:
            return
        notes = list(self._note_range.notes())
        white_notes = [note for note in notes if not is_accidental(note)]
        self._white_note_count = len(white_notes)
        if not white_notes:
            return

        margin = float(self._margin())
        available = max(1.0, float(self.width()) - (margin * 2))
        white_w = max(float(self._white_width()), available / len(white_notes))
        white_h = max(float(self._white_height()), float(self.height()) - (margin * 2))
        black_w = white_w * (self._black_width() / self._white_width())
        black_h = white_h * (self._black_height() / self._white_height())

        x = margin
        white_x_by_note: dict[int, float] = {}
        for note in white_notes:
            rect = QRectF(x, margin, white_w, white_h)
            self._white_rects.append(_KeyRect(note=note, rect=rect))
            self._rect_by_note[note] = rect
            white_x_by_note[note] = x
            x += white_w

        for note in notes:
            if not is_accidental(note):
                continue
            # A range starting on an accidental has no white key to its left.
            left_x = white_x_by_note.get(note - 1)
            if left_x is None:
                left_x = margin - white_w
            center = left_x + white_w
            rect = QRectF(center - (black_w / 2.0), margin, black_w, black_h)
            self._black_rects.append(_KeyRect(note=note, rect=rect))
            self._rect_by_note[note] = rect

    def _fill_color(self, note: int, active: bool) -> QColor:
        if is_accidental(note):
            return QColor(self._palette.black_key_active if active else self._palette.black_key)
        return QColor(self._palette.white_key_active if active else self._palette.white_key)

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.fillRect(event.rect(), QColor(self._palette.background))
        props = self._props
        if props is None or not self._white_rects:
            painter.end()
            return

        active = set(props.active_notes)
        outline = QPen(QColor(self._palette.border), 1)
        for item in self._white_rects + self._black_rects:
            is_active = item.note in active
            painter.fillRect(item.rect, self._fill_color(item.note, is_active))
            painter.setPen(outline)
            painter.drawRect(item.rect)
            self._draw_label(painter, item, is_active)

        if props.disabled:
            painter.fillRect(self.rect(), QColor(self._palette.disabled_overlay))
        painter.end()

    def _draw_label(self, painter: QPainter, item: _KeyRect, is_active: bool) -> None:
        props = self._props
        if props is None:
            return
        accidental = is_accidental(item.note)
        label = props.render_note_label(item.note, is_active, accidental)
        if label is None or not label.text:
            return
        if label.is_active:
            color = self._palette.label_active
        elif label.is_accidental:
            color = self._palette.label_accidental
        else:
            color = self._palette.label_natural
        painter.setPen(QColor(color))
        painter.setFont(QFont("Segoe UI", 9 if accidental else 10, QFont.Weight.Bold))
        rect = item.rect
        painter.drawText(
            QRectF(rect.left(), rect.bottom() - 24.0, rect.width(), 18.0),
            Qt.AlignHCenter | Qt.AlignBottom,
            label.text,
        )

    def _from_touch(self, event: QMouseEvent) -> bool:
        return event.deviceType() == QInputDevice.DeviceType.TouchScreen

    def _play(self, note: int | None) -> None:
        if note is None or self._props is None:
            return
        self._props.on_play_note(note)

    def _stop(self, note: int | None) -> None:
        if note is None or self._props is None:
            return
        self._props.on_stop_note(note)

    def _release_pointer_note(self) -> None:
        note = self._mouse_note
        self._mouse_note = None
        self._stop(note)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mousePressEvent(event)
        if self._props is None or (self._props.prefer_touch and self._from_touch(event)):
            event.accept()
            return
        note = self.note_at(event.position())
        self._mouse_note = note
        self._play(note)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        props = self._props
        if props is None or not props.pointer_held or (props.prefer_touch and self._from_touch(event)):
            event.accept()
            return
        note = self.note_at(event.position())
        if note != self._mouse_note:
            self._stop(self._mouse_note)
            self._mouse_note = note
            self._play(note)
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            return super().mouseReleaseEvent(event)
        self._release_pointer_note()
        event.accept()

    def leaveEvent(self, event) -> None:
        self._release_pointer_note()
        super().leaveEvent(event)

    def event(self, event: QEvent) -> bool:
        if event.type() in {
            QEvent.Type.TouchBegin,
            QEvent.Type.TouchUpdate,
            QEvent.Type.TouchEnd,
            QEvent.Type.TouchCancel,
        } and isinstance(event, QTouchEvent):
            if self._props is None or not self._props.prefer_touch:
                return super().event(event)
            self._handle_touch(event)
            event.accept()
            return True
        return super().event(event)

    def _handle_touch(self, event: QTouchEvent) -> None:
        if event.type() == QEvent.Type.TouchCancel:
            self.cancel_touch_points()
            return
        for point in event.points():
            self.update_touch_point(
                point.id(),
                point.position(),
                released=point.state() == QEventPoint.State.Released,
            )

    def update_touch_point(self, point_id: int, pos: QPoint | QPointF, released: bool = False) -> None:
        """Track one finger: sliding onto another key swaps the sounding note."""
        previous = self._touch_notes.get(point_id)
        if released:
            self._touch_notes.pop(point_id, None)
            self._stop(previous)
            return
        note = self.note_at(pos)
        if note == previous:
            return
        self._stop(previous)
        if note is None:
            self._touch_notes.pop(point_id, None)
            return
        self._touch_notes[point_id] = note
        self._play(note)

    def cancel_touch_points(self) -> None:
        notes = list(self._touch_notes.values())
        self._touch_notes.clear()
        for note in notes:
            self._stop(note)
