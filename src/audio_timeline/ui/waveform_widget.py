from __future__ import annotations

import numpy as np
from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QWidget


class WaveformWidget(QWidget):
    """Draws a waveform envelope, the selection and the playback cursor.

    The widget is as wide as the zoomed timeline; it lives inside a scroll
    area. Mouse drags are forwarded as pixel positions, the session decides
    what they mean.
    """
    dragStarted = Signal(float)
    dragMoved = Signal(float)
    dragFinished = Signal(float)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._envelope = np.array([], dtype=np.float32)
        self._cursor_x: float | None = None
        self._selection_x: tuple[float, float] | None = None
        self._dragging = False
        self.setMinimumHeight(160)

    def set_envelope(self, magnitudes: np.ndarray | None) -> None:
        """Set envelope data and trigger repaint."""
        if magnitudes is None:
            self._envelope = np.array([], dtype=np.float32)
        else:
            self._envelope = np.asarray(magnitudes, dtype=np.float32).flatten()
        self.update()

    def set_content_width(self, width: float) -> None:
        self.setFixedWidth(max(1, int(round(width))))

    def set_cursor_x(self, x: float | None) -> None:
        """Set playback cursor location in pixels, or None to hide it."""
        if x is None:
            self._cursor_x = None
        else:
            self._cursor_x = float(np.clip(x, 0.0, max(0, self.width() - 1)))
        self.update()

    def set_selection_pixels(self, start: float | None, end: float | None) -> None:
        if start is None or end is None:
            self._selection_x = None
        else:
            self._selection_x = (min(start, end), max(start, end))
        self.update()

    def clear_selection(self) -> None:
        self.set_selection_pixels(None, None)

    @staticmethod
    def build_peaks(envelope: np.ndarray, bins: int) -> np.ndarray:
        """Resample an envelope to one magnitude per horizontal pixel.

        Several envelope points per pixel keep their maximum; fewer points
        than pixels are stretched.
        """
        if bins <= 0:
            return np.array([], dtype=np.float32)
        if envelope.size == 0:
            return np.zeros(bins, dtype=np.float32)

        edges = np.linspace(0, envelope.size, bins + 1)
        peaks = np.empty(bins, dtype=np.float32)
        for i in range(bins):
            start = int(edges[i])
            end = max(start + 1, int(edges[i + 1]))
            peaks[i] = float(np.max(envelope[start:min(end, envelope.size)]))
        return peaks

    def paintEvent(self, event) -> None:  # noqa: N802 (Qt API)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, False)

        rect = self.rect()
        painter.fillRect(rect, QColor("#121212"))

        width = max(1, rect.width())
        height = rect.height()
        mid_y = height / 2

        border_pen = QPen(QColor("#2A2A2A"))
        painter.setPen(border_pen)
        painter.drawLine(0, 0, width - 1, 0)
        painter.drawLine(0, height - 1, width - 1, height - 1)

        axis_pen = QPen(QColor("#2F2F2F"))
        painter.setPen(axis_pen)
        painter.drawLine(0, int(mid_y), width, int(mid_y))

        if self._selection_x is not None:
            x1, x2 = (int(v) for v in self._selection_x)
            painter.fillRect(x1, 0, max(1, x2 - x1), height, QColor(110, 231, 255, 45))
            select_pen = QPen(QColor("#6EE7FF"))
            painter.setPen(select_pen)
            painter.drawLine(x1, 0, x1, height)
            painter.drawLine(x2, 0, x2, height)

        if self._envelope.size > 0:
            peaks = self.build_peaks(self._envelope, width)
            loudest = float(np.max(peaks))
            scale = 1.0 / loudest if loudest > 0 else 0.0
            wave_pen = QPen(QColor("#6EE7FF"))
            painter.setPen(wave_pen)

            max_amplitude = (height / 2) - 6
            for x, value in enumerate(peaks):
                half_line = max_amplitude * float(value) * scale
                painter.drawLine(x, int(mid_y - half_line), x, int(mid_y + half_line))

        if self._cursor_x is not None:
            cursor_pen = QPen(QColor("#FF8C42"))
            cursor_pen.setWidth(2)
            painter.setPen(cursor_pen)
            painter.drawLine(int(self._cursor_x), 0, int(self._cursor_x), height)

    def mousePressEvent(self, event) -> None:  # noqa: N802 (Qt API)
        if event.button() != Qt.LeftButton:
            return
        self._dragging = True
        self.dragStarted.emit(event.position().x())

    def mouseMoveEvent(self, event) -> None:  # noqa: N802 (Qt API)
        if not self._dragging:
            return
        self.dragMoved.emit(event.position().x())

    def mouseReleaseEvent(self, event) -> None:  # noqa: N802 (Qt API)
        if event.button() != Qt.LeftButton or not self._dragging:
            return
        self._dragging = False
        self.dragFinished.emit(event.position().x())


class TimelineWidget(QWidget):
    """Seconds ruler matching the waveform's zoomed width."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._duration_seconds = 0.0
        self.setMinimumHeight(36)
        self.setMaximumHeight(36)

    def set_duration_seconds(self, duration_seconds: float) -> None:
        self._duration_seconds = max(0.0, float(duration_seconds))
        self.update()

    @staticmethod
    def tick_step(duration: float, width: float) -> float:
        """Pick a label spacing giving roughly one tick per 120 pixels."""
        target_ticks = max(1.0, width / 120.0)
        raw_step = duration / target_ticks
        for step in (0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0):
            if raw_step <= step:
                return step
        return 120.0

    def paintEvent(self, event) -> None:  # noqa: N802 (Qt API)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, False)
        rect = self.rect()
        painter.fillRect(rect, QColor("#111111"))

        if rect.width() <= 1:
            return

        right = rect.width() - 1
        baseline_y = rect.height() - 12

        axis_pen = QPen(QColor("#3A3A3A"))
        painter.setPen(axis_pen)
        painter.drawLine(0, baseline_y, right, baseline_y)

        label_pen = QPen(QColor("#9D9D9D"))
        painter.setPen(label_pen)

        duration = self._duration_seconds
        if duration <= 0.0:
            painter.drawText(2, 11, "0.0s")
            return

        step = self.tick_step(duration, rect.width())
        tick_time = 0.0
        while tick_time <= duration + 1e-6:
            x = int(tick_time / duration * right)
            painter.drawLine(x, baseline_y - 5, x, baseline_y + 2)
            painter.drawText(x + 2, 11, f"{tick_time:.1f}s")
            tick_time += step
