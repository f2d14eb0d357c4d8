import argparse
import logging
import sys

from PySide6.QtCore import QObject, QTimer, Signal, Slot
from PySide6.QtWidgets import (
    QApplication,
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QInputDialog,
    QLabel,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from audio_timeline.config import ConfigError, LOG_LEVELS, load_config
from audio_timeline.domain.errors import AudioTimelineError
from audio_timeline.domain.playback_state import PlaybackStatus
from audio_timeline.services.audio_engine import SoundDeviceOutput
from audio_timeline.services.session import TimelineSession
from audio_timeline.ui.styles import DARK_STYLE
from audio_timeline.ui.waveform_widget import TimelineWidget, WaveformWidget
from audio_timeline.ui.worker import LoadAudioWorker
from audio_timeline.use_cases.play_selection import PlaySelection
from audio_timeline.use_cases.toggle_playback import TogglePlayback

log = logging.getLogger(__name__)

PLAYBACK_RATES = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


def format_seconds(seconds: float) -> str:
    m = int(seconds // 60)
    s = int(seconds % 60)
    ms = int((seconds % 1) * 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"


class MainThreadDispatcher(QObject):
    """Queues callables from the audio thread onto the Qt main thread."""

    invoke = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.invoke.connect(self._run)

    @Slot(object)
    def _run(self, fn):
        fn()


class MainWindow(QMainWindow):
    def __init__(self, config: dict):
        super().__init__()
        self.config = config
        self.dispatcher = MainThreadDispatcher(self)
        self.session = TimelineSession(
            SoundDeviceOutput(dispatch=self.dispatcher.invoke.emit),
            config=config,
        )
        self._workers: list[LoadAudioWorker] = []

        self.setWindowTitle("VibeCore Timeline")
        self.setMinimumSize(960, 420)
        self.setStyleSheet(DARK_STYLE)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        root_layout = QVBoxLayout()
        root_layout.setContentsMargins(10, 10, 10, 10)
        root_layout.setSpacing(10)
        central_widget.setLayout(root_layout)

        # ===== Transport Bar =====
        transport_bar = QWidget()
        transport_bar.setObjectName("transportBar")
        bar_layout = QHBoxLayout()
        bar_layout.setContentsMargins(12, 10, 12, 10)
        bar_layout.setSpacing(6)
        transport_bar.setLayout(bar_layout)
        root_layout.addWidget(transport_bar)

        self.open_file_button = QPushButton("Open File")
        self.open_file_button.clicked.connect(self.handle_open_file)
        self.open_url_button = QPushButton("Open URL")
        self.open_url_button.clicked.connect(self.handle_open_url)
        self.play_button = QPushButton("Play")
        self.play_button.clicked.connect(self.handle_toggle_playback)
        self.stop_button = QPushButton("Stop")
        self.stop_button.clicked.connect(self.handle_stop)
        self.play_selection_button = QPushButton("Play Selection")
        self.play_selection_button.clicked.connect(self.handle_play_selection)

        self.rate_selector = QComboBox()
        self.rate_selector.setObjectName("rateSelector")
        for rate in PLAYBACK_RATES:
            self.rate_selector.addItem(f"{rate:g}x", rate)
        self.rate_selector.setCurrentIndex(PLAYBACK_RATES.index(1.0))
        self.rate_selector.currentIndexChanged.connect(self.handle_rate_changed)

        self.zoom_out_button = QPushButton("-")
        self.zoom_out_button.setObjectName("zoomButton")
        self.zoom_out_button.clicked.connect(self.handle_zoom_out)
        self.zoom_in_button = QPushButton("+")
        self.zoom_in_button.setObjectName("zoomButton")
        self.zoom_in_button.clicked.connect(self.handle_zoom_in)

        self.position_label = QLabel(format_seconds(0.0))
        self.position_label.setObjectName("positionLabel")

        for widget in (
            self.open_file_button,
            self.open_url_button,
            self.play_button,
            self.stop_button,
            self.play_selection_button,
            self.rate_selector,
        ):
            bar_layout.addWidget(widget)
        bar_layout.addStretch(1)
        bar_layout.addWidget(self.position_label)
        bar_layout.addWidget(self.zoom_out_button)
        bar_layout.addWidget(self.zoom_in_button)

        # ===== Timeline =====
        self.timeline_widget = TimelineWidget()
        self.waveform_widget = WaveformWidget()
        self.waveform_widget.dragStarted.connect(self.session.begin_drag)
        self.waveform_widget.dragMoved.connect(self.on_drag_moved)
        self.waveform_widget.dragFinished.connect(self.on_drag_finished)

        canvas = QWidget()
        canvas_layout = QVBoxLayout()
        canvas_layout.setContentsMargins(0, 0, 0, 0)
        canvas_layout.setSpacing(0)
        canvas.setLayout(canvas_layout)
        canvas_layout.addWidget(self.timeline_widget)
        canvas_layout.addWidget(self.waveform_widget)
        self.canvas = canvas

        self.scroll_area = QScrollArea()
        self.scroll_area.setObjectName("waveformScroll")
        self.scroll_area.setWidget(canvas)
        self.scroll_area.setWidgetResizable(False)
        root_layout.addWidget(self.scroll_area, 1)

        self.status_label = QLabel("Open an audio file to begin.")
        self.status_label.setObjectName("statusLabel")
        root_layout.addWidget(self.status_label)

        # ===== Session Wiring =====
        self.session.on_loaded(self.on_loaded)
        self.session.on_cursor_moved(self.on_cursor_moved)
        self.session.on_state_changed(self.on_state_changed)
        self.session.on_selection_changed(self.on_selection_changed)
        self.session.on_zoom_changed(self.on_zoom_changed)
        self.session.on_error(self.on_error)

        self.transport_timer = QTimer(self)
        self.transport_timer.setInterval(config["time_update_interval_ms"])
        self.transport_timer.timeout.connect(self.session.tick)

        self.update_controls()
        self._apply_canvas_width()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_source(self, source: str):
        token = self.session.begin_load()
        worker = LoadAudioWorker(token, source, self.config["fetch_timeout_seconds"])
        worker.result.connect(self.on_load_result)
        worker.finished.connect(lambda: self._workers.remove(worker))
        self._workers.append(worker)
        self.status_label.setText(f"Loading {source} ...")
        worker.start()

    @Slot(int, bool, str, object)
    def on_load_result(self, token: int, ok: bool, message: str, payload):
        if ok:
            if self.session.complete_load(token, payload):
                self.status_label.setText(message)
        else:
            self.session.fail_load(token, payload)

    def handle_open_file(self):
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Open Audio",
            "",
            "Audio Files (*.wav *.flac *.ogg *.aiff *.aif *.mp3);;All Files (*)",
        )
        if path:
            self.load_source(path)

    def handle_open_url(self):
        url, ok = QInputDialog.getText(self, "Open URL", "Audio URL:")
        if ok and url.strip():
            self.load_source(url.strip())

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _run(self, command, *args):
        # errors already reach the status line through on_error
        try:
            command(*args)
        except AudioTimelineError:
            pass

    def handle_toggle_playback(self):
        self._run(TogglePlayback(self.session).execute)

    def handle_stop(self):
        self._run(self.session.stop)

    def handle_play_selection(self):
        try:
            PlaySelection(self.session).execute()
        except AudioTimelineError as e:
            self.status_label.setText(str(e))

    def handle_rate_changed(self, index: int):
        self._run(self.session.set_playback_rate, self.rate_selector.itemData(index))

    def handle_zoom_in(self):
        self.session.zoom_in()

    def handle_zoom_out(self):
        self.session.zoom_out()

    # ------------------------------------------------------------------
    # Session events
    # ------------------------------------------------------------------

    def on_loaded(self, asset):
        self.waveform_widget.set_envelope(self.session.get_envelope().magnitudes)
        self.timeline_widget.set_duration_seconds(asset.duration_seconds)
        self.waveform_widget.clear_selection()
        self._refresh_cursor()
        self.update_controls()

    def on_cursor_moved(self, seconds: float, pixel_x: float):
        self.waveform_widget.set_cursor_x(pixel_x)
        self.position_label.setText(format_seconds(seconds))
        self.scroll_area.ensureVisible(int(pixel_x), 0, 40, 0)

    def on_state_changed(self, status: PlaybackStatus):
        if status is PlaybackStatus.PLAYING:
            self.transport_timer.start()
        else:
            self.transport_timer.stop()
        self.play_button.setText("Pause" if status is PlaybackStatus.PLAYING else "Play")
        self._refresh_cursor()

    def on_selection_changed(self, selection):
        if selection is None:
            self.waveform_widget.clear_selection()
            return
        if selection.is_empty:
            # a click without a drag moves the playhead
            self._run(self.session.seek, selection.start_seconds)
            self.waveform_widget.clear_selection()
            self._refresh_cursor()
        else:
            self._show_selection(selection)
            self.status_label.setText(
                f"Selected {format_seconds(selection.start_seconds)} - "
                f"{format_seconds(selection.end_seconds)}"
            )
        self.update_controls()

    def on_zoom_changed(self, zoom_level: float, effective_width: float):
        self._apply_canvas_width()
        selection = self.session.selection
        if selection is not None and not selection.is_empty:
            self._show_selection(selection)
        self._refresh_cursor()

    def on_error(self, error: AudioTimelineError):
        self.status_label.setText(str(error))

    def on_drag_moved(self, pixel_x: float):
        preview = self.session.update_drag(pixel_x)
        if preview is not None:
            self._show_selection(preview)

    def on_drag_finished(self, pixel_x: float):
        self.session.end_drag(pixel_x)

    # ------------------------------------------------------------------
    # View helpers
    # ------------------------------------------------------------------

    def _show_selection(self, selection):
        self.waveform_widget.set_selection_pixels(
            self.session.time_to_pixel(selection.start_seconds),
            self.session.time_to_pixel(selection.end_seconds),
        )

    def _refresh_cursor(self):
        if self.session.asset is None:
            self.waveform_widget.set_cursor_x(None)
            return
        self.waveform_widget.set_cursor_x(self.session.cursor_pixel())
        self.position_label.setText(format_seconds(self.session.get_elapsed()))

    def _apply_canvas_width(self):
        width = self.session.effective_width
        self.timeline_widget.setFixedWidth(max(1, int(round(width))))
        self.waveform_widget.set_content_width(width)
        self.canvas.adjustSize()

    def update_controls(self):
        has_audio = self.session.asset is not None
        for widget in (
            self.play_button,
            self.stop_button,
            self.rate_selector,
            self.zoom_in_button,
            self.zoom_out_button,
        ):
            widget.setEnabled(has_audio)
        self.play_selection_button.setEnabled(
            has_audio and self.session.selection is not None and not self.session.selection.is_empty
        )

    def resizeEvent(self, event):  # noqa: N802 (Qt API)
        super().resizeEvent(event)
        width = self.scroll_area.viewport().width()
        if width > 0:
            self.session.set_viewport_width(width)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Waveform timeline viewer")
    parser.add_argument("source", nargs="?", help="audio file path or http(s) URL")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="override the configured log level")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        parser.error(str(e))
    if args.log_level:
        config["log_level"] = args.log_level

    logging.basicConfig(
        level=config["log_level"].upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv[:1])
    window = MainWindow(config)
    window.resize(1280, 480)
    window.show()
    if args.source:
        window.load_source(args.source)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
