DARK_STYLE = """
QMainWindow {
    background-color: #07090E;
}

QWidget {
    background-color: #07090E;
    color: #ECF2FF;
    font-family: "Segoe UI", "Trebuchet MS", "Verdana";
    font-size: 14px;
}

QWidget#transportBar {
    background: qlineargradient(
        x1: 0, y1: 0, x2: 1, y2: 1,
        stop: 0 #121A2A,
        stop: 1 #0B111F
    );
    border: 1px solid #2C3D5F;
    border-radius: 14px;
}

QPushButton {
    background: qlineargradient(
        x1: 0, y1: 0, x2: 0, y2: 1,
        stop: 0 #1B2333,
        stop: 1 #0E1422
    );
    border: 1px solid #2E3E5E;
    border-radius: 9px;
    min-height: 34px;
    padding: 7px 12px;
    font-weight: 600;
}

QPushButton:hover {
    border: 1px solid #4A79D9;
}

QPushButton:disabled {
    color: #5B6780;
    border: 1px solid #1C2538;
}

QPushButton#zoomButton {
    min-width: 34px;
    max-width: 34px;
    padding: 4px 0;
    font-size: 18px;
}

QComboBox#rateSelector {
    border: 1px solid #2F4267;
    border-radius: 9px;
    min-height: 34px;
    padding: 6px 10px;
}

QLabel#positionLabel {
    font-family: "Consolas", "Menlo", monospace;
    color: #FF8C42;
    padding: 0 8px;
}

QLabel#statusLabel {
    font-size: 13px;
    color: #90A3C8;
}

QScrollArea#waveformScroll {
    border: 1px solid #2A2A2A;
}
"""
