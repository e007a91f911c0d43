"""
Styles and colors for the companion client GUI.
"""

from shared.enums import ToastLevel


# Toast/status colors by level
TOAST_COLORS = {
    ToastLevel.INFO.value: "#3498DB",
    ToastLevel.SUCCESS.value: "#27AE60",
    ToastLevel.WARNING.value: "#F39C12",
    ToastLevel.ERROR.value: "#E74C3C",
}

# How long a toast stays in the status bar (ms)
TOAST_DURATION_MS = 4000

# Stylesheet
MAIN_STYLESHEET = """
QMainWindow, QWidget#centralWidget { background-color: #2C3E50; }

QLabel, QStatusBar { color: #ECF0F1; }
QLabel#bankLabel { font-size: 20px; font-weight: bold; color: #F1C40F; }
QLabel#connectionLabel { color: #BDC3C7; font-style: italic; }

QPushButton {
    background-color: #3498DB;
    color: white;
    border: none;
    border-radius: 4px;
    padding: 8px 18px;
    font-weight: bold;
}
QPushButton:hover { background-color: #2980B9; }
QPushButton:disabled { background-color: #7F8C8D; color: #BDC3C7; }

QGroupBox {
    color: #ECF0F1;
    font-weight: bold;
    border: 2px solid #34495E;
    border-radius: 6px;
    margin-top: 14px;
    padding-top: 6px;
}
QGroupBox::title { subcontrol-origin: margin; left: 8px; padding: 0 4px; }

QListWidget {
    background-color: #1A252F;
    color: #ECF0F1;
    border: 1px solid #34495E;
    border-radius: 4px;
}
QListWidget::item { padding: 5px; }

QMessageBox { background-color: #2C3E50; }
QMessageBox QLabel { color: #ECF0F1; }
"""
