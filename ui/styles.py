# styles.py
# QSS dos diálogos (tema claro/escuro conforme config.yaml)

from PyQt6.QtWidgets import QWidget

from core.config import load_config

QSS_POPUP_DARK = """
QDialog, QWidget#settings-page {
    background: #23272e;
    color: #f3f4f6;
}
QLabel, QCheckBox, QGroupBox {
    color: #f3f4f6;
    background: transparent;
}
QLineEdit, QTextEdit, QPlainTextEdit {
    color: #f3f4f6;
    background: #23272e;
    border: 1px solid #444;
    border-radius: 6px;
    padding: 6px;
}
QPushButton {
    background: #2d323b;
    color: #f3f4f6;
    border: 1px solid #444;
    border-radius: 4px;
    padding: 6px 14px;
}
QPushButton:hover {
    background: #3b4252;
}
QPushButton:disabled {
    color: #6b7280;
}
QPushButton#danger {
    background: #b91c1c;
    border-color: #991b1b;
    color: #ffffff;
}
"""

QSS_POPUP_LIGHT = """
QDialog, QWidget#settings-page {
    background: #ffffff;
    color: #1f2937;
}
QLabel, QCheckBox, QGroupBox {
    color: #1f2937;
    background: transparent;
}
QLineEdit, QTextEdit, QPlainTextEdit {
    color: #111827;
    background: #ffffff;
    border: 1px solid #d1d5db;
    border-radius: 8px;
    padding: 6px;
}
QPushButton {
    background: #e5e7eb;
    color: #111827;
    border: 1px solid #d1d5db;
    border-radius: 10px;
    padding: 8px 14px;
}
QPushButton:hover {
    background: #dbeafe;
    border-color: #bfdbfe;
}
QPushButton:disabled {
    color: #9ca3af;
}
QPushButton#danger {
    background: #ef4444;
    border-color: #dc2626;
    color: #ffffff;
}
QPushButton#danger:hover {
    background: #dc2626;
}
"""


def current_popup_qss() -> str:
    theme = load_config().get("theme", "light")
    return QSS_POPUP_DARK if theme == "dark" else QSS_POPUP_LIGHT


def apply_popup_style(dialog: QWidget) -> None:
    """Aplica o estilo apropriado (claro ou escuro) conforme o tema ativo."""
    dialog.setStyleSheet(current_popup_qss())
