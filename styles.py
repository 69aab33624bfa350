"""
styles.py

Application stylesheets - Tailwind (light) and Slate (dark) themes.
"""

TAILWIND_STYLE = """
/* === Tailwind CSS-inspired Theme === */
/* Primary: #a855f7 (Purple-500), Slate grays, Inter font */

QMainWindow {
    background-color: #f8fafc;
}

QWidget {
    color: #1e293b;
    font-family: "Inter", "Segoe UI", sans-serif;
    font-size: 13px;
}

/* === Menu Bar === */
QMenuBar {
    background-color: #ffffff;
    color: #475569;
    border-bottom: 1px solid #e2e8f0;
    padding: 2px;
}

QMenuBar::item {
    background-color: transparent;
    padding: 8px 14px;
    border-radius: 6px;
}

QMenuBar::item:selected {
    background-color: #f1f5f9;
    color: #a855f7;
}

QMenu {
    background-color: #ffffff;
    border: 1px solid #e2e8f0;
    border-radius: 8px;
    padding: 4px;
}

QMenu::item {
    padding: 10px 20px;
    border-radius: 6px;
    margin: 2px;
}

QMenu::item:selected {
    background-color: #f1f5f9;
    color: #a855f7;
}

/* === Quick-insert menu === */
QMenu#slashMenu {
    min-width: 180px;
}

QMenu#slashMenu::item {
    padding: 6px 16px;
}

/* === Toolbar === */
QToolBar {
    background-color: #ffffff;
    border: none;
    border-bottom: 1px solid #e2e8f0;
    padding: 2px 3px;
    spacing: 2px;
}

QToolBar::separator {
    width: 1px;
    background-color: #e2e8f0;
    margin: 3px 7px;
}

QToolBar QToolButton {
    background-color: #f8fafc;
    color: #475569;
    border: 1px solid #e2e8f0;
    border-radius: 4px;
    padding: 3px 8px;
}

QToolBar QToolButton:hover {
    background-color: #f1f5f9;
    border-color: #cbd5e1;
    color: #a855f7;
}

QToolBar QToolButton:pressed {
    background-color: #e2e8f0;
}

QToolBar QToolButton:disabled {
    background-color: #f1f5f9;
    color: #94a3b8;
}

/* === Map config popup === */
QFrame#mapConfigPopup {
    background-color: #ffffff;
    border: 1px solid #e2e8f0;
    border-radius: 8px;
}

QLabel#popupTitle {
    font-weight: 600;
    color: #334155;
}

QLabel#popupError {
    color: #dc2626;
}

QLineEdit, QSpinBox {
    background-color: #ffffff;
    border: 1px solid #cbd5e1;
    border-radius: 6px;
    padding: 5px 8px;
}

QLineEdit:focus, QSpinBox:focus {
    border-color: #a855f7;
}

QPushButton {
    background-color: #f1f5f9;
    border: 1px solid #e2e8f0;
    border-radius: 6px;
    padding: 6px 12px;
}

QPushButton:hover {
    background-color: #e2e8f0;
}

QPushButton:disabled {
    color: #94a3b8;
}

QPushButton#primaryButton {
    background-color: #a855f7;
    border-color: #a855f7;
    color: #ffffff;
    font-weight: 600;
}

QPushButton#primaryButton:hover {
    background-color: #9333ea;
}

/* === Status Bar === */
QStatusBar {
    background-color: #ffffff;
    color: #64748b;
    border-top: 1px solid #e2e8f0;
}
"""

SLATE_STYLE = """
/* === Dark Slate Theme === */

QMainWindow {
    background-color: #0f172a;
}

QWidget {
    color: #e2e8f0;
    font-family: "Inter", "Segoe UI", sans-serif;
    font-size: 13px;
}

QMenuBar {
    background-color: #1e293b;
    color: #cbd5e1;
    border-bottom: 1px solid #334155;
    padding: 2px;
}

QMenuBar::item:selected,
QMenu::item:selected {
    background-color: #334155;
    color: #c084fc;
}

QMenu {
    background-color: #1e293b;
    border: 1px solid #334155;
    border-radius: 8px;
    padding: 4px;
}

QMenu::item {
    padding: 8px 20px;
    border-radius: 6px;
}

QToolBar {
    background-color: #1e293b;
    border: none;
    border-bottom: 1px solid #334155;
    spacing: 2px;
}

QToolBar QToolButton {
    background-color: #1e293b;
    color: #cbd5e1;
    border: 1px solid #334155;
    border-radius: 4px;
    padding: 3px 8px;
}

QToolBar QToolButton:hover {
    color: #c084fc;
}

QToolBar QToolButton:disabled {
    color: #64748b;
}

QFrame#mapConfigPopup {
    background-color: #1e293b;
    border: 1px solid #334155;
    border-radius: 8px;
}

QLabel#popupError {
    color: #f87171;
}

QLineEdit, QSpinBox {
    background-color: #0f172a;
    border: 1px solid #475569;
    border-radius: 6px;
    padding: 5px 8px;
}

QPushButton {
    background-color: #334155;
    border: 1px solid #475569;
    border-radius: 6px;
    padding: 6px 12px;
}

QPushButton#primaryButton {
    background-color: #a855f7;
    border-color: #a855f7;
    color: #ffffff;
}

QStatusBar {
    background-color: #1e293b;
    color: #94a3b8;
}
"""

STYLES = {
    "Tailwind": TAILWIND_STYLE,
    "Slate": SLATE_STYLE,
}

DEFAULT_STYLE = "Tailwind"
