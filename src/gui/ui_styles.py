"""
Shared UI style helpers that adapt to the active palette.
"""

from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QPalette, QColor


def _palette_colors():
    app = QApplication.instance()
    palette = app.palette() if app else QPalette()
    return {
        "window": palette.color(QPalette.Window),
        "text": palette.color(QPalette.WindowText),
        "highlight": palette.color(QPalette.Highlight),
        "highlight_text": palette.color(QPalette.HighlightedText),
    }


def is_dark_palette() -> bool:
    return _palette_colors()["window"].lightness() < 128


def _with_alpha(color: QColor, alpha: float) -> QColor:
    c = QColor(color)
    c.setAlphaF(alpha)
    return c


def drop_zone_colors(state: str):
    """(border, background) colors for the file drop zone.

    state is one of "normal", "hover", "active" (pressed or dragging), "error".
    Background may be None for no fill.
    """
    accent = QColor(0, 91, 255)
    if state == "active":
        return _with_alpha(accent, 0.2), _with_alpha(QColor(9, 91, 255), 0.1)
    if state == "hover":
        return _with_alpha(accent, 0.2), _with_alpha(QColor(9, 91, 255), 0.05)
    if state == "error":
        return _with_alpha(QColor(255, 0, 0), 0.2), _with_alpha(QColor(255, 0, 0), 0.05)
    base = QColor(255, 255, 255) if is_dark_palette() else QColor(0, 0, 0)
    return _with_alpha(base, 0.2), None


def primary_button_style() -> str:
    """Palette-aware primary button style."""
    c = _palette_colors()
    base = c["highlight"]
    return f"""
    QPushButton {{
        background-color: {base.lighter(115).name()};
        color: {c['highlight_text'].name()};
        border: 1px solid {base.darker(115).name()};
        padding: 8px 20px;
        border-radius: 6px;
    }}
    QPushButton:hover {{
        background-color: {base.lighter(130).name()};
    }}
    QPushButton:pressed {{
        background-color: {base.darker(110).name()};
    }}
    QPushButton:disabled {{
        background-color: {_with_alpha(base, 0.4).name(QColor.HexArgb)};
    }}
    """
