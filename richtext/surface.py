"""
richtext/surface.py

Editable rich text surface backed by Qt's QTextDocument engine.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QKeyEvent
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsTextItem


class RichTextSurface(QGraphicsTextItem):
    """
    Always-editable text item.

    Key presses and clicks are offered to ``key_handler`` / ``click_handler``
    first; a handler returning True consumes the event.

    Signals:
        edited(): the document content changed through user editing
        focus_lost(): the surface lost keyboard focus
        pressed(): the surface received a mouse press
    """

    edited = pyqtSignal()
    focus_lost = pyqtSignal()
    pressed = pyqtSignal()

    default_text_color = QColor("#1E293B")  # Tailwind slate-800

    def __init__(self, parent: Optional[QGraphicsItem] = None):
        super().__init__(parent)
        self.key_handler: Optional[Callable[[QKeyEvent], bool]] = None
        self.click_handler: Optional[Callable[[QPointF], bool]] = None
        self.setDefaultTextColor(RichTextSurface.default_text_color)
        self.setTextInteractionFlags(Qt.TextInteractionFlag.TextEditorInteraction)
        self.document().contentsChanged.connect(self.edited)

    def markup(self) -> str:
        return self.toHtml()

    def set_markup(self, markup: str) -> None:
        """Replace the content without emitting ``edited``."""
        self.document().blockSignals(True)
        try:
            self.setHtml(markup)
        finally:
            self.document().blockSignals(False)

    def plain_text(self) -> str:
        return self.toPlainText()

    def hit_position(self, pos: QPointF) -> int:
        """Document cursor position under an item-local point, -1 if none."""
        return self.document().documentLayout().hitTest(pos, Qt.HitTestAccuracy.FuzzyHit)

    def screen_bottom_left(self) -> Tuple[int, int]:
        """
        Current bottom-left corner of the surface in screen coordinates.

        Falls back to scene coordinates when the item is not shown in a view.
        """
        pt = self.mapToScene(self.boundingRect().bottomLeft())
        scene = self.scene()
        views = scene.views() if scene is not None else []
        if not views:
            return int(round(pt.x())), int(round(pt.y()))
        view = views[0]
        g = view.viewport().mapToGlobal(view.mapFromScene(pt))
        return g.x(), g.y()

    def mousePressEvent(self, event):
        self.pressed.emit()
        if event.button() == Qt.MouseButton.LeftButton and self.click_handler:
            if self.click_handler(event.pos()):
                event.accept()
                return
        super().mousePressEvent(event)

    def keyPressEvent(self, event):
        if self.key_handler and self.key_handler(event):
            event.accept()
            return
        super().keyPressEvent(event)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.focus_lost.emit()
