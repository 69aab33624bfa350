"""
canvas/view.py

QGraphicsView for the infinite canvas: wheel zoom, hand-drag panning with
the middle button, and notifications so embedded widgets follow the view.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPoint, QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import CanvasScene
from settings import get_settings

# Half extent of the scrollable scene area
CANVAS_EXTENT = 25000.0


class CanvasView(QGraphicsView):
    """
    Graphics view over a CanvasScene.

    Signals:
        viewport_changed(): the visible scene region moved or was rescaled
    """

    viewport_changed = pyqtSignal()

    def __init__(self, scene: CanvasScene, parent=None):
        super().__init__(scene, parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setBackgroundBrush(QColor("#F8FAFC"))
        self.setSceneRect(QRectF(-CANVAS_EXTENT, -CANVAS_EXTENT, 2 * CANVAS_EXTENT, 2 * CANVAS_EXTENT))
        self.centerOn(QPointF(0, 0))

        self._pan_origin: Optional[QPoint] = None

        self.horizontalScrollBar().valueChanged.connect(self._notify_viewport_changed)
        self.verticalScrollBar().valueChanged.connect(self._notify_viewport_changed)
        self.viewport_changed.connect(scene.sync_overlays)

    def _notify_viewport_changed(self, *_):
        self.viewport_changed.emit()

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        delta = event.angleDelta().y()
        if delta == 0:
            return
        # Zoom factor from settings. Default: 1.15 (15% per scroll step)
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        factor = zoom_factor if delta > 0 else 1 / zoom_factor
        self.scale(factor, factor)
        self.viewport_changed.emit()

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.MiddleButton:
            self._pan_origin = event.position().toPoint()
            self.viewport().setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):
        if self._pan_origin is not None:
            pos = event.position().toPoint()
            delta = pos - self._pan_origin
            self._pan_origin = pos
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - delta.x())
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - delta.y())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.MiddleButton and self._pan_origin is not None:
            self._pan_origin = None
            self.viewport().unsetCursor()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.viewport_changed.emit()

    def zoom_reset(self):
        """Reset zoom to 100% (1:1 scale)."""
        self.resetTransform()
        self.viewport_changed.emit()

    def zoom_in(self):
        """Zoom in by the configured factor."""
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(zoom_factor, zoom_factor)
        self.viewport_changed.emit()

    def zoom_out(self):
        """Zoom out by the configured factor."""
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        self.scale(1 / zoom_factor, 1 / zoom_factor)
        self.viewport_changed.emit()

    def visible_center(self) -> QPointF:
        """Scene position at the center of the viewport."""
        return self.mapToScene(self.viewport().rect().center())

    def scene_to_viewport(self, x: float, y: float) -> QPoint:
        return self.mapFromScene(QPointF(x, y))
