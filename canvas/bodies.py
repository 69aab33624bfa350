"""
canvas/bodies.py

Container bodies that are not rich text: read-only images and the map
host that carries the embedded map widget.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QPainter, QPen
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsRectItem, QWidget

from canvas.mixins import BodyMixin
from utils import load_pixmap

# Height used while an image cannot be loaded
PLACEHOLDER_HEIGHT = 120.0


class ImageBody(QGraphicsRectItem, BodyMixin):
    """Immutable image body scaled to the container width."""

    def __init__(self, reference: str, width: float, parent: Optional[QGraphicsItem] = None):
        QGraphicsRectItem.__init__(self, parent)
        BodyMixin.__init__(self)
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self._reference = None
        self._pixmap = None
        self.set_reference(reference, width)

    def set_reference(self, reference: str, width: float) -> None:
        if reference != self._reference:
            self._reference = reference
            self._pixmap = load_pixmap(reference)
        self.set_width(width)

    def set_width(self, width: float) -> None:
        self.prepareGeometryChange()
        self.setRect(QRectF(0, 0, width, self._height_for(width)))

    def _height_for(self, width: float) -> float:
        if self._pixmap is None or self._pixmap.isNull() or self._pixmap.width() == 0:
            return PLACEHOLDER_HEIGHT
        return width * self._pixmap.height() / self._pixmap.width()

    def is_loaded(self) -> bool:
        return self._pixmap is not None and not self._pixmap.isNull()

    def paint(self, painter: QPainter, option, widget=None):
        r = self.rect()
        if self.is_loaded():
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
            painter.drawPixmap(r, self._pixmap, QRectF(self._pixmap.rect()))
            return
        painter.setPen(QPen(QColor("#D1D5DB"), 1, Qt.PenStyle.DashLine))
        painter.setBrush(QBrush(QColor("#F9FAFB")))
        painter.drawRect(r)
        painter.setPen(QColor("#9CA3AF"))
        painter.drawText(r, Qt.AlignmentFlag.AlignCenter, "Image unavailable")

    def mousePressEvent(self, event):
        self._notify_pressed()
        event.accept()


class MapBody(QGraphicsRectItem, BodyMixin):
    """
    Scene placeholder for a map body.

    QtWebEngine views cannot render through a QGraphicsProxyWidget, so the
    map widget lives in ``host``, a plain widget laid over the view's
    viewport. ``sync_overlay`` keeps the host aligned with this item.
    """

    def __init__(self, width: float, height: float, parent: Optional[QGraphicsItem] = None):
        QGraphicsRectItem.__init__(self, QRectF(0, 0, width, height), parent)
        BodyMixin.__init__(self)
        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setBrush(QBrush(QColor("#E5E7EB")))
        self.host = QWidget()
        self.host.setObjectName("mapHost")
        self.host.hide()
        self.on_geometry = None  # Called with (width, height) of the host in pixels

    def set_size(self, width: float, height: float) -> None:
        self.prepareGeometryChange()
        self.setRect(QRectF(0, 0, width, height))
        self.sync_overlay()

    def sync_overlay(self) -> None:
        """Move the host widget over this item in the first view showing it."""
        scene = self.scene()
        views = scene.views() if scene is not None else []
        if not views:
            self.host.hide()
            return
        view = views[0]
        viewport = view.viewport()
        if self.host.parentWidget() is not viewport:
            self.host.setParent(viewport)
        rect = view.mapFromScene(self.mapRectToScene(self.rect())).boundingRect()
        self.host.setGeometry(rect)
        self.host.setVisible(self.isVisible())
        if self.on_geometry:
            self.on_geometry(rect.width(), rect.height())

    def release_host(self) -> None:
        self.host.hide()
        self.host.setParent(None)
        self.host.deleteLater()

    def mousePressEvent(self, event):
        self._notify_pressed()
        event.accept()
