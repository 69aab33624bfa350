"""
canvas/container_item.py

Graphics item for one canvas container.

Draws the shared chrome (drag bar, resize strip, delete button), routes
pointer input into the interaction state machine, and dispatches the body
by container type: rich text, map, or read-only image.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QPainter, QPen
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsRectItem

from canvas.bodies import ImageBody, MapBody
from canvas.interaction import ContainerInteraction, InteractionState
from canvas.mixins import LinkedMixin
from debug_trace import trace
from maps.adapter import MapDataAdapter
from models import Container, ContainerType
from richtext.adapter import RichTextSyncAdapter
from richtext.surface import RichTextSurface
from settings import get_settings
from utils import hex_to_qcolor

TEXT_PADDING = 4.0
DELETE_COLOR = QColor("#EF4444")  # Tailwind red-500


class ContainerItem(QGraphicsRectItem, LinkedMixin):
    """
    Canvas item for a single container.

    Args:
        container: Model snapshot the item is created from.
        registry: ContainerRegistry the item pushes updates to.
        on_slash: Called with (container_id, screen_x, screen_y) when a text
            body holds a lone ``/``.
        map_factory: Map widget factory for map bodies (None: Leaflet).
        label_callbacks: Label-commit table for map bodies (None: shared table).
    """

    PART_DELETE = "delete"
    PART_RESIZE = "resize"
    PART_DRAG = "drag"
    PART_BODY = "body"

    def __init__(
        self,
        container: Container,
        registry,
        on_slash: Optional[Callable[[str, int, int], None]] = None,
        map_factory=None,
        label_callbacks=None,
    ):
        # PyQt forwards unused keyword arguments to the next __init__ in the
        # MRO (cooperative multi-inheritance), which initializes LinkedMixin.
        QGraphicsRectItem.__init__(self, container_id=container.id, registry=registry)
        self.container_type = container.type
        self._container = container
        self._hovered = False
        self._disposed = False
        self._on_slash = on_slash

        cfg = get_settings().settings.canvas
        self._bar_h = cfg.handles.drag_bar_height
        self._resize_w = cfg.handles.resize_hit_width
        self._delete_r = cfg.handles.delete_radius
        # Colors come from a user-editable file; bad values fall back
        self._border_color = hex_to_qcolor(cfg.handles.border_color, QColor("#D1D5DB"))
        self._accent_color = hex_to_qcolor(cfg.handles.accent_color, QColor("#A855F7"))
        self._grip_color = hex_to_qcolor(cfg.handles.grip_color, QColor("#9CA3AF"))

        self.interaction = ContainerInteraction(
            container.id,
            on_update=lambda cid, fields: self.push(fields),
            on_delete=registry.delete,
            on_select=registry.select,
            min_width=cfg.containers.min_width,
        )

        self.surface: Optional[RichTextSurface] = None
        self.text_adapter: Optional[RichTextSyncAdapter] = None
        self.map_body: Optional[MapBody] = None
        self.map_adapter: Optional[MapDataAdapter] = None
        self.image_body: Optional[ImageBody] = None

        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setAcceptHoverEvents(True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges, True)
        self.setPos(QPointF(container.x, container.y))

        width = self._width_of(container)
        if container.type == ContainerType.TEXT:
            self._build_text_body(container, width)
        elif container.type == ContainerType.MAP:
            self._build_map_body(container, width, map_factory, label_callbacks)
        else:
            self._build_image_body(container, width)
        self._relayout(width)

    # ---- body dispatch --------------------------------------------------

    def _build_text_body(self, container: Container, width: float):
        self.surface = RichTextSurface(self)
        self.surface.setPos(QPointF(TEXT_PADDING, self._bar_h))
        self.surface.setTextWidth(max(0.0, width - 2 * TEXT_PADDING))
        self.surface.pressed.connect(self.interaction.select)
        self.text_adapter = RichTextSyncAdapter(
            self.surface,
            container.content,
            on_update=self.push,
            on_slash=self._slash,
        )
        layout = self.surface.document().documentLayout()
        layout.documentSizeChanged.connect(lambda _size: self._relayout(self.rect().width()))

    def _build_map_body(self, container: Container, width: float, map_factory, label_callbacks):
        height = container.height or get_settings().settings.canvas.containers.map_default_height
        self.map_body = MapBody(width, height, self)
        self.map_body.setPos(QPointF(0, self._bar_h))
        self.map_body.on_pressed = self.interaction.select
        kwargs = {}
        if label_callbacks is not None:
            kwargs["callbacks"] = label_callbacks
        self.map_adapter = MapDataAdapter(
            self.map_body.host,
            container.map_data,
            on_update=self.push,
            widget_factory=map_factory,
            **kwargs,
        )
        self.map_adapter.interacted.connect(self.interaction.select)
        self.map_body.on_geometry = self.map_adapter.set_size

    def _build_image_body(self, container: Container, width: float):
        self.image_body = ImageBody(container.content, width, self)
        self.image_body.setPos(QPointF(0, self._bar_h))
        self.image_body.on_pressed = self.interaction.select

    def _slash(self, x: int, y: int):
        if self._on_slash:
            self._on_slash(self.container_id, x, y)

    # ---- geometry -------------------------------------------------------

    def _width_of(self, container: Container) -> float:
        containers = get_settings().settings.canvas.containers
        width = container.width
        if width is None:
            if container.type == ContainerType.MAP:
                width = containers.map_default_width
            elif container.type == ContainerType.IMAGE:
                width = containers.image_default_width
            else:
                width = containers.default_text_width
        if container.type == ContainerType.TEXT:
            width = min(width, containers.text_max_width)
        return max(containers.min_width, float(width))

    def _body_height(self) -> float:
        if self.surface is not None:
            return self.surface.boundingRect().height()
        if self.map_body is not None:
            return self.map_body.rect().height()
        if self.image_body is not None:
            return self.image_body.rect().height()
        return 0.0

    def _relayout(self, width: float):
        """Size the body for ``width`` and fit the frame around it."""
        if self.surface is not None:
            self.surface.setTextWidth(max(0.0, width - 2 * TEXT_PADDING))
        elif self.map_body is not None:
            self.map_body.set_size(width, self.map_body.rect().height())
        elif self.image_body is not None:
            self.image_body.set_width(width)
        self.prepareGeometryChange()
        self.setRect(QRectF(0, 0, width, self._bar_h + self._body_height()))

    def boundingRect(self) -> QRectF:
        # Room for the delete button sitting on the top-right corner
        pad = self._delete_r + 2
        return self.rect().adjusted(-pad, -pad, pad, pad)

    def body_rect(self) -> QRectF:
        r = self.rect()
        return QRectF(r.left(), r.top() + self._bar_h, r.width(), r.height() - self._bar_h)

    def delete_center(self) -> QPointF:
        r = self.rect()
        return QPointF(r.right(), r.top())

    # ---- model -> item --------------------------------------------------

    def apply_container(self, container: Container) -> None:
        """Sync the item from a new model snapshot."""
        if self._disposed:
            return
        self._container = container
        if self.interaction.state not in (InteractionState.DRAGGING, InteractionState.RESIZING):
            if self.pos() != QPointF(container.x, container.y):
                self.setPos(QPointF(container.x, container.y))
            width = self._width_of(container)
            if self.map_body is not None and container.height is not None:
                if container.height != self.map_body.rect().height():
                    self.map_body.set_size(width, container.height)
            if width != self.rect().width() or self.map_body is not None:
                self._relayout(width)

        if self.text_adapter is not None:
            self.text_adapter.sync_from_model(container.content)
        elif self.map_adapter is not None:
            self.map_adapter.apply(container.map_data)
        elif self.image_body is not None:
            self.image_body.set_reference(container.content, self.rect().width())

    def set_selected(self, selected: bool) -> None:
        self.interaction.set_selected(selected)
        self.update()

    # ---- pointer input --------------------------------------------------

    def part_at(self, pos: QPointF) -> str:
        """Which affordance sits under an item-local point."""
        r = self.rect()
        if self.interaction.delete_affordance_visible():
            d = pos - self.delete_center()
            if d.x() * d.x() + d.y() * d.y() <= self._delete_r * self._delete_r:
                return self.PART_DELETE
        if self.interaction.resize_affordance_visible():
            if abs(pos.x() - r.right()) <= self._resize_w / 2 and r.top() + self._bar_h <= pos.y() <= r.bottom():
                return self.PART_RESIZE
        if self.interaction.drag_affordance_visible(self._hovered):
            if r.left() <= pos.x() <= r.right() and r.top() <= pos.y() < r.top() + self._bar_h:
                return self.PART_DRAG
        return self.PART_BODY

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        part = self.part_at(event.pos())
        sp = event.scenePos()
        trace(f"container {self.container_id} press on {part}", "ITEM")
        if part == self.PART_DELETE:
            self.interaction.delete()
        elif part == self.PART_RESIZE:
            self.interaction.begin_resize(sp.x(), self.rect().width())
        elif part == self.PART_DRAG:
            self.interaction.begin_drag(sp.x(), sp.y(), self.pos().x(), self.pos().y())
        else:
            self.interaction.select()
        self.update()
        event.accept()

    def mouseMoveEvent(self, event):
        sp = event.scenePos()
        state = self.interaction.state
        if state == InteractionState.DRAGGING:
            x, y = self.interaction.drag_to(sp.x(), sp.y())
            self.setPos(QPointF(x, y))
            event.accept()
            return
        if state == InteractionState.RESIZING:
            self._relayout(self.interaction.resize_to(sp.x()))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        state = self.interaction.state
        if state == InteractionState.DRAGGING:
            self.interaction.end_drag()
        elif state == InteractionState.RESIZING:
            self.interaction.end_resize()
        else:
            super().mouseReleaseEvent(event)
            return
        self.update()
        event.accept()

    def hoverEnterEvent(self, event):
        self._hovered = True
        self.update()
        super().hoverEnterEvent(event)

    def hoverMoveEvent(self, event):
        part = self.part_at(event.pos())
        if part == self.PART_RESIZE:
            self.setCursor(Qt.CursorShape.SizeHorCursor)
        elif part == self.PART_DRAG:
            self.setCursor(Qt.CursorShape.SizeAllCursor)
        elif part == self.PART_DELETE:
            self.setCursor(Qt.CursorShape.PointingHandCursor)
        else:
            self.unsetCursor()
        super().hoverMoveEvent(event)

    def hoverLeaveEvent(self, event):
        self._hovered = False
        self.unsetCursor()
        self.update()
        super().hoverLeaveEvent(event)

    def itemChange(self, change, value):
        out = super().itemChange(change, value)
        if change in (
            QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged,
            QGraphicsItem.GraphicsItemChange.ItemSceneHasChanged,
        ):
            self.sync_overlay()
        return out

    def sync_overlay(self) -> None:
        if self.map_body is not None and not self._disposed:
            self.map_body.sync_overlay()

    # ---- painting -------------------------------------------------------

    def paint(self, painter: QPainter, option, widget=None):
        r = self.rect()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        selected = self.interaction.is_selected

        if selected:
            painter.setPen(QPen(self._accent_color, 2))
        elif self._hovered:
            painter.setPen(QPen(self._border_color, 1, Qt.PenStyle.DashLine))
        else:
            painter.setPen(QPen(Qt.PenStyle.NoPen))
        painter.setBrush(QBrush(QColor(255, 255, 255) if self.surface is not None else Qt.BrushStyle.NoBrush))
        painter.drawRoundedRect(r, 4, 4)

        if self.interaction.drag_affordance_visible(self._hovered):
            bar = QRectF(r.left(), r.top(), r.width(), self._bar_h)
            painter.setPen(QPen(Qt.PenStyle.NoPen))
            painter.setBrush(QBrush(QColor("#F3F4F6")))
            painter.drawRect(bar)
            painter.setBrush(QBrush(self._grip_color))
            cx, cy = bar.center().x(), bar.center().y()
            for i in (-2, -1, 0, 1, 2):
                painter.drawEllipse(QPointF(cx + i * 5, cy), 1.5, 1.5)

        if self.interaction.resize_affordance_visible():
            strip = QRectF(r.right() - 3, r.top() + self._bar_h + 4, 6, max(0.0, r.height() - self._bar_h - 8))
            painter.setPen(QPen(Qt.PenStyle.NoPen))
            painter.setBrush(QBrush(self._accent_color))
            painter.drawRoundedRect(strip, 3, 3)

        if self.interaction.delete_affordance_visible():
            c = self.delete_center()
            rad = self._delete_r
            painter.setPen(QPen(Qt.PenStyle.NoPen))
            painter.setBrush(QBrush(DELETE_COLOR))
            painter.drawEllipse(c, rad, rad)
            painter.setPen(QPen(QColor(255, 255, 255), 1.5))
            k = rad * 0.4
            painter.drawLine(QPointF(c.x() - k, c.y() - k), QPointF(c.x() + k, c.y() + k))
            painter.drawLine(QPointF(c.x() - k, c.y() + k), QPointF(c.x() + k, c.y() - k))

    # ---- teardown -------------------------------------------------------

    def dispose(self) -> None:
        """Release adapters and widgets. The item is never reused afterwards."""
        if self._disposed:
            return
        self._disposed = True
        if self.map_adapter is not None:
            self.map_adapter.dispose()
        if self.map_body is not None:
            self.map_body.release_host()
        if self.surface is not None:
            self.surface.key_handler = None
            self.surface.click_handler = None
