"""
canvas/scene.py

QGraphicsScene that mirrors a ContainerRegistry as container items.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from PyQt6.QtCore import QEvent, QPointF, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QTransform
from PyQt6.QtWidgets import QGraphicsScene

from canvas.container_item import ContainerItem
from debug_trace import trace
from models import ContainerType
from richtext.surface import RichTextSurface

# Offset of a map created from the quick-insert menu below the slash position
MAP_INSERT_OFFSET_Y = 20.0


class CanvasScene(QGraphicsScene):
    """
    Graphics scene hosting one ContainerItem per registry container.

    Signals:
        slash_triggered(str, int, int): a text container holds a lone ``/``;
            carries the container id and the screen position for the menu
        map_config_requested(str): a map container wants its config popup
    """

    slash_triggered = pyqtSignal(str, int, int)
    map_config_requested = pyqtSignal(str)

    def __init__(self, registry, map_factory=None, label_callbacks=None, parent=None):
        super().__init__(parent)
        self.registry = registry
        self._map_factory = map_factory
        self._label_callbacks = label_callbacks
        self._items: Dict[str, ContainerItem] = {}
        self._graveyard: List[ContainerItem] = []
        # Scene position of the last slash trigger, per text container
        self._slash_anchor: Dict[str, QPointF] = {}

        registry.container_added.connect(self._on_container_added)
        registry.container_updated.connect(self._on_container_updated)
        registry.container_removed.connect(self._on_container_removed)
        registry.selection_changed.connect(self._on_selection_changed)

        for container in registry.containers():
            self._on_container_added(container.id)

    # ---- registry -> items ----------------------------------------------

    def item_for(self, container_id: str) -> Optional[ContainerItem]:
        return self._items.get(container_id)

    def container_items(self) -> List[ContainerItem]:
        return list(self._items.values())

    def _on_container_added(self, container_id: str):
        container = self.registry.get(container_id)
        if container is None or container_id in self._items:
            return
        item = ContainerItem(
            container,
            self.registry,
            on_slash=self._on_slash,
            map_factory=self._map_factory,
            label_callbacks=self._label_callbacks,
        )
        self._items[container_id] = item
        self.addItem(item)
        item.set_selected(container.selected)
        trace(f"scene added item for {container_id}", "SCENE")

    def _on_container_updated(self, container_id: str, fields: list):
        item = self._items.get(container_id)
        container = self.registry.get(container_id)
        if item is None or container is None:
            return
        item.apply_container(container)

    def _on_container_removed(self, container_id: str):
        item = self._items.pop(container_id, None)
        self._slash_anchor.pop(container_id, None)
        if item is None:
            return
        item.dispose()
        self.removeItem(item)
        # Removal can happen inside the item's own event handler
        self._graveyard.append(item)
        QTimer.singleShot(0, self._graveyard.clear)
        trace(f"scene removed item for {container_id}", "SCENE")

    def _on_selection_changed(self, selected_id):
        for cid, item in self._items.items():
            item.set_selected(cid == selected_id)

    def sync_overlays(self):
        """Realign embedded widgets after the view scrolled or zoomed."""
        for item in self._items.values():
            item.sync_overlay()

    # ---- quick-insert menu ----------------------------------------------

    def _on_slash(self, container_id: str, x: int, y: int):
        item = self._items.get(container_id)
        if item is not None and item.surface is not None:
            surface = item.surface
            self._slash_anchor[container_id] = surface.mapToScene(surface.boundingRect().bottomLeft())
        self.slash_triggered.emit(container_id, x, y)

    def handle_slash_command(self, container_id: str, command: str, argument=None) -> Optional[str]:
        """
        Route a quick-insert menu result.

        ``map`` creates a map container at the slash position and requests
        its config popup; every other command goes to the originating text
        container.

        Returns:
            The id of a newly created container, if any
        """
        item = self._items.get(container_id)
        if command == "map":
            anchor = self._slash_anchor.get(container_id)
            if anchor is None and item is not None:
                anchor = item.pos()
            if anchor is None:
                anchor = QPointF(0, 0)
            if item is not None and item.text_adapter is not None:
                item.text_adapter.consume_slash()
            container = self.registry.create(ContainerType.MAP, anchor.x(), anchor.y() + MAP_INSERT_OFFSET_Y)
            self.registry.select(container.id)
            self.map_config_requested.emit(container.id)
            return container.id
        if item is None or item.text_adapter is None:
            trace(f"slash command {command} for missing text container {container_id}", "SCENE")
            return None
        item.text_adapter.execute_command(command, argument)
        return None

    # ---- creation helpers -----------------------------------------------

    def create_text_at(self, pos: QPointF) -> str:
        container = self.registry.create(ContainerType.TEXT, pos.x(), pos.y())
        self.registry.select(container.id)
        item = self._items.get(container.id)
        if item is not None and item.surface is not None:
            item.surface.setFocus(Qt.FocusReason.MouseFocusReason)
        return container.id

    # ---- events ---------------------------------------------------------

    def _item_at(self, scene_pos: QPointF):
        views = self.views()
        transform = views[0].transform() if views else QTransform()
        return self.itemAt(scene_pos, transform)

    def mousePressEvent(self, event):
        """Click on empty canvas deselects every container."""
        if event.button() == Qt.MouseButton.LeftButton and self._item_at(event.scenePos()) is None:
            self.setFocusItem(None)
            self.registry.clear_selection()
        super().mousePressEvent(event)

    def mouseDoubleClickEvent(self, event):
        """Double-click on empty canvas creates a text container there."""
        if event.button() == Qt.MouseButton.LeftButton and self._item_at(event.scenePos()) is None:
            self.create_text_at(event.scenePos())
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def event(self, event):
        # Tab inside a text body indents instead of moving focus
        if event.type() == QEvent.Type.KeyPress and event.key() in (Qt.Key.Key_Tab, Qt.Key.Key_Backtab):
            if isinstance(self.focusItem(), RichTextSurface):
                self.keyPressEvent(event)
                return True
        return super().event(event)

    def anchor_for(self, container_id: str) -> Optional[Tuple[float, float]]:
        """Top-left of a container in scene coordinates."""
        item = self._items.get(container_id)
        if item is None:
            return None
        return item.pos().x(), item.pos().y()
