"""
registry.py

Owner of the container collection. Views and adapters never create or
destroy entries; they mutate containers through ``update`` and observe
changes through Qt signals.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from debug_trace import trace
from models import Container, ContainerType, MapData
from settings import get_settings


class InvariantViolation(RuntimeError):
    """Raised for registry misuse when strict invariant checking is enabled."""


class ContainerRegistry(QObject):
    """
    Ordered store of canvas containers.

    Signals:
        container_added(str): a container was created
        container_updated(str, list): fields of a container changed
        container_removed(str): a container was deleted
        selection_changed(object): the selected id (str) or None
    """

    container_added = pyqtSignal(str)
    container_updated = pyqtSignal(str, list)
    container_removed = pyqtSignal(str)
    selection_changed = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._containers: Dict[str, Container] = {}
        self._selected_id: Optional[str] = None
        self._id_counter = 0

    # ---- lookup -------------------------------------------------------

    def get(self, container_id: str) -> Optional[Container]:
        return self._containers.get(container_id)

    def has(self, container_id: str) -> bool:
        return container_id in self._containers

    def containers(self) -> List[Container]:
        return list(self._containers.values())

    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def new_id(self) -> str:
        """Generate a container id that is not in use."""
        while True:
            self._id_counter += 1
            cid = f"c{self._id_counter:06d}"
            if cid not in self._containers:
                return cid

    # ---- lifecycle ----------------------------------------------------

    def add(self, container: Container) -> Container:
        """Insert an existing container. Duplicate ids are rejected."""
        if container.id in self._containers:
            self._violation(f"duplicate container id {container.id}")
            return self._containers[container.id]
        container.selected = False
        self._containers[container.id] = container
        trace(f"registry add {container.id} type={container.type}", "REGISTRY")
        self.container_added.emit(container.id)
        return container

    def create(self, type: str, x: float, y: float, **fields: Any) -> Container:
        """Create and insert a new container at canvas position (x, y)."""
        containers = get_settings().settings.canvas.containers
        if type == ContainerType.MAP:
            fields.setdefault("width", containers.map_default_width)
            fields.setdefault("height", containers.map_default_height)
            fields.setdefault("map_data", MapData.default())
        elif type == ContainerType.IMAGE:
            fields.setdefault("width", containers.image_default_width)
        else:
            fields.setdefault("width", containers.default_text_width)
        return self.add(Container(id=self.new_id(), type=type, x=x, y=y, **fields))

    def update(self, container_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge ``fields`` into a container.

        Safe to call repeatedly with the same fields; listeners are only
        notified about fields whose value actually changed.
        """
        container = self._containers.get(container_id)
        if container is None:
            self._violation(f"update on missing container {container_id}")
            return
        fields = dict(fields)
        if "id" in fields:
            if fields.pop("id") != container_id:
                self._violation(f"attempt to change id of {container_id}")
        fields.pop("selected", None)
        if "type" in fields and fields["type"] != container.type:
            self._violation(f"attempt to change type of {container_id}")
            fields.pop("type")

        updated = container.merged(fields)
        changed = [k for k in fields if getattr(updated, k, None) != getattr(container, k, None)]
        if not changed:
            return
        updated.selected = container.selected
        self._containers[container_id] = updated
        trace(f"registry update {container_id} {changed}", "REGISTRY")
        self.container_updated.emit(container_id, changed)

    def delete(self, container_id: str) -> None:
        if container_id not in self._containers:
            # Deleting twice is a stale reference, not a violation
            return
        if self._selected_id == container_id:
            self._selected_id = None
            self.selection_changed.emit(None)
        del self._containers[container_id]
        trace(f"registry delete {container_id}", "REGISTRY")
        self.container_removed.emit(container_id)

    def clear(self) -> None:
        for cid in list(self._containers):
            self.delete(cid)

    # ---- selection ----------------------------------------------------

    def select(self, container_id: str) -> None:
        if container_id not in self._containers:
            self._violation(f"select on missing container {container_id}")
            return
        if self._selected_id == container_id:
            return
        if self._selected_id in self._containers:
            self._containers[self._selected_id].selected = False
        self._selected_id = container_id
        self._containers[container_id].selected = True
        self.selection_changed.emit(container_id)

    def clear_selection(self) -> None:
        if self._selected_id is None:
            return
        if self._selected_id in self._containers:
            self._containers[self._selected_id].selected = False
        self._selected_id = None
        self.selection_changed.emit(None)

    # ---- records ------------------------------------------------------

    def to_records(self) -> List[Dict[str, Any]]:
        return [c.to_record() for c in self._containers.values()]

    def load_records(self, records: List[Dict[str, Any]]) -> None:
        """Replace the collection with containers built from records."""
        self.clear()
        for rec in records:
            self.add(Container.from_record(rec))

    # ---- internals ----------------------------------------------------

    def _violation(self, msg: str) -> None:
        if get_settings().settings.debug.strict_invariants:
            raise InvariantViolation(msg)
        trace(f"invariant violation ignored: {msg}", "REGISTRY")
