"""
canvas/mixins.py

Mixin classes linking graphics items to registry containers.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from debug_trace import trace

CONTAINER_ID_KEY = 1  # QGraphicsItem.data key for the container id


class LinkedMixin:
    """
    Mixin that links a graphics item to a registry container.

    Pushes go through ``push(fields)``, which checks that the container
    still exists so a late event for a removed container is a no-op.
    """

    def __init__(self, container_id: str, registry):
        self.container_id = container_id
        self.registry = registry
        self.setData(CONTAINER_ID_KEY, container_id)

    def push(self, fields: Dict[str, Any]) -> None:
        if not self.registry.has(self.container_id):
            trace(f"update for removed container {self.container_id} dropped", "ITEM")
            return
        self.registry.update(self.container_id, fields)


class BodyMixin:
    """
    Mixin for container bodies: a press on the body selects its container.

    The owning ContainerItem sets ``on_pressed``.
    """

    def __init__(self):
        self.on_pressed: Optional[Callable[[], None]] = None

    def _notify_pressed(self):
        if self.on_pressed:
            self.on_pressed()
