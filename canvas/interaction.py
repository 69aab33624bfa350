"""
canvas/interaction.py

Per-container interaction state machine (select, drag, resize, delete).

Pure logic with no Qt dependency: the graphics item feeds it pointer
positions in scene coordinates and renders whatever it reports. Drag and
resize state is transient and dropped whenever the container is deselected.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple


class InteractionState(Enum):
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    DELETED = "deleted"


class ContainerInteraction:
    """
    Interaction state of one container.

    Args:
        container_id: Id passed to every callback.
        on_update: ``on_update(container_id, fields)`` commits drag/resize results.
        on_delete: ``on_delete(container_id)``.
        on_select: ``on_select(container_id)`` asks the owner to select this container.
        min_width: Lower bound for resizing.
    """

    def __init__(
        self,
        container_id: str,
        on_update: Callable[[str, Dict[str, Any]], None],
        on_delete: Callable[[str], None],
        on_select: Callable[[str], None],
        min_width: float = 100.0,
    ):
        self.container_id = container_id
        self._on_update = on_update
        self._on_delete = on_delete
        self._on_select = on_select
        self.min_width = min_width
        self.state = InteractionState.IDLE
        self._clear_transient()

    def _clear_transient(self):
        self._drag_origin: Optional[Tuple[float, float]] = None
        self._start_pos: Optional[Tuple[float, float]] = None
        self._current_pos: Optional[Tuple[float, float]] = None
        self._resize_origin_x: Optional[float] = None
        self._start_width: Optional[float] = None
        self._current_width: Optional[float] = None

    # ---- selection ------------------------------------------------------

    @property
    def is_selected(self) -> bool:
        return self.state in (InteractionState.SELECTED, InteractionState.DRAGGING, InteractionState.RESIZING)

    @property
    def is_deleted(self) -> bool:
        return self.state == InteractionState.DELETED

    def select(self) -> None:
        """Body click: become selected and tell the owner."""
        if self.state == InteractionState.DELETED:
            return
        if self.state == InteractionState.IDLE:
            self.state = InteractionState.SELECTED
        self._on_select(self.container_id)

    def set_selected(self, selected: bool) -> None:
        """Reflect selection decided by the owner, without callbacks."""
        if self.state == InteractionState.DELETED:
            return
        if selected:
            if self.state == InteractionState.IDLE:
                self.state = InteractionState.SELECTED
        else:
            self.deselect()

    def deselect(self) -> None:
        if self.state == InteractionState.DELETED:
            return
        self.state = InteractionState.IDLE
        self._clear_transient()

    # ---- drag -----------------------------------------------------------

    def begin_drag(self, pointer_x: float, pointer_y: float, x: float, y: float) -> bool:
        """Start dragging from pointer position with the container at (x, y)."""
        if self.state == InteractionState.DELETED:
            return False
        if self.state == InteractionState.IDLE:
            self.select()
        self.state = InteractionState.DRAGGING
        self._drag_origin = (pointer_x, pointer_y)
        self._start_pos = (x, y)
        self._current_pos = (x, y)
        return True

    def drag_to(self, pointer_x: float, pointer_y: float) -> Optional[Tuple[float, float]]:
        """Return the container position for the current pointer position."""
        if self.state != InteractionState.DRAGGING:
            return None
        dx = pointer_x - self._drag_origin[0]
        dy = pointer_y - self._drag_origin[1]
        self._current_pos = (self._start_pos[0] + dx, self._start_pos[1] + dy)
        return self._current_pos

    def end_drag(self) -> Optional[Tuple[float, float]]:
        """Commit the dragged position and return to SELECTED."""
        if self.state != InteractionState.DRAGGING:
            return None
        x, y = self._current_pos
        self.state = InteractionState.SELECTED
        self._clear_transient()
        self._on_update(self.container_id, {"x": x, "y": y})
        return (x, y)

    # ---- resize ---------------------------------------------------------

    def begin_resize(self, pointer_x: float, width: float) -> bool:
        """Start resizing; the left edge stays fixed."""
        if self.state != InteractionState.SELECTED:
            return False
        self.state = InteractionState.RESIZING
        self._resize_origin_x = pointer_x
        self._start_width = width
        self._current_width = width
        return True

    def resize_to(self, pointer_x: float) -> Optional[float]:
        if self.state != InteractionState.RESIZING:
            return None
        width = self._start_width + (pointer_x - self._resize_origin_x)
        self._current_width = max(self.min_width, width)
        return self._current_width

    def end_resize(self) -> Optional[float]:
        if self.state != InteractionState.RESIZING:
            return None
        width = self._current_width
        self.state = InteractionState.SELECTED
        self._clear_transient()
        self._on_update(self.container_id, {"width": width})
        return width

    # ---- delete ---------------------------------------------------------

    def delete(self) -> bool:
        if self.state != InteractionState.SELECTED:
            return False
        self.state = InteractionState.DELETED
        self._clear_transient()
        self._on_delete(self.container_id)
        return True

    # ---- affordance visibility -----------------------------------------

    def drag_affordance_visible(self, hovered: bool) -> bool:
        if self.state == InteractionState.DELETED:
            return False
        return self.is_selected or hovered

    def resize_affordance_visible(self) -> bool:
        return self.state in (InteractionState.SELECTED, InteractionState.RESIZING)

    def delete_affordance_visible(self) -> bool:
        return self.state == InteractionState.SELECTED
