"""
maps/adapter.py

Keeps a live map widget and a container's MapData consistent.

The widget is mounted once per adapter; every later change is applied
incrementally (view, gestures, markers). Edits made on the widget (click to
add a marker, label commits from marker popups) are pushed to the model via
``on_update({"map_data": ...})``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from debug_trace import trace
from maps.callbacks import LabelCallbackRegistry, label_callbacks
from maps.widget import ALL_GESTURES, gesture_states, leaflet_factory
from models import MapData, Marker
from settings import get_settings


def _next_tick(fn: Callable[[], None]) -> None:
    QTimer.singleShot(0, fn)


class MapDataAdapter(QObject):
    """
    Reconciles a map widget with a container's MapData.

    Args:
        host: QWidget the map widget fills.
        data: Initial snapshot; None seeds the documented default view.
        on_update: Called with ``{"map_data": MapData}`` for widget edits.
        read_only: Disables click-to-add and popup label editing.
        scroll_zoom_disabled: Keeps wheel zoom off even when unlocked.
            Defaults to settings.map.scroll_zoom_disabled.
        callbacks: Label-commit table shared with the widget's popups.
        widget_factory: Map widget factory (see maps.widget).
        defer: Schedules a callable on the next event-loop tick.

    Signals:
        interacted(): the user pressed inside the map
    """

    interacted = pyqtSignal()

    def __init__(
        self,
        host,
        data: Optional[MapData],
        on_update: Callable[[Dict[str, Any]], None],
        read_only: bool = False,
        scroll_zoom_disabled: Optional[bool] = None,
        callbacks: LabelCallbackRegistry = label_callbacks,
        widget_factory=None,
        defer: Optional[Callable[[Callable[[], None]], None]] = None,
        parent=None,
    ):
        super().__init__(parent)
        if scroll_zoom_disabled is None:
            scroll_zoom_disabled = get_settings().settings.map.scroll_zoom_disabled
        self._data = data if data is not None else MapData.default()
        self._on_update = on_update
        self._read_only = read_only
        self._scroll_zoom_disabled = scroll_zoom_disabled
        self._callbacks = callbacks
        self._defer = defer or _next_tick
        self._disposed = False

        self._handles: List[Any] = []
        self._rendered_markers: Tuple[Marker, ...] = ()
        self._size: Optional[Tuple[float, float]] = None
        self._invalidate_pending = False

        # Mount exactly once
        self._callback_key = callbacks.new_key()
        callbacks.register(self._callback_key, self._commit_label)
        factory = widget_factory or leaflet_factory
        self._widget = factory(
            host,
            self._data.center,
            self._data.zoom,
            gesture_states(self._data.locked, self._scroll_zoom_disabled),
            self._callback_key,
            callbacks,
        )
        self._widget.clicked.connect(self._on_map_clicked)
        self._widget.pressed.connect(self.interacted)
        self._render_markers(self._data.markers)
        trace(f"map mounted key={self._callback_key}", "MAP")

    # ---- properties -----------------------------------------------------

    @property
    def data(self) -> MapData:
        return self._data

    @property
    def widget(self):
        return self._widget

    @property
    def callback_key(self) -> str:
        return self._callback_key

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ---- model -> widget ------------------------------------------------

    def apply(self, data: Optional[MapData]) -> None:
        """Reflect a new model snapshot on the live widget."""
        if self._disposed or data is None:
            return
        old = self._data
        self._data = data
        if data.center != old.center or data.zoom != old.zoom:
            self._widget.set_view(data.center, data.zoom)
        if data.locked != old.locked:
            self._apply_gestures(data.locked)
        if data.markers != self._rendered_markers:
            self._render_markers(data.markers)

    def _apply_gestures(self, locked: bool) -> None:
        states = gesture_states(locked, self._scroll_zoom_disabled)
        for gesture in ALL_GESTURES:
            self._widget.set_interaction_enabled(gesture, states[gesture])

    def _render_markers(self, markers) -> None:
        """Remove every rendered marker and add ``markers`` again in order."""
        for handle in self._handles:
            self._widget.remove_marker(handle)
        self._handles = []
        for index, marker in enumerate(markers):
            handle = self._widget.add_marker(marker.lat, marker.lng)
            self._widget.bind_label_popup(handle, index, marker.label, not self._read_only)
            self._handles.append(handle)
        self._rendered_markers = tuple(markers)

    # ---- widget -> model ------------------------------------------------

    def _on_map_clicked(self, lat: float, lng: float) -> None:
        if self._disposed or self._read_only:
            return
        data = self._data
        if data.locked:
            return
        label = get_settings().settings.map.new_marker_label
        new_data = data.with_marker(Marker(lat, lng, label))
        index = len(new_data.markers) - 1

        handle = self._widget.add_marker(lat, lng)
        self._widget.bind_label_popup(handle, index, label, True)
        self._widget.open_popup(handle)
        self._handles.append(handle)
        self._rendered_markers = new_data.markers

        self._data = new_data
        trace(f"map {self._callback_key} marker {index} added at ({lat:.5f}, {lng:.5f})", "MAP")
        self._on_update({"map_data": new_data})

    def _commit_label(self, index: int, label: str) -> None:
        """Label commit from a marker popup; always reads the latest snapshot."""
        if self._disposed or self._read_only:
            return
        data = self._data
        if not 0 <= index < len(data.markers):
            trace(f"map {self._callback_key} label commit for unknown marker {index}", "MAP")
            return
        if data.markers[index].label == label:
            return
        new_data = data.with_label(index, label)
        if index < len(self._handles):
            self._widget.bind_label_popup(self._handles[index], index, label, True)
        self._rendered_markers = new_data.markers
        self._data = new_data
        self._on_update({"map_data": new_data})

    # ---- size -----------------------------------------------------------

    def set_size(self, width: float, height: float) -> None:
        """
        Record the host's new size and schedule one widget size recompute.

        The recompute runs on the next event-loop tick, after the host
        layout has applied the size. Several changes within one tick
        coalesce into a single recompute.
        """
        if self._disposed:
            return
        size = (float(width), float(height))
        if size == self._size:
            return
        self._size = size
        if self._invalidate_pending:
            return
        self._invalidate_pending = True
        self._defer(self._flush_invalidate)

    def set_height(self, height: float) -> None:
        width = self._size[0] if self._size else 0.0
        self.set_size(width, height)

    def _flush_invalidate(self) -> None:
        self._invalidate_pending = False
        if self._disposed:
            return
        self._widget.invalidate_size()

    # ---- teardown -------------------------------------------------------

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._callbacks.unregister(self._callback_key)
        for handle in self._handles:
            self._widget.remove_marker(handle)
        self._handles = []
        self._rendered_markers = ()
        try:
            self._widget.clicked.disconnect(self._on_map_clicked)
        except TypeError:
            pass
        self._widget.dispose()
        trace(f"map disposed key={self._callback_key}", "MAP")
