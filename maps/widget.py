"""
maps/widget.py

Contract between the map data adapter and a concrete map widget.

A widget factory is any callable with the signature::

    factory(host, center, zoom, gestures, callback_key, callbacks) -> widget

where ``host`` is the QWidget the map fills, ``gestures`` maps each
``Gesture`` name to its initial enabled state, and ``callbacks`` is the
LabelCallbackRegistry the widget's popups commit labels through using
``callback_key``.

The returned widget must provide::

    clicked                      pyqtSignal(float, float) - map click (lat, lng)
    pressed                      pyqtSignal() - any pointer press inside the map
    add_marker(lat, lng)         -> opaque marker handle
    bind_label_popup(handle, index, label, editable)
    open_popup(handle)
    remove_marker(handle)
    set_view(center, zoom)
    set_interaction_enabled(gesture, enabled)
    invalidate_size()
    dispose()
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from PyQt6.QtWidgets import QWidget


class Gesture:
    """Interactive gesture names understood by map widgets."""
    DRAGGING = "dragging"
    TOUCH_ZOOM = "touchZoom"
    DOUBLE_CLICK_ZOOM = "doubleClickZoom"
    SCROLL_WHEEL_ZOOM = "scrollWheelZoom"
    BOX_ZOOM = "boxZoom"
    KEYBOARD = "keyboard"


ALL_GESTURES = (
    Gesture.DRAGGING,
    Gesture.TOUCH_ZOOM,
    Gesture.DOUBLE_CLICK_ZOOM,
    Gesture.SCROLL_WHEEL_ZOOM,
    Gesture.BOX_ZOOM,
    Gesture.KEYBOARD,
)

MapWidgetFactory = Callable[..., object]


def gesture_states(locked: bool, scroll_zoom_disabled: bool) -> Dict[str, bool]:
    """
    Compute the enabled state of every gesture.

    ``locked`` disables all of them. ``scroll_zoom_disabled`` keeps wheel
    zoom off regardless of ``locked``.
    """
    states = {g: not locked for g in ALL_GESTURES}
    if scroll_zoom_disabled:
        states[Gesture.SCROLL_WHEEL_ZOOM] = False
    return states


def leaflet_factory(
    host: QWidget,
    center: Tuple[float, float],
    zoom: int,
    gestures: Dict[str, bool],
    callback_key: str,
    callbacks,
):
    """Default factory: a Leaflet map in a QtWebEngine view filling ``host``."""
    from maps.leaflet_widget import LeafletMapWidget
    return LeafletMapWidget(host, center, zoom, gestures, callback_key, callbacks)
