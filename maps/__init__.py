"""
maps package

Embedded map support: widget contract, Leaflet widget, model adapter,
label-commit routing and the configuration popup.
"""

from maps.adapter import MapDataAdapter
from maps.callbacks import LabelCallbackRegistry, label_callbacks
from maps.config_popup import MapConfigPopup
from maps.widget import ALL_GESTURES, Gesture, gesture_states

__all__ = [
    "MapDataAdapter",
    "LabelCallbackRegistry",
    "label_callbacks",
    "MapConfigPopup",
    "ALL_GESTURES",
    "Gesture",
    "gesture_states",
]
