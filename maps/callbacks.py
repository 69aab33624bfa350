"""
maps/callbacks.py

Routing table for marker label commits.

Marker popups are rendered by the map widget, outside the adapter's
normal signal wiring. Each live widget gets a unique key; the widget's
popup code calls ``dispatch(key, index, label)`` and the table forwards
the call to whatever commit function is registered under that key now.
"""

from __future__ import annotations

import uuid
from typing import Callable, Dict

from debug_trace import trace

LabelCommit = Callable[[int, str], None]


class LabelCallbackRegistry:
    """Keyed table of label-commit callbacks, one entry per live map widget."""

    def __init__(self):
        self._callbacks: Dict[str, LabelCommit] = {}

    @staticmethod
    def new_key() -> str:
        return f"map_{uuid.uuid4().hex}"

    def register(self, key: str, callback: LabelCommit) -> None:
        if key in self._callbacks:
            raise KeyError(f"label callback key already registered: {key}")
        self._callbacks[key] = callback

    def unregister(self, key: str) -> None:
        self._callbacks.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._callbacks

    def dispatch(self, key: str, index: int, label: str) -> bool:
        """
        Forward a label commit to the callback registered under ``key``.

        Returns:
            False when no callback is registered (the widget was disposed)
        """
        callback = self._callbacks.get(key)
        if callback is None:
            trace(f"label commit for disposed map {key} dropped", "MAP")
            return False
        callback(index, label)
        return True

    def __len__(self) -> int:
        return len(self._callbacks)


# Application-wide table; adapters receive it by reference
label_callbacks = LabelCallbackRegistry()
