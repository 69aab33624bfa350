"""Shared fixtures for the Strata canvas tests.

Runs Qt offscreen. Run with:
    python -m pytest tests -v
"""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QApplication

# Ensure project root is on sys.path so imports work
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import settings as settings_module
from geocoding import GeocodeResult, GeocodingUnavailable
from maps import LabelCallbackRegistry
from registry import ContainerRegistry
from settings import SettingsManager


# ---------------------------------------------------------------------------
# Application / settings
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton at a throwaway directory with defaults."""
    sm = SettingsManager(settings_dir=tmp_path / "config")
    monkeypatch.setattr(settings_module, "_settings_manager", sm)
    yield sm


@pytest.fixture()
def registry(qapp):
    return ContainerRegistry()


# ---------------------------------------------------------------------------
# Map widget double
# ---------------------------------------------------------------------------

class FakeMapWidget(QObject):
    """Records every call the adapter makes on a map widget."""

    clicked = pyqtSignal(float, float)
    pressed = pyqtSignal()

    def __init__(self, host, center, zoom, gestures, callback_key, callbacks):
        super().__init__()
        self.host = host
        self.center = center
        self.zoom = zoom
        self.gestures = dict(gestures)
        self.callback_key = callback_key
        self.callbacks = callbacks
        self.markers = {}  # handle -> (lat, lng)
        self.popups = {}   # handle -> (index, label, editable)
        self.opened = []
        self.removed = []
        self.view_calls = []
        self.gesture_calls = []
        self.invalidations = 0
        self.disposed = False
        self._next = 0

    def add_marker(self, lat, lng):
        self._next += 1
        self.markers[self._next] = (lat, lng)
        return self._next

    def bind_label_popup(self, handle, index, label, editable):
        self.popups[handle] = (index, label, editable)

    def open_popup(self, handle):
        self.opened.append(handle)

    def remove_marker(self, handle):
        self.removed.append(handle)
        self.markers.pop(handle, None)
        self.popups.pop(handle, None)

    def set_view(self, center, zoom):
        self.view_calls.append((center, zoom))
        self.center = center
        self.zoom = zoom

    def set_interaction_enabled(self, gesture, enabled):
        self.gesture_calls.append((gesture, enabled))
        self.gestures[gesture] = enabled

    def invalidate_size(self):
        self.invalidations += 1

    def dispose(self):
        self.disposed = True

    # test helpers

    def click(self, lat, lng):
        self.clicked.emit(lat, lng)

    def commit_label(self, index, label):
        """What the popup input does on blur."""
        return self.callbacks.dispatch(self.callback_key, index, label)

    def live_labels(self):
        return [self.popups[h][1] for h in sorted(self.markers)]


@pytest.fixture()
def map_widgets():
    """List collecting every FakeMapWidget created through ``map_factory``."""
    return []


@pytest.fixture()
def map_factory(map_widgets):
    def factory(host, center, zoom, gestures, callback_key, callbacks):
        widget = FakeMapWidget(host, center, zoom, gestures, callback_key, callbacks)
        map_widgets.append(widget)
        return widget
    return factory


@pytest.fixture()
def label_table():
    return LabelCallbackRegistry()


# ---------------------------------------------------------------------------
# Geocoding doubles
# ---------------------------------------------------------------------------

class ManualRunner:
    """Runner that holds jobs until the test completes them."""

    def __init__(self):
        self.jobs = []

    def run(self, fn, on_finished=None, on_failed=None):
        self.jobs.append((fn, on_finished, on_failed))

    def complete(self, index=-1):
        """Run a held job synchronously and deliver its outcome."""
        fn, on_finished, on_failed = self.jobs.pop(index)
        try:
            result = fn()
        except GeocodingUnavailable as e:
            if on_failed:
                on_failed(str(e))
            return
        if on_finished:
            on_finished(result)

    def fail(self, message="Geocoding service unavailable", index=-1):
        _, _, on_failed = self.jobs.pop(index)
        if on_failed:
            on_failed(message)

    def drain(self):
        while self.jobs:
            self.complete(0)

    def shutdown(self, timeout_ms=0):
        self.jobs = []


class FakeGeocoder:
    def __init__(self, results=None, reverse_name=None, unavailable=False):
        self.results = results or {}
        self.reverse_name = reverse_name
        self.unavailable = unavailable
        self.searches = []
        self.reverses = []

    def search(self, query, limit=None):
        self.searches.append(query)
        if self.unavailable:
            raise GeocodingUnavailable("Geocoding service unavailable")
        return list(self.results.get(query, []))

    def reverse(self, lat, lng):
        self.reverses.append((lat, lng))
        if self.unavailable:
            raise GeocodingUnavailable("Geocoding service unavailable")
        return self.reverse_name


@pytest.fixture()
def runner():
    return ManualRunner()


@pytest.fixture()
def geocoder():
    return FakeGeocoder(results={
        "Eiffel Tower": [GeocodeResult(48.8584, 2.2945, "Tour Eiffel, Paris, France")],
    })
