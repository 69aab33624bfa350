"""
maps/leaflet_widget.py

Leaflet map hosted in a QtWebEngine view.

The page is a folium map with a small script attached to it. Python drives
the page with runJavaScript calls; the page reports back through a
QWebChannel bridge object. Calls issued before the page has loaded are
queued and flushed on loadFinished.
"""

from __future__ import annotations

import json
from typing import Dict, List, Tuple

import folium
from branca.element import MacroElement
from jinja2 import Template
from PyQt6.QtCore import QObject, QUrl, pyqtSignal, pyqtSlot
from PyQt6.QtWebChannel import QWebChannel
from PyQt6.QtWebEngineCore import QWebEngineSettings
from PyQt6.QtWebEngineWidgets import QWebEngineView
from PyQt6.QtWidgets import QVBoxLayout, QWidget

from debug_trace import trace
from settings import get_settings


class _QtBridgeScript(MacroElement):
    """Wires the parent map to the Qt side and defines the page functions."""

    _template = Template(
        """
        {% macro header(this, kwargs) %}
        <script src="qrc:///qtwebchannel/qwebchannel.js"></script>
        <style>
          .label-input { border: 1px solid #d1d5db; border-radius: 4px; padding: 2px 4px; font-size: 12px; }
        </style>
        {% endmacro %}

        {% macro script(this, kwargs) %}
        var strataMap = {{ this._parent.get_name() }};
        var CALLBACK_KEY = {{ this.callback_key|tojson }};
        var bridge = null;
        var markers = {};

        new QWebChannel(qt.webChannelTransport, function (channel) {
          bridge = channel.objects.bridge;
        });

        strataMap.on('click', function (e) {
          if (bridge) { bridge.mapClicked(e.latlng.lat, e.latlng.lng); }
        });
        strataMap.getContainer().addEventListener('mousedown', function () {
          if (bridge) { bridge.mapPressed(); }
        });

        function addMarker(id, lat, lng) {
          markers[id] = L.marker([lat, lng]).addTo(strataMap);
        }
        function bindLabelPopup(id, index, label, editable) {
          var m = markers[id];
          if (!m) { return; }
          var el;
          if (editable) {
            el = document.createElement('input');
            el.type = 'text';
            el.className = 'label-input';
            el.value = label;
            el.addEventListener('blur', function () {
              if (bridge) { bridge.commitLabel(CALLBACK_KEY, index, el.value); }
            });
            el.addEventListener('keydown', function (ev) {
              if (ev.key === 'Enter') { el.blur(); }
            });
          } else {
            el = document.createElement('div');
            el.textContent = label;
          }
          if (m.getPopup()) { m.setPopupContent(el); } else { m.bindPopup(el); }
        }
        function openPopup(id) {
          if (markers[id]) { markers[id].openPopup(); }
        }
        function removeMarker(id) {
          if (markers[id]) { strataMap.removeLayer(markers[id]); delete markers[id]; }
        }
        function setView(center, zoom) {
          strataMap.setView(center, zoom);
        }
        function invalidateSize() {
          strataMap.invalidateSize();
        }
        function setGesture(name, enabled) {
          var handler = strataMap[name];
          if (handler) { if (enabled) { handler.enable(); } else { handler.disable(); } }
        }
        {% endmacro %}
        """
    )

    def __init__(self, callback_key: str):
        super().__init__()
        self._name = "QtBridgeScript"
        self.callback_key = callback_key


def build_map_page(
    center: Tuple[float, float],
    zoom: int,
    gestures: Dict[str, bool],
    callback_key: str,
) -> str:
    """
    Render the full HTML document for one map widget.

    Args:
        center: Initial (lat, lng)
        zoom: Initial zoom level
        gestures: Leaflet handler name -> enabled, passed as map options
        callback_key: Key the page sends with label commits

    Returns:
        The rendered page
    """
    m = get_settings().settings.map
    fmap = folium.Map(
        location=[center[0], center[1]],
        zoom_start=int(zoom),
        tiles=m.tile_url,
        attr=m.attribution,
        max_zoom=int(m.max_zoom),
        **{name: bool(enabled) for name, enabled in gestures.items()},
    )
    fmap.add_child(_QtBridgeScript(callback_key))
    return fmap.get_root().render()


class _MapBridge(QObject):
    """Object exposed to the page as ``bridge``."""

    def __init__(self, widget: "LeafletMapWidget"):
        super().__init__(widget)
        self._widget = widget

    @pyqtSlot(float, float)
    def mapClicked(self, lat: float, lng: float):
        self._widget.clicked.emit(lat, lng)

    @pyqtSlot()
    def mapPressed(self):
        self._widget.pressed.emit()

    @pyqtSlot(str, int, str)
    def commitLabel(self, key: str, index: int, label: str):
        self._widget.callbacks.dispatch(key, index, label)


class LeafletMapWidget(QWebEngineView):
    """
    Map widget backed by Leaflet.

    Signals:
        clicked(float, float): map clicked at (lat, lng)
        pressed(): pointer pressed anywhere inside the map
    """

    clicked = pyqtSignal(float, float)
    pressed = pyqtSignal()

    def __init__(
        self,
        host: QWidget,
        center: Tuple[float, float],
        zoom: int,
        gestures: Dict[str, bool],
        callback_key: str,
        callbacks,
    ):
        super().__init__(host)
        self.callback_key = callback_key
        self.callbacks = callbacks
        self._next_handle = 0
        self._ready = False
        self._disposed = False
        self._pending: List[str] = []

        layout = host.layout()
        if layout is None:
            layout = QVBoxLayout(host)
            layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self)

        settings = self.page().settings()
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessRemoteUrls, True)

        self._bridge = _MapBridge(self)
        self._channel = QWebChannel(self.page())
        self._channel.registerObject("bridge", self._bridge)
        self.page().setWebChannel(self._channel)

        self.loadFinished.connect(self._on_load_finished)
        self.setHtml(build_map_page(center, zoom, gestures, callback_key), QUrl("qrc:///"))

    def _on_load_finished(self, ok: bool):
        if not ok:
            trace(f"map page failed to load ({self.callback_key})", "MAP")
        self._ready = True
        pending, self._pending = self._pending, []
        for script in pending:
            self.page().runJavaScript(script)

    def _call(self, fn: str, *args) -> None:
        if self._disposed:
            return
        script = f"{fn}({', '.join(json.dumps(a) for a in args)});"
        if self._ready:
            self.page().runJavaScript(script)
        else:
            self._pending.append(script)

    # ---- widget contract ------------------------------------------------

    def add_marker(self, lat: float, lng: float) -> int:
        self._next_handle += 1
        handle = self._next_handle
        self._call("addMarker", handle, lat, lng)
        return handle

    def bind_label_popup(self, handle: int, index: int, label: str, editable: bool) -> None:
        self._call("bindLabelPopup", handle, index, label, bool(editable))

    def open_popup(self, handle: int) -> None:
        self._call("openPopup", handle)

    def remove_marker(self, handle: int) -> None:
        self._call("removeMarker", handle)

    def set_view(self, center: Tuple[float, float], zoom: int) -> None:
        self._call("setView", [center[0], center[1]], int(zoom))

    def set_interaction_enabled(self, gesture: str, enabled: bool) -> None:
        self._call("setGesture", gesture, bool(enabled))

    def invalidate_size(self) -> None:
        self._call("invalidateSize")

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._pending.clear()
        self._channel.deregisterObject(self._bridge)
        self.setParent(None)
        self.deleteLater()
