"""
maps/config_popup.py

Floating panel that edits a map container's address, zoom and lock flag.

Zoom and lock edits are pushed to the registry on every change. Address
input is resolved either as a coordinate pair (no network) or through the
geocoding service in a background thread; results that arrive after the
popup closed or the container was removed are discarded.
"""

from __future__ import annotations

from typing import List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QCheckBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSpinBox,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from debug_trace import trace
from models import MapData, Marker
from settings import get_settings
from utils import compute_popup_position, parse_coordinates

EMPTY_INPUT_MSG = "Please enter an address or GPS coordinates"
NOT_FOUND_MSG = "Address not found. Please try a different address or use GPS coordinates (lat, lng)"
UNAVAILABLE_MSG = "Geocoding service unavailable"

SUBMIT_TEXT = "Set Location & Add Pin"
SUBMIT_BUSY_TEXT = "Searching..."


class MapConfigPopup(QFrame):
    """
    Map configuration panel bound to one map container.

    Args:
        container_id: Target map container.
        registry: ContainerRegistry holding the container.
        geocoder: Object with ``reverse(lat, lng)`` and ``search(query)``.
        runner: Object with ``run(fn, on_finished, on_failed)`` executing
            ``fn`` off the UI thread and calling back on it.
        parent: Widget the popup floats over.

    Signals:
        closed(str): emitted once with the container id when the popup closes
    """

    closed = pyqtSignal(str)

    def __init__(self, container_id: str, registry, geocoder, runner, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.container_id = container_id
        self._registry = registry
        self._geocoder = geocoder
        self._runner = runner
        self._geocoding = False
        self._closed = False
        self._center = None  # set once a lookup recenters the map

        self.setObjectName("mapConfigPopup")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setAutoFillBackground(True)
        self.setFixedWidth(get_settings().settings.popup.width)

        data = self._snapshot() or MapData.default()
        self._build_ui(data)

        esc = QShortcut(QKeySequence(Qt.Key.Key_Escape), self)
        esc.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        esc.activated.connect(self.close_popup)

        if not data.address and data.center:
            self._prefill_address(data.center)

    def _build_ui(self, data: MapData):
        map_cfg = get_settings().settings.map
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 10, 12, 12)
        layout.setSpacing(8)

        header = QHBoxLayout()
        title = QLabel("Map Settings")
        title.setObjectName("popupTitle")
        header.addWidget(title)
        header.addStretch(1)
        self.close_btn = QToolButton()
        self.close_btn.setText("×")
        self.close_btn.setToolTip("Close")
        self.close_btn.clicked.connect(self.close_popup)
        header.addWidget(self.close_btn)
        layout.addLayout(header)

        layout.addWidget(QLabel("Address or coordinates"))
        self.address_edit = QLineEdit()
        self.address_edit.setPlaceholderText("e.g. 1600 Amphitheatre Pkwy or 40.7128, -74.0060")
        self.address_edit.setText(data.address)
        self.address_edit.returnPressed.connect(self.submit)
        layout.addWidget(self.address_edit)

        self.submit_btn = QPushButton(SUBMIT_TEXT)
        self.submit_btn.clicked.connect(self.submit)
        layout.addWidget(self.submit_btn)

        self.error_label = QLabel("")
        self.error_label.setObjectName("popupError")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(QLabel("Zoom level"))
        self.zoom_spin = QSpinBox()
        self.zoom_spin.setRange(map_cfg.min_zoom, map_cfg.max_zoom)
        self.zoom_spin.setValue(data.zoom)
        self.zoom_spin.valueChanged.connect(self._on_zoom_changed)
        zoom_row.addWidget(self.zoom_spin)
        layout.addLayout(zoom_row)

        self.lock_check = QCheckBox("Lock map (prevent interaction)")
        self.lock_check.setChecked(data.locked)
        self.lock_check.toggled.connect(self._on_lock_changed)
        layout.addWidget(self.lock_check)

        self.done_btn = QPushButton("Done")
        self.done_btn.setObjectName("primaryButton")
        self.done_btn.clicked.connect(self.done)
        layout.addWidget(self.done_btn)

    # ---- state ----------------------------------------------------------

    @property
    def geocoding(self) -> bool:
        return self._geocoding

    @property
    def is_closed(self) -> bool:
        return self._closed

    def error_text(self) -> str:
        return self.error_label.text() if self.error_label.isVisibleTo(self) else ""

    def _snapshot(self) -> Optional[MapData]:
        container = self._registry.get(self.container_id)
        if container is None:
            return None
        return container.map_data

    def _is_stale(self) -> bool:
        return self._closed or not self._registry.has(self.container_id)

    def _set_error(self, msg: str):
        self.error_label.setText(msg)
        self.error_label.setVisible(bool(msg))

    def _set_geocoding(self, busy: bool):
        self._geocoding = busy
        self.submit_btn.setEnabled(not busy)
        self.submit_btn.setText(SUBMIT_BUSY_TEXT if busy else SUBMIT_TEXT)

    def _current_state(self, current: MapData) -> MapData:
        return current.replace(
            center=self._center or current.center,
            zoom=self.zoom_spin.value(),
            locked=self.lock_check.isChecked(),
            address=self.address_edit.text().strip() or current.address,
        )

    def _push(self) -> None:
        if self._is_stale():
            return
        current = self._snapshot()
        self._registry.update(self.container_id, {"map_data": self._current_state(current)})

    # ---- live edits -----------------------------------------------------

    def _on_zoom_changed(self, value: int):
        trace(f"popup {self.container_id} zoom -> {value}", "POPUP")
        self._push()

    def _on_lock_changed(self, locked: bool):
        trace(f"popup {self.container_id} locked -> {locked}", "POPUP")
        self._push()

    # ---- reverse prefill ------------------------------------------------

    def _prefill_address(self, center):
        lat, lng = center
        geocoder = self._geocoder
        self._runner.run(
            lambda: geocoder.reverse(lat, lng),
            self._on_reverse_finished,
            self._on_reverse_failed,
        )

    def _on_reverse_finished(self, name):
        if self._is_stale() or not name:
            return
        # The user may have started typing meanwhile
        if not self.address_edit.text():
            self.address_edit.setText(name)

    def _on_reverse_failed(self, msg: str):
        trace(f"reverse geocode for {self.container_id} failed: {msg}", "POPUP")

    # ---- submit ---------------------------------------------------------

    def submit(self) -> None:
        """Resolve the address field and add a marker at the result."""
        if self._closed or self._geocoding:
            return
        self._set_error("")
        text = self.address_edit.text().strip()

        coords = parse_coordinates(text)
        if coords is not None:
            self._place(coords[0], coords[1], label=text, address=text)
            return

        if not text:
            self._set_error(EMPTY_INPUT_MSG)
            return

        self._set_geocoding(True)
        geocoder = self._geocoder
        self._runner.run(
            lambda: geocoder.search(text),
            self._on_search_finished,
            self._on_search_failed,
        )

    def _on_search_finished(self, results: List):
        if self._is_stale():
            trace(f"late geocode result for {self.container_id} discarded", "POPUP")
            return
        self._set_geocoding(False)
        if not results:
            self._set_error(NOT_FOUND_MSG)
            return
        top = results[0]
        self.address_edit.setText(top.display_name)
        self._place(top.lat, top.lon, label=top.display_name, address=top.display_name)

    def _on_search_failed(self, msg: str):
        if self._is_stale():
            trace(f"late geocode failure for {self.container_id} discarded", "POPUP")
            return
        self._set_geocoding(False)
        self._set_error(UNAVAILABLE_MSG)

    def _place(self, lat: float, lng: float, label: str, address: str) -> None:
        current = self._snapshot()
        if current is None:
            return
        self._center = (lat, lng)
        new_data = self._current_state(current).with_marker(Marker(lat, lng, label)).replace(address=address)
        self._registry.update(self.container_id, {"map_data": new_data})

    # ---- placement / close ---------------------------------------------

    def place_at(self, anchor_x: float, anchor_y: float) -> None:
        """Position the popup next to an anchor point in parent coordinates."""
        cfg = get_settings().settings.popup
        parent = self.parentWidget()
        vw = parent.width() if parent else cfg.width + 2 * cfg.margin
        vh = parent.height() if parent else cfg.height + 2 * cfg.margin
        left, top = compute_popup_position(
            anchor_x, anchor_y, cfg.width, cfg.height, vw, vh, cfg.margin, cfg.anchor_gap
        )
        self.move(left, top)

    def done(self) -> None:
        """Push the complete current state, then close."""
        self._push()
        self.close_popup()

    def close_popup(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.hide()
        self.closed.emit(self.container_id)
        self.deleteLater()
