"""
main.py

Strata Canvas - Main Application

PyQt6 desktop canvas holding free-floating containers:
- Rich text blocks with checklists and a "/" quick-insert menu
- Interactive Leaflet maps with click-to-add markers and geocoded search
- Images pasted from the clipboard or inserted from disk

Usage:
    python main.py

Dependencies:
    pip install PyQt6 PyQt6-WebEngine requests folium platformdirs tomli-w

Environment:
    STRATA_DEBUG_TRACE=1 (optional, trace events to stderr and the log directory)
    STRATA_TRACE_CATEGORIES=MAP,POPUP (optional, limit traced categories)
"""

from __future__ import annotations

import sys
from typing import Optional

from PyQt6.QtCore import QPoint, QSize, Qt
from PyQt6.QtGui import QAction, QGuiApplication, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QToolBar,
)

from canvas import CanvasScene, CanvasView
from debug_trace import close_log, trace, trace_exception
from geocoding import GeocodeTaskRunner, NominatimClient
from maps import MapConfigPopup
from models import ContainerType
from registry import ContainerRegistry
from richtext import RichTextSurface, SlashMenu
from settings import SettingsManager, get_settings
from styles import DEFAULT_STYLE, STYLES
from utils import image_to_data_uri

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp)"


class MainWindow(QMainWindow):
    """Main application window for Strata Canvas.

    Args:
        settings_manager: The SettingsManager instance for application settings.
    """

    def __init__(self, settings_manager: SettingsManager):
        super().__init__()
        self.settings_manager = settings_manager
        self.setWindowTitle("Strata Canvas")

        # Model, scene and view
        self.registry = ContainerRegistry(self)
        self.scene = CanvasScene(self.registry, parent=self)
        self.view = CanvasView(self.scene)
        self.setCentralWidget(self.view)

        # Geocoding runs off the UI thread; the runner outlives any popup
        self.geocoder = NominatimClient()
        self.runner = GeocodeTaskRunner(self)

        self._map_popup: Optional[MapConfigPopup] = None
        self._slash_menu: Optional[SlashMenu] = None

        self._build_menus()
        self._build_toolbar()

        self.scene.slash_triggered.connect(self.show_slash_menu)
        self.scene.map_config_requested.connect(self.open_map_config)
        self.registry.selection_changed.connect(self._on_selection_changed)
        self._on_selection_changed(None)

        self.statusBar().showMessage("Double-click the canvas to add text. Type / for commands.")

    # ---- menus / toolbar ----------------------------------------------

    def _build_menus(self):
        """Build the menu bar."""
        file_menu = self.menuBar().addMenu("&File")

        insert_image = QAction("Insert Image...", self)
        insert_image.triggered.connect(self.insert_image_dialog)
        file_menu.addAction(insert_image)

        file_menu.addSeparator()

        exit_act = QAction("Exit", self)
        exit_act.setShortcut(QKeySequence.StandardKey.Quit)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        edit_menu = self.menuBar().addMenu("&Edit")

        paste_act = QAction("Paste Image", self)
        paste_act.setShortcut(QKeySequence.StandardKey.Paste)
        paste_act.setShortcutContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        paste_act.triggered.connect(self.paste_image)
        edit_menu.addAction(paste_act)
        # Shortcut only while the canvas has focus so text editing keeps Ctrl+V
        self.view.addAction(paste_act)

        delete_act = QAction("Delete", self)
        delete_act.setShortcut(QKeySequence(Qt.Key.Key_Delete))
        delete_act.setShortcutContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        delete_act.triggered.connect(self.delete_selected)
        edit_menu.addAction(delete_act)
        self.view.addAction(delete_act)

        view_menu = self.menuBar().addMenu("&View")

        zoom_in_act = QAction("Zoom In", self)
        zoom_in_act.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in_act.triggered.connect(self.view.zoom_in)
        view_menu.addAction(zoom_in_act)

        zoom_out_act = QAction("Zoom Out", self)
        zoom_out_act.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out_act.triggered.connect(self.view.zoom_out)
        view_menu.addAction(zoom_out_act)

    def _build_toolbar(self):
        """Build the application toolbar."""
        tb = QToolBar("Tools")
        tb.setIconSize(QSize(18, 18))
        self.addToolBar(tb)

        def add_action(text: str, slot, tooltip: str, shortcut: Optional[str] = None) -> QAction:
            act = QAction(text, self)
            if shortcut:
                act.setShortcut(shortcut)
                act.setToolTip(f"{tooltip} ({shortcut})")
            else:
                act.setToolTip(tooltip)
            act.setStatusTip(tooltip)
            act.triggered.connect(slot)
            tb.addAction(act)
            return act

        self.act_new_text = add_action("New Text", self.new_text, "Add a text block", "Ctrl+T")
        self.act_new_map = add_action("New Map", self.new_map, "Add an interactive map", "Ctrl+M")
        self.act_insert_image = add_action("Insert Image", self.insert_image_dialog, "Insert an image from disk")

        tb.addSeparator()

        self.act_config_map = add_action("Configure Map", self.configure_selected_map,
                                         "Set the location, zoom and lock of the selected map")

        tb.addSeparator()

        self.act_reset_zoom = add_action("Reset Zoom", self.view.zoom_reset, "Reset zoom to 100%", "Ctrl+0")

    def _on_selection_changed(self, selected_id):
        container = self.registry.get(selected_id) if selected_id else None
        self.act_config_map.setEnabled(container is not None and container.type == ContainerType.MAP)

    # ---- container creation -------------------------------------------

    def new_text(self):
        pos = self.view.visible_center()
        cid = self.scene.create_text_at(pos)
        trace(f"new text container {cid}", "MAIN")

    def new_map(self):
        pos = self.view.visible_center()
        container = self.registry.create(ContainerType.MAP, pos.x(), pos.y())
        self.registry.select(container.id)
        trace(f"new map container {container.id}", "MAIN")
        self.open_map_config(container.id)

    def insert_image_dialog(self):
        path, _ = QFileDialog.getOpenFileName(self, "Insert Image", "", IMAGE_FILTER)
        if not path:
            return
        self._insert_image(path)

    def paste_image(self):
        """Paste the clipboard image as an image container at the view center."""
        mime = QGuiApplication.clipboard().mimeData()
        if mime is None or not mime.hasImage():
            self.statusBar().showMessage("Clipboard has no image.", 3000)
            return
        image = QGuiApplication.clipboard().image()
        if image.isNull():
            self.statusBar().showMessage("Clipboard image could not be read.", 3000)
            return
        self._insert_image(image_to_data_uri(image))

    def _insert_image(self, reference: str):
        pos = self.view.visible_center()
        container = self.registry.create(ContainerType.IMAGE, pos.x(), pos.y(), content=reference)
        self.registry.select(container.id)
        item = self.scene.item_for(container.id)
        if item is not None and item.image_body is not None and not item.image_body.is_loaded():
            QMessageBox.warning(self, "Insert Image", "The image could not be loaded.")
        trace(f"new image container {container.id}", "MAIN")

    # ---- editing --------------------------------------------------------

    def delete_selected(self):
        """Delete the selected container unless a text body is being edited."""
        if isinstance(self.scene.focusItem(), RichTextSurface):
            return
        selected = self.registry.selected_id()
        if selected is None:
            return
        trace(f"delete {selected}", "MAIN")
        self.registry.delete(selected)

    # ---- quick-insert menu ----------------------------------------------

    def show_slash_menu(self, container_id: str, x: int, y: int):
        if self._slash_menu is not None:
            self._slash_menu.close()
            self._slash_menu.deleteLater()
        menu = SlashMenu(
            lambda command, argument: self.scene.handle_slash_command(container_id, command, argument),
            self,
        )
        self._slash_menu = menu
        menu.popup(QPoint(x, y))

    # ---- map config popup -----------------------------------------------

    def configure_selected_map(self):
        selected = self.registry.selected_id()
        container = self.registry.get(selected) if selected else None
        if container is None or container.type != ContainerType.MAP:
            return
        self.open_map_config(container.id)

    def open_map_config(self, container_id: str):
        """Show the config popup anchored to a map container."""
        if self._map_popup is not None and not self._map_popup.is_closed:
            self._map_popup.close_popup()
        anchor = self.scene.anchor_for(container_id)
        if anchor is None:
            return

        popup = MapConfigPopup(container_id, self.registry, self.geocoder, self.runner, self.view)
        popup.closed.connect(self._on_map_popup_closed)
        self._map_popup = popup

        vp = self.view.scene_to_viewport(*anchor)
        popup.place_at(vp.x(), vp.y())
        popup.show()
        popup.raise_()
        popup.address_edit.setFocus()

    def _on_map_popup_closed(self, container_id: str):
        trace(f"map config popup closed for {container_id}", "MAIN")
        if self._map_popup is not None and self._map_popup.is_closed:
            self._map_popup = None

    def closeEvent(self, event):
        if self._map_popup is not None and not self._map_popup.is_closed:
            self._map_popup.close_popup()
        self.runner.shutdown()
        super().closeEvent(event)


def main():
    """Application entry point."""
    trace("Application starting", "MAIN")
    # Web engine views need a shared GL context created before the app
    QApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)
    app = QApplication(sys.argv)

    # Load settings (use singleton to ensure single instance)
    trace("Loading settings", "MAIN")
    settings_manager = get_settings()

    # Ensure settings file has all sections
    settings_manager.ensure_file_complete()

    # Apply saved theme (or default if not set)
    initial_style = settings_manager.settings.theme
    if initial_style not in STYLES:
        initial_style = DEFAULT_STYLE
        settings_manager.settings.theme = initial_style

    app.setStyleSheet(STYLES[initial_style])

    # Save settings on application quit
    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager)
    w.resize(1280, 860)
    trace("Showing MainWindow", "MAIN")
    w.show()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    # Set up global exception handler to catch crashes
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
