"""
settings.py

Persistent settings management for Strata Canvas.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/strata-canvas/settings.toml
    - macOS: ~/Library/Application Support/strata-canvas/settings.toml
    - Linux: ~/.config/strata-canvas/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "strata-canvas"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasHandleSettings:
    """Container affordance settings.

    Defaults:
        drag_bar_height: 16.0
        resize_hit_width: 16.0
        delete_radius: 8.0
        border_color: "#D1D5DB"
        accent_color: "#A855F7"
        grip_color: "#9CA3AF"
    """
    drag_bar_height: float = 16.0      # Default: 16.0 pixels
    resize_hit_width: float = 16.0     # Default: 16.0 pixels
    delete_radius: float = 8.0         # Default: 8.0 pixels
    border_color: str = "#D1D5DB"      # Default: gray-300
    accent_color: str = "#A855F7"      # Default: purple-500
    grip_color: str = "#9CA3AF"        # Default: gray-400


@dataclass
class CanvasContainerSettings:
    """Container sizing settings.

    Defaults:
        min_width: 100.0
        default_text_width: 200.0
        text_max_width: 600.0
        image_default_width: 300.0
        map_default_width: 400.0
        map_default_height: 300.0
    """
    min_width: float = 100.0             # Default: 100.0 pixels
    default_text_width: float = 200.0    # Default: 200.0 pixels
    text_max_width: float = 600.0        # Default: 600.0 pixels
    image_default_width: float = 300.0   # Default: 300.0 pixels
    map_default_width: float = 400.0     # Default: 400.0 pixels
    map_default_height: float = 300.0    # Default: 300.0 pixels


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        wheel_factor: 1.15
    """
    wheel_factor: float = 1.15  # Default: 1.15 (15% per scroll step)


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    handles: CanvasHandleSettings = field(default_factory=CanvasHandleSettings)
    containers: CanvasContainerSettings = field(default_factory=CanvasContainerSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Map Settings
# =============================================================================

@dataclass
class MapSettings:
    """Embedded map settings.

    Defaults:
        default_lat: 40.7128
        default_lng: -74.0060
        default_zoom: 13
        min_zoom: 1
        max_zoom: 19
        tile_url: OpenStreetMap standard tiles
        attribution: OpenStreetMap contributors
        scroll_zoom_disabled: True
        new_marker_label: "New Point"
    """
    default_lat: float = 40.7128      # Default: New York City
    default_lng: float = -74.0060
    default_zoom: int = 13            # Default: 13
    min_zoom: int = 1                 # Default: 1
    max_zoom: int = 19                # Default: 19
    tile_url: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    attribution: str = "&copy; OpenStreetMap contributors"
    scroll_zoom_disabled: bool = True  # Default: True (wheel pans/zooms the canvas instead)
    new_marker_label: str = "New Point"


# =============================================================================
# Geocoding Settings
# =============================================================================

@dataclass
class GeocodingSettings:
    """Geocoding service settings.

    Defaults:
        base_url: "https://nominatim.openstreetmap.org"
        user_agent: "Strata Canvas Desktop"
        timeout: 10.0
        result_limit: 5
    """
    base_url: str = "https://nominatim.openstreetmap.org"
    user_agent: str = "Strata Canvas Desktop"  # Nominatim requires an identifying agent
    timeout: float = 10.0                      # Default: 10.0 seconds
    result_limit: int = 5                      # Default: 5 results


# =============================================================================
# Popup Settings
# =============================================================================

@dataclass
class PopupSettings:
    """Map configuration popup placement settings.

    Defaults:
        width: 320
        height: 280
        margin: 10
        anchor_gap: 8
    """
    width: int = 320       # Default: 320 pixels
    height: int = 280      # Default: 280 pixels (estimated, used for placement)
    margin: int = 10       # Default: 10 pixels from viewport edges
    anchor_gap: int = 8    # Default: 8 pixels between anchor and popup


# =============================================================================
# Debug Settings
# =============================================================================

@dataclass
class DebugSettings:
    """Debug instrumentation settings.

    Defaults:
        strict_invariants: False
    """
    strict_invariants: bool = False  # Default: False (violations are traced and ignored)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        theme: The UI theme name (must match a key in styles.STYLES).
        canvas: Canvas-related settings.
        map: Embedded map settings.
        geocoding: Geocoding service settings.
        popup: Map configuration popup settings.
        debug: Debug instrumentation settings.
    """
    # UI Settings
    theme: str = "Tailwind"  # Default: "Tailwind"

    # Nested settings categories
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    map: MapSettings = field(default_factory=MapSettings)
    geocoding: GeocodingSettings = field(default_factory=GeocodingSettings)
    popup: PopupSettings = field(default_factory=PopupSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Optional override of the config directory.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.settings_dir = Path(settings_dir) if settings_dir else Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except Exception:
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.theme = general.get("theme", settings.theme)

        # Canvas section
        canvas = data.get("canvas", {})
        if "handles" in canvas:
            h = canvas["handles"]
            settings.canvas.handles.drag_bar_height = h.get("drag_bar_height", settings.canvas.handles.drag_bar_height)
            settings.canvas.handles.resize_hit_width = h.get("resize_hit_width", settings.canvas.handles.resize_hit_width)
            settings.canvas.handles.delete_radius = h.get("delete_radius", settings.canvas.handles.delete_radius)
            settings.canvas.handles.border_color = h.get("border_color", settings.canvas.handles.border_color)
            settings.canvas.handles.accent_color = h.get("accent_color", settings.canvas.handles.accent_color)
            settings.canvas.handles.grip_color = h.get("grip_color", settings.canvas.handles.grip_color)
        if "containers" in canvas:
            c = canvas["containers"]
            settings.canvas.containers.min_width = c.get("min_width", settings.canvas.containers.min_width)
            settings.canvas.containers.default_text_width = c.get("default_text_width", settings.canvas.containers.default_text_width)
            settings.canvas.containers.text_max_width = c.get("text_max_width", settings.canvas.containers.text_max_width)
            settings.canvas.containers.image_default_width = c.get("image_default_width", settings.canvas.containers.image_default_width)
            settings.canvas.containers.map_default_width = c.get("map_default_width", settings.canvas.containers.map_default_width)
            settings.canvas.containers.map_default_height = c.get("map_default_height", settings.canvas.containers.map_default_height)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)

        # Map section
        m = data.get("map", {})
        settings.map.default_lat = m.get("default_lat", settings.map.default_lat)
        settings.map.default_lng = m.get("default_lng", settings.map.default_lng)
        settings.map.default_zoom = m.get("default_zoom", settings.map.default_zoom)
        settings.map.min_zoom = m.get("min_zoom", settings.map.min_zoom)
        settings.map.max_zoom = m.get("max_zoom", settings.map.max_zoom)
        settings.map.tile_url = m.get("tile_url", settings.map.tile_url)
        settings.map.attribution = m.get("attribution", settings.map.attribution)
        settings.map.scroll_zoom_disabled = m.get("scroll_zoom_disabled", settings.map.scroll_zoom_disabled)
        settings.map.new_marker_label = m.get("new_marker_label", settings.map.new_marker_label)

        # Geocoding section
        g = data.get("geocoding", {})
        settings.geocoding.base_url = g.get("base_url", settings.geocoding.base_url)
        settings.geocoding.user_agent = g.get("user_agent", settings.geocoding.user_agent)
        settings.geocoding.timeout = g.get("timeout", settings.geocoding.timeout)
        settings.geocoding.result_limit = g.get("result_limit", settings.geocoding.result_limit)

        # Popup section
        p = data.get("popup", {})
        settings.popup.width = p.get("width", settings.popup.width)
        settings.popup.height = p.get("height", settings.popup.height)
        settings.popup.margin = p.get("margin", settings.popup.margin)
        settings.popup.anchor_gap = p.get("anchor_gap", settings.popup.anchor_gap)

        # Debug section
        d = data.get("debug", {})
        settings.debug.strict_invariants = d.get("strict_invariants", settings.debug.strict_invariants)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "theme": s.theme,
            },
            "canvas": {
                "handles": {
                    "drag_bar_height": s.canvas.handles.drag_bar_height,
                    "resize_hit_width": s.canvas.handles.resize_hit_width,
                    "delete_radius": s.canvas.handles.delete_radius,
                    "border_color": s.canvas.handles.border_color,
                    "accent_color": s.canvas.handles.accent_color,
                    "grip_color": s.canvas.handles.grip_color,
                },
                "containers": {
                    "min_width": s.canvas.containers.min_width,
                    "default_text_width": s.canvas.containers.default_text_width,
                    "text_max_width": s.canvas.containers.text_max_width,
                    "image_default_width": s.canvas.containers.image_default_width,
                    "map_default_width": s.canvas.containers.map_default_width,
                    "map_default_height": s.canvas.containers.map_default_height,
                },
                "zoom": {
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                },
            },
            "map": {
                "default_lat": s.map.default_lat,
                "default_lng": s.map.default_lng,
                "default_zoom": s.map.default_zoom,
                "min_zoom": s.map.min_zoom,
                "max_zoom": s.map.max_zoom,
                "tile_url": s.map.tile_url,
                "attribution": s.map.attribution,
                "scroll_zoom_disabled": s.map.scroll_zoom_disabled,
                "new_marker_label": s.map.new_marker_label,
            },
            "geocoding": {
                "base_url": s.geocoding.base_url,
                "user_agent": s.geocoding.user_agent,
                "timeout": s.geocoding.timeout,
                "result_limit": s.geocoding.result_limit,
            },
            "popup": {
                "width": s.popup.width,
                "height": s.popup.height,
                "margin": s.popup.margin,
                "anchor_gap": s.popup.anchor_gap,
            },
            "debug": {
                "strict_invariants": s.debug.strict_invariants,
            },
        }

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
