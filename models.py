"""
models.py

Data models and constants for the Strata canvas.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from settings import get_settings


# ----------------------------
# Container type constants
# ----------------------------

class ContainerType:
    """Container type constants. Rendering dispatch is keyed on these."""
    TEXT = "text"
    IMAGE = "image"
    MAP = "map"

    ALL = (TEXT, IMAGE, MAP)


# Documented fallback view for map containers.
# Defaults: center (40.7128, -74.0060), zoom 13
DEFAULT_CENTER: Tuple[float, float] = (40.7128, -74.0060)
DEFAULT_ZOOM = 13
NEW_MARKER_LABEL = "New Point"


def default_center() -> Tuple[float, float]:
    """Get the fallback map center from settings. Default: (40.7128, -74.0060)."""
    m = get_settings().settings.map
    return (float(m.default_lat), float(m.default_lng))


def default_zoom() -> int:
    """Get the fallback map zoom from settings. Default: 13."""
    return int(get_settings().settings.map.default_zoom)


# ----------------------------
# Map metadata
# ----------------------------

@dataclass(frozen=True)
class Marker:
    """A labeled point on a map. Its list index is its address for label edits."""
    lat: float
    lng: float
    label: str = NEW_MARKER_LABEL

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Marker":
        return cls(
            lat=float(d.get("lat", 0.0)),
            lng=float(d.get("lng", 0.0)),
            label=str(d.get("label", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng, "label": self.label}


@dataclass(frozen=True)
class MapData:
    """Metadata of a map container.

    Instances are immutable snapshots; every edit produces a new instance
    so a stored snapshot can be compared against the live one.
    """
    center: Tuple[float, float] = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM
    markers: Tuple[Marker, ...] = ()
    locked: bool = False
    address: str = ""

    def __post_init__(self):
        # Normalize list inputs so equality and hashing behave
        object.__setattr__(self, "center", (float(self.center[0]), float(self.center[1])))
        object.__setattr__(self, "markers", tuple(self.markers))

    @classmethod
    def default(cls) -> "MapData":
        """Create map data seeded from the configured default view."""
        return cls(center=default_center(), zoom=default_zoom())

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "MapData":
        """Create MapData from a dict, falling back to the default center.

        Args:
            d: Dict with optional keys center, zoom, markers, locked, address.

        Returns:
            A MapData instance whose center is always defined.
        """
        if not isinstance(d, dict):
            return cls.default()
        center = d.get("center")
        if not center or len(center) != 2:
            center = default_center()
        zoom = d.get("zoom")
        if zoom is None:
            zoom = default_zoom()
        return cls(
            center=(float(center[0]), float(center[1])),
            zoom=int(zoom),
            markers=tuple(Marker.from_dict(m) for m in d.get("markers") or []),
            locked=bool(d.get("locked", False)),
            address=str(d.get("address") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": [self.center[0], self.center[1]],
            "zoom": self.zoom,
            "markers": [m.to_dict() for m in self.markers],
            "locked": self.locked,
            "address": self.address,
        }

    def with_marker(self, marker: Marker) -> "MapData":
        """Return a copy with ``marker`` appended after the existing markers."""
        return replace(self, markers=self.markers + (marker,))

    def with_label(self, index: int, label: str) -> "MapData":
        """Return a copy where only the marker at ``index`` has a new label."""
        if not 0 <= index < len(self.markers):
            raise IndexError(f"marker index {index} out of range")
        markers: List[Marker] = list(self.markers)
        markers[index] = replace(markers[index], label=label)
        return replace(self, markers=tuple(markers))

    def replace(self, **changes) -> "MapData":
        return replace(self, **changes)


# ----------------------------
# Container model
# ----------------------------

# Keys written into container records, in canonical order
RECORD_KEY_ORDER = ["id", "type", "x", "y", "width", "height", "content", "map_data"]


@dataclass
class Container:
    """A freely positioned canvas block holding text, an image, or a map.

    ``content`` is markup for text containers and a resource reference
    (file path or data URI) for images. ``map_data`` exists only for maps.
    ``selected`` is presentation state and never written to records.
    """
    id: str
    type: str = ContainerType.TEXT
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    content: str = ""
    map_data: Optional[MapData] = None
    selected: bool = field(default=False, compare=False)

    def __post_init__(self):
        if self.type not in ContainerType.ALL:
            raise ValueError(f"unknown container type: {self.type!r}")
        if self.type == ContainerType.MAP:
            if self.map_data is None:
                self.map_data = MapData.default()
            elif isinstance(self.map_data, dict):
                self.map_data = MapData.from_dict(self.map_data)
            self.content = ""
        else:
            self.map_data = None
            if self.content is None:
                self.content = ""

    def merged(self, changes: Dict[str, Any]) -> "Container":
        """Return a copy with ``changes`` merged in (id excluded)."""
        known = {f.name for f in fields(self)} - {"id"}
        return replace(self, **{k: v for k, v in changes.items() if k in known})

    def to_record(self) -> Dict[str, Any]:
        """Serialize to a plain dict. ``selected`` is omitted."""
        rec: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "x": self.x,
            "y": self.y,
        }
        if self.width is not None:
            rec["width"] = self.width
        if self.height is not None:
            rec["height"] = self.height
        if self.type == ContainerType.MAP:
            rec["map_data"] = self.map_data.to_dict()
        else:
            rec["content"] = self.content
        return {k: rec[k] for k in RECORD_KEY_ORDER if k in rec}

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Container":
        map_data = rec.get("map_data")
        return cls(
            id=str(rec["id"]),
            type=rec.get("type", ContainerType.TEXT),
            x=float(rec.get("x", 0.0)),
            y=float(rec.get("y", 0.0)),
            width=rec.get("width"),
            height=rec.get("height"),
            content=rec.get("content", "") or "",
            map_data=MapData.from_dict(map_data) if map_data is not None else None,
        )
