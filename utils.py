"""
utils.py

Utility functions for the Strata canvas.
"""

from __future__ import annotations

import base64
import re
from typing import Optional, Tuple

from PyQt6.QtCore import QBuffer, QByteArray, QIODevice
from PyQt6.QtGui import QColor, QImage, QPixmap


# "lat, lng" or "lat lng" - two plain decimals, nothing else
_COORD_COMMA = re.compile(r"^(-?\d+\.?\d*)\s*,\s*(-?\d+\.?\d*)$")
_COORD_SPACE = re.compile(r"^(-?\d+\.?\d*)\s+(-?\d+\.?\d*)$")


def parse_coordinates(text: str) -> Optional[Tuple[float, float]]:
    """
    Strictly parse a coordinate pair.

    Accepts two decimal numbers separated by a comma or whitespace, with
    latitude in [-90, 90] and longitude in [-180, 180].

    Args:
        text: User input such as "40.7128, -74.0060"

    Returns:
        (lat, lng) tuple, or None when the input is not a valid pair
    """
    s = (text or "").strip()
    match = _COORD_COMMA.match(s) or _COORD_SPACE.match(s)
    if not match:
        return None
    lat = float(match.group(1))
    lng = float(match.group(2))
    if -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0:
        return (lat, lng)
    return None


def compute_popup_position(
    anchor_x: float,
    anchor_y: float,
    width: int,
    height: int,
    viewport_width: int,
    viewport_height: int,
    margin: int = 10,
    gap: int = 8,
) -> Tuple[int, int]:
    """
    Compute the top-left corner of a popup anchored at a point.

    The popup goes above the anchor when there is room for its height plus
    the margin, otherwise below. It is clamped horizontally within the
    viewport, and vertically as well when placed below.

    Args:
        anchor_x, anchor_y: Anchor point in viewport coordinates
        width, height: Estimated popup size
        viewport_width, viewport_height: Size of the area the popup lives in
        margin: Minimum distance from viewport edges
        gap: Distance between anchor and popup edge

    Returns:
        (left, top) in viewport coordinates
    """
    left = anchor_x
    if anchor_y < height + margin:
        # Not enough room above
        top = anchor_y
        if top + height > viewport_height - margin:
            top = viewport_height - height - margin
        top += gap
    else:
        top = anchor_y - height - gap

    if left < margin:
        left = margin
    if left + width > viewport_width - margin:
        left = viewport_width - width - margin

    return int(round(left)), int(round(top))


def hex_to_qcolor(s: str, fallback: QColor) -> QColor:
    """
    Parse a hex string to a QColor.

    Args:
        s: Hex string like "#RRGGBB" or "#RRGGBBAA"
        fallback: Color to return if parsing fails

    Returns:
        Parsed QColor or fallback
    """
    try:
        if not s:
            return QColor(fallback)
        s = s.strip()
        if s.startswith("#"):
            s = s[1:]
        if len(s) == 6:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        if len(s) == 8:
            return QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), int(s[6:8], 16))
    except ValueError:
        pass
    return QColor(fallback)


def image_to_data_uri(image: QImage) -> str:
    """Encode a QImage as a PNG data URI."""
    data = QByteArray()
    buf = QBuffer(data)
    buf.open(QIODevice.OpenModeFlag.WriteOnly)
    image.save(buf, "PNG")
    buf.close()
    return "data:image/png;base64," + base64.b64encode(bytes(data)).decode("ascii")


def load_pixmap(reference: str) -> QPixmap:
    """
    Load a pixmap from a file path or a base64 data URI.

    Returns:
        The pixmap, null when the reference cannot be loaded
    """
    pixmap = QPixmap()
    ref = (reference or "").strip()
    if not ref:
        return pixmap
    if ref.startswith("data:"):
        _, _, payload = ref.partition(",")
        try:
            pixmap.loadFromData(base64.b64decode(payload))
        except ValueError:
            pass
        return pixmap
    pixmap.load(ref)
    return pixmap
