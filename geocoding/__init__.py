"""
geocoding package

Forward/reverse geocoding client and its background execution.
"""

from geocoding.client import (
    GeocodeResult,
    GeocodingError,
    GeocodingUnavailable,
    NominatimClient,
)
from geocoding.worker import GeocodeTaskRunner, GeocodeWorker

__all__ = [
    "GeocodeResult",
    "GeocodingError",
    "GeocodingUnavailable",
    "NominatimClient",
    "GeocodeTaskRunner",
    "GeocodeWorker",
]
