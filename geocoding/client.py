"""
geocoding/client.py

Nominatim (OpenStreetMap) forward and reverse geocoding over HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from settings import get_settings

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Base class for geocoding failures."""


class GeocodingUnavailable(GeocodingError):
    """The service could not be reached, rejected the request, or replied garbage."""


@dataclass(frozen=True)
class GeocodeResult:
    lat: float
    lon: float
    display_name: str


class NominatimClient:
    """
    Thin client for the Nominatim API.

    Every request carries a descriptive User-Agent header, which the public
    Nominatim instance requires.

    Args:
        base_url: Service root. Defaults to settings.geocoding.base_url.
        user_agent: Client identifier. Defaults to settings.geocoding.user_agent.
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured requests.Session (tests inject one).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        cfg = get_settings().settings.geocoding
        self.base_url = (base_url or cfg.base_url).rstrip("/")
        self.user_agent = user_agent or cfg.user_agent
        self.timeout = timeout if timeout is not None else cfg.timeout
        self.result_limit = cfg.result_limit
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.user_agent, "Accept": "application/json"})

    def reverse(self, lat: float, lng: float) -> Optional[str]:
        """
        Resolve coordinates to a human-readable address.

        Returns:
            The display name, or None when the service knows no address there.

        Raises:
            GeocodingUnavailable: on network or service failure.
        """
        data = self._get("/reverse", {"format": "json", "lat": lat, "lon": lng})
        if isinstance(data, dict):
            name = data.get("display_name")
            if name:
                return str(name)
        return None

    def search(self, query: str, limit: Optional[int] = None) -> List[GeocodeResult]:
        """
        Resolve a free-text address to ranked candidate locations.

        Returns:
            Results in service ranking order, possibly empty.

        Raises:
            GeocodingUnavailable: on network or service failure.
        """
        params = {
            "format": "json",
            "q": query,
            "limit": limit or self.result_limit,
            "addressdetails": 1,
        }
        data = self._get("/search", params)
        if not isinstance(data, list):
            raise GeocodingUnavailable("Geocoding service unavailable")

        results: List[GeocodeResult] = []
        for entry in data:
            try:
                results.append(GeocodeResult(
                    lat=float(entry["lat"]),
                    lon=float(entry["lon"]),
                    display_name=str(entry.get("display_name") or query),
                ))
            except (KeyError, TypeError, ValueError):
                logger.debug("skipping malformed search result: %r", entry)
        return results

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = self.base_url + path
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("geocoding request to %s failed: %s", url, e)
            raise GeocodingUnavailable("Geocoding service unavailable") from e

        if resp.status_code != 200:
            logger.warning("geocoding request to %s returned HTTP %s", url, resp.status_code)
            raise GeocodingUnavailable("Geocoding service unavailable")

        try:
            return resp.json()
        except ValueError as e:
            logger.warning("geocoding response from %s was not JSON", url)
            raise GeocodingUnavailable("Geocoding service unavailable") from e
