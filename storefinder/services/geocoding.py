"""
Geocoding Service Module.

A Geocoder backed by a Nominatim compatible search endpoint.
"""

import logging
from typing import Any, Dict, List, Optional

from storefinder.core.config import ServiceConfig
from storefinder.core.geo import LatLng, LatLngBounds
from storefinder.core.protocols import GeocodeCallback, GeocodeResult, GeocoderStatus
from storefinder.services.http_client import HttpClient

logger = logging.getLogger(__name__)


def parse_nominatim_place(place: Dict[str, Any]) -> Optional[GeocodeResult]:
    """
    Converts one Nominatim search hit into a GeocodeResult.

    Args:
        place: A decoded search hit.

    Returns:
        Optional[GeocodeResult]: None if the hit has no usable coordinates.
    """
    try:
        location = LatLng(float(place["lat"]), float(place["lon"]))
    except (KeyError, TypeError, ValueError):
        return None

    viewport = None
    box = place.get("boundingbox")
    if box and len(box) == 4:
        try:
            south, north, west, east = (float(value) for value in box)
            viewport = LatLngBounds(LatLng(south, west), LatLng(north, east))
        except (TypeError, ValueError):
            viewport = None

    return GeocodeResult(
        name=str(place.get("display_name", "")),
        location=location,
        viewport=viewport,
    )


class NominatimGeocoder:
    """
    Resolves free text with a Nominatim ``/search`` endpoint.

    Only the best match is requested. The current viewport is passed as a
    non-binding ``viewbox`` to bias results toward what the user sees.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        client: Optional[HttpClient] = None,
    ) -> None:
        self.config = config or ServiceConfig()
        self.client = client or HttpClient()

    def build_params(self, query: str, bounds: Optional[LatLngBounds]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": query, "format": "jsonv2", "limit": 1}
        if bounds is not None:
            params["viewbox"] = f"{bounds.west},{bounds.north},{bounds.east},{bounds.south}"
            params["bounded"] = 0
        return params

    def geocode(
        self,
        query: str,
        bounds: Optional[LatLngBounds],
        callback: GeocodeCallback,
    ) -> None:
        def on_response(payload: Optional[Any], error: Optional[str]) -> None:
            if error is not None:
                callback(GeocoderStatus.ERROR, [])
                return
            results: List[GeocodeResult] = []
            for place in payload or []:
                result = parse_nominatim_place(place) if isinstance(place, dict) else None
                if result is not None:
                    results.append(result)
            if not results:
                logger.info(f"No geocoding results for '{query}'")
                callback(GeocoderStatus.ZERO_RESULTS, [])
                return
            callback(GeocoderStatus.OK, results)

        self.client.get_json(
            self.config.geocoder_url,
            self.build_params(query, bounds),
            on_response,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout,
        )
