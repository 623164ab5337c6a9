"""
Directions Service Module.

A DirectionsService backed by an OSRM compatible ``/route/v1`` endpoint.
"""

import logging
from typing import Any, Dict, Optional

from storefinder.core.config import ServiceConfig
from storefinder.core.geo import LatLng
from storefinder.core.protocols import (
    DirectionsStatus,
    Route,
    RouteCallback,
    RouteStep,
    TravelMode,
)
from storefinder.services.http_client import HttpClient

logger = logging.getLogger(__name__)

# OSRM profile names per travel mode.
OSRM_PROFILES = {
    TravelMode.DRIVING: "driving",
    TravelMode.WALKING: "foot",
    TravelMode.BICYCLING: "bike",
}


def _step_instruction(step: Dict[str, Any]) -> str:
    maneuver = step.get("maneuver") or {}
    parts = [str(maneuver.get("type", "continue"))]
    if maneuver.get("modifier"):
        parts.append(str(maneuver["modifier"]))
    if step.get("name"):
        parts.append(f"onto {step['name']}")
    return " ".join(parts)


def parse_osrm_route(
    data: Dict[str, Any], origin: LatLng, destination: LatLng, travel_mode: TravelMode
) -> Optional[Route]:
    """
    Converts an OSRM response into a Route.

    Args:
        data: Decoded response body.
        origin: Requested start.
        destination: Requested end.
        travel_mode: Requested mode.

    Returns:
        Optional[Route]: The first route, or None if the response has none.
    """
    routes = data.get("routes") or []
    if not routes:
        return None
    best = routes[0]
    geometry = (best.get("geometry") or {}).get("coordinates") or []
    path = [LatLng(float(point[1]), float(point[0])) for point in geometry]
    steps = []
    for leg in best.get("legs") or []:
        for step in leg.get("steps") or []:
            steps.append(
                RouteStep(
                    instruction=_step_instruction(step),
                    distance_m=float(step.get("distance", 0.0)),
                    duration_s=float(step.get("duration", 0.0)),
                )
            )
    return Route(
        origin=origin,
        destination=destination,
        path=path,
        steps=steps,
        distance_m=float(best.get("distance", 0.0)),
        duration_s=float(best.get("duration", 0.0)),
        travel_mode=travel_mode,
    )


class OsrmDirectionsService:
    """Computes routes with an OSRM HTTP endpoint."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        client: Optional[HttpClient] = None,
    ) -> None:
        self.config = config or ServiceConfig()
        self.client = client or HttpClient()

    def build_url(self, origin: LatLng, destination: LatLng, travel_mode: TravelMode) -> str:
        profile = OSRM_PROFILES.get(travel_mode, "driving")
        coordinates = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        return f"{self.config.directions_url}/{profile}/{coordinates}"

    def route(
        self,
        origin: LatLng,
        destination: LatLng,
        travel_mode: TravelMode,
        callback: RouteCallback,
    ) -> None:
        def on_response(payload: Optional[Any], error: Optional[str]) -> None:
            if error is not None or not isinstance(payload, dict):
                callback(DirectionsStatus.ERROR, None)
                return
            code = payload.get("code", "Ok")
            if code == "NoRoute":
                callback(DirectionsStatus.ZERO_RESULTS, None)
                return
            if code != "Ok":
                logger.warning(f"Routing failed with code {code}")
                callback(DirectionsStatus.NOT_FOUND, None)
                return
            try:
                route = parse_osrm_route(payload, origin, destination, travel_mode)
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.warning(f"Malformed routing response: {e!r}")
                callback(DirectionsStatus.ERROR, None)
                return
            if route is None:
                callback(DirectionsStatus.ZERO_RESULTS, None)
                return
            callback(DirectionsStatus.OK, route)

        self.client.get_json(
            self.build_url(origin, destination, travel_mode),
            {"overview": "full", "geometries": "geojson", "steps": "true"},
            on_response,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout,
        )
