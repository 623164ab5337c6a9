"""
Remote GeoJSON Data Feed.

A DataFeed backed by an HTTP endpoint that returns a GeoJSON
FeatureCollection of locations for a bounding box. Results are filtered
and ranked locally the same way as StaticDataFeed.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from storefinder.core.attributes import AttributeSet
from storefinder.core.config import FeedConfig
from storefinder.core.geo import LatLng, LatLngBounds
from storefinder.core.location import Location
from storefinder.services.data_feed import (
    DataFeed,
    StoresCallback,
    filter_locations,
    sort_by_distance,
)
from storefinder.services.http_client import HttpClient

logger = logging.getLogger(__name__)

PropertiesModifier = Callable[[Dict[str, Any]], Dict[str, Any]]


class GeoJsonDataFeed(DataFeed):
    """
    Fetches locations from a GeoJSON endpoint.

    The request carries ``bbox=west,south,east,north``, the viewport center
    as ``lat``/``lng`` and ``limit``. Each feature must have point geometry
    (``[lng, lat]``) and an ``id`` in its properties. A ``features`` list of
    attribute ids in the properties is resolved against ``universe``.

    Failures are logged and delivered as an empty list, so the view shows
    its empty state and the next refresh tries again.
    """

    def __init__(
        self,
        config: FeedConfig,
        client: Optional[HttpClient] = None,
        universe: Optional[AttributeSet] = None,
        properties_modifier: Optional[PropertiesModifier] = None,
    ) -> None:
        """
        Initializes the feed.

        Args:
            config: Endpoint configuration.
            client: HTTP client. Defaults to an asynchronous client.
            universe: Known attributes used to resolve feature ids.
            properties_modifier: Hook to rewrite the properties of each
                feature before a Location is built from them.
        """
        self.config = config
        self.client = client or HttpClient()
        self.universe = universe or AttributeSet.NONE
        if properties_modifier is not None:
            self.properties_modifier = properties_modifier

    def properties_modifier(self, props: Dict[str, Any]) -> Dict[str, Any]:
        """Override to adjust raw feature properties. Returns them unchanged."""
        return props

    def build_params(self, bounds: LatLngBounds) -> Dict[str, Any]:
        center = bounds.center
        params: Dict[str, Any] = {
            "bbox": ",".join(str(value) for value in bounds.to_bbox()),
            "lat": center.lat,
            "lng": center.lng,
            "limit": self.config.max_results,
        }
        if self.config.api_key:
            params["key"] = self.config.api_key
        return params

    def get_stores(
        self,
        bounds: LatLngBounds,
        features: Optional[AttributeSet],
        callback: StoresCallback,
    ) -> None:
        center = bounds.center

        def on_response(payload: Optional[Any], error: Optional[str]) -> None:
            if error is not None:
                logger.warning(f"Remote feed unavailable: {error}")
                callback([])
                return
            stores = filter_locations(self.parse(payload), features)
            callback(sort_by_distance(stores, center))

        self.client.get_json(
            self.config.url,
            self.build_params(bounds),
            on_response,
            timeout=self.config.timeout,
        )

    def parse(self, data: Any) -> List[Location]:
        """
        Converts a FeatureCollection into Locations.

        Args:
            data: Decoded JSON body.

        Returns:
            List[Location]: Parsed locations. Malformed features are skipped.
        """
        if not isinstance(data, dict):
            logger.warning("Remote feed returned a non-object body")
            return []
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            logger.error(f"Remote feed error: {message}")
            return []

        rows = data.get("features")
        if not rows:
            return []

        stores = []
        for row in rows:
            try:
                coordinates = row["geometry"]["coordinates"]
                position = LatLng(float(coordinates[1]), float(coordinates[0]))
                props = self.properties_modifier(dict(row.get("properties") or {}))
                location_id = str(props["id"])
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed feature: {e!r}")
                continue
            attributes = AttributeSet(
                *(
                    self.universe.get_by_id(str(feature_id))
                    for feature_id in props.get("features") or ()
                )
            )
            stores.append(Location(location_id, position, attributes, props))
        return stores
