"""Geodesic helpers for scene lookups.

Provides the small amount of geometry the panorama lookup needs:
- Distance between two points (Haversine formula)
- Search box around a point (for bbox-filtered imagery queries)
- Nearest candidate selection (vectorized Haversine over NumPy arrays)

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, degrees, radians, sin, sqrt

import numpy as np

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    Coordinates are in decimal degrees (WGS84). Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def bounding_box(lat: float, lon: float, half_width_m: float) -> tuple[float, float, float, float]:
        """Square search box centered on a point.

        Args:
            lat: Center latitude (decimal degrees)
            lon: Center longitude (decimal degrees)
            half_width_m: Distance from center to each edge in meters

        Returns:
            Tuple (min_lon, min_lat, max_lon, max_lat), clamped to valid ranges.
        """
        dlat = degrees(half_width_m / EARTH_RADIUS_M)
        # Longitude degrees shrink with cos(lat); guard the poles
        dlon = degrees(half_width_m / (EARTH_RADIUS_M * max(cos(radians(lat)), 1e-6)))
        return (
            max(lon - dlon, -180.0),
            max(lat - dlat, -90.0),
            min(lon + dlon, 180.0),
            min(lat + dlat, 90.0),
        )

    @staticmethod
    def nearest_index(lat: float, lon: float, lats: list[float], lons: list[float]) -> int:
        """Index of the candidate closest to (lat, lon).

        Args:
            lat: Reference latitude
            lon: Reference longitude
            lats: Candidate latitudes
            lons: Candidate longitudes (same length as lats)

        Returns:
            Index into the candidate lists.

        Raises:
            ValueError: If there are no candidates or the lists differ in length.
        """
        if not lats or len(lats) != len(lons):
            raise ValueError(f"Need matching non-empty candidate lists, got {len(lats)} lats / {len(lons)} lons")

        lat_r = np.radians(np.asarray(lats, dtype=float))
        lon_r = np.radians(np.asarray(lons, dtype=float))
        ref_lat, ref_lon = radians(lat), radians(lon)
        a = np.sin((lat_r - ref_lat) / 2) ** 2 + np.cos(ref_lat) * np.cos(lat_r) * np.sin((lon_r - ref_lon) / 2) ** 2
        distances = EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
        return int(np.argmin(distances))
