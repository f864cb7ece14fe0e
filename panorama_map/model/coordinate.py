"""Coordinate - the location atom for annotations and scene lookups.

A Coordinate is an immutable WGS84 latitude/longitude pair. It is the only
piece of an annotation the selection coordinator reads.
"""

from dataclasses import dataclass

import numpy as np

from panorama_map.core.geo_calculator import GeoCalculator


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 position in decimal degrees.

    Attributes:
        latitude: Latitude in decimal degrees (-90..90)
        longitude: Longitude in decimal degrees (-180..180)

    Example:
        kichijoji = Coordinate(latitude=35.7023137, longitude=139.5803228)
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if not (np.isfinite(self.latitude) and np.isfinite(self.longitude)):
            raise ValueError(f"Coordinate must be finite, got ({self.latitude}, {self.longitude})")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude {self.latitude} outside [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude {self.longitude} outside [-180, 180]")

    @property
    def lat_lon(self) -> tuple[float, float]:
        """Return (lat, lon) tuple - standard geographic order."""
        return (self.latitude, self.longitude)

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) tuple - GeoJSON/Pydeck order."""
        return (self.longitude, self.latitude)

    def distance_to(self, other: "Coordinate") -> float:
        """Great-circle distance to another coordinate in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.latitude,
            lon1=self.longitude,
            lat2=other.latitude,
            lon2=other.longitude,
        )

    def search_box(self, half_width_m: float) -> tuple[float, float, float, float]:
        """(min_lon, min_lat, max_lon, max_lat) box centered on this coordinate."""
        return GeoCalculator.bounding_box(lat=self.latitude, lon=self.longitude, half_width_m=half_width_m)

    def __repr__(self) -> str:
        return f"Coordinate(lat={self.latitude:.6f}, lon={self.longitude:.6f})"
