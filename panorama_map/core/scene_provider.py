"""Scene provider - street-level imagery lookup for a coordinate.

The provider contract is a single blocking call:

    request_scene(coordinate) -> Scene     (raises SceneLookupError)

It runs on a LookupExecutor worker thread, never on the control thread.
There is no cancellation: a superseded lookup simply runs to completion and
its result is ignored by the selection coordinator.

MapillarySceneProvider queries the Mapillary Graph API (v4) for images in a
small box around the coordinate and returns the one closest to it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Protocol

import requests

from panorama_map.constants import LookupConfig
from panorama_map.core.geo_calculator import GeoCalculator
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.scene import Scene

logger = logging.getLogger(__name__)


class SceneLookupError(Exception):
    """Scene lookup failed or found nothing for a coordinate.

    The only error kind the selection coordinator knows about.
    """

    def __init__(self, message: str, *, coordinate: Coordinate | None = None) -> None:
        self.coordinate = coordinate
        super().__init__(message)


class NoSceneFoundError(SceneLookupError):
    """Provider answered, but has no imagery near the coordinate."""

    def __init__(self, coordinate: Coordinate, radius_m: float) -> None:
        self.radius_m = radius_m
        super().__init__(f"No imagery within {radius_m:.0f}m of {coordinate!r}", coordinate=coordinate)


class SceneProviderUnavailableError(SceneLookupError):
    """Provider could not be queried (no token, network, HTTP or payload error)."""

    def __init__(
        self,
        message: str,
        *,
        coordinate: Coordinate | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, coordinate=coordinate)


class SceneProvider(Protocol):
    """Anything that can resolve a coordinate to a Scene (blocking)."""

    def request_scene(self, coordinate: Coordinate) -> Scene: ...


class MapillarySceneProvider:
    """Scene provider backed by the Mapillary Graph API.

    Example:
        provider = MapillarySceneProvider(access_token=LookupConfig.access_token())
        scene = provider.request_scene(Coordinate(latitude=35.7023, longitude=139.5803))
    """

    def __init__(
        self,
        access_token: str | None,
        search_radius_m: float = LookupConfig.SEARCH_RADIUS_M,
        timeout_s: float = LookupConfig.TIMEOUT_S,
        panoramas_only: bool = LookupConfig.PANORAMAS_ONLY,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize provider.

        Args:
            access_token: Mapillary client token (None makes every lookup fail)
            search_radius_m: Half-width of the search box around the coordinate
            timeout_s: HTTP timeout per lookup
            panoramas_only: Restrict results to 360° imagery
            session: Shared requests session (created if None)
        """
        self.access_token = access_token
        self.search_radius_m = search_radius_m
        self.timeout_s = timeout_s
        self.panoramas_only = panoramas_only
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    def request_scene(self, coordinate: Coordinate) -> Scene:
        """Look up the panorama closest to coordinate.

        Raises:
            SceneProviderUnavailableError: Missing token, network/HTTP failure, invalid JSON
            NoSceneFoundError: No imagery inside the search box
        """
        if not self.is_configured:
            raise SceneProviderUnavailableError(
                f"No access token configured (set {LookupConfig.TOKEN_ENV_VAR})",
                coordinate=coordinate,
            )

        payload = self._fetch_images(coordinate=coordinate)
        candidates: list[dict[str, Any]] = []
        positions: list[Coordinate] = []
        for image in payload.get("data") or []:
            position = _image_position(image) if isinstance(image, dict) and image.get("id") else None
            if position is not None:
                candidates.append(image)
                positions.append(position)
        if not candidates:
            raise NoSceneFoundError(coordinate=coordinate, radius_m=self.search_radius_m)

        best = GeoCalculator.nearest_index(
            lat=coordinate.latitude,
            lon=coordinate.longitude,
            lats=[pos.latitude for pos in positions],
            lons=[pos.longitude for pos in positions],
        )
        scene = _scene_from_image(image=candidates[best], position=positions[best])
        logger.info(
            f"[LOOKUP] {coordinate!r} -> image {scene.image_id} "
            f"({coordinate.distance_to(scene.position):.0f}m away, {len(candidates)} candidates)"
        )
        return scene

    def _fetch_images(self, coordinate: Coordinate) -> dict[str, Any]:
        """GET /images with a bbox filter. Maps every transport problem to SceneProviderUnavailableError."""
        min_lon, min_lat, max_lon, max_lat = coordinate.search_box(half_width_m=self.search_radius_m)
        params: dict[str, Any] = {
            "access_token": self.access_token,
            "fields": LookupConfig.FIELDS,
            "bbox": f"{min_lon:.6f},{min_lat:.6f},{max_lon:.6f},{max_lat:.6f}",
            "limit": LookupConfig.RESULT_LIMIT,
        }
        if self.panoramas_only:
            params["is_pano"] = "true"

        try:
            response = self._session.get(LookupConfig.API_URL, params=params, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise SceneProviderUnavailableError(
                f"Imagery request failed: {type(e).__name__}", coordinate=coordinate
            ) from e

        if response.status_code != 200:
            raise SceneProviderUnavailableError(
                f"Imagery API returned HTTP {response.status_code}",
                coordinate=coordinate,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SceneProviderUnavailableError("Imagery API returned invalid JSON", coordinate=coordinate) from e

        if not isinstance(payload, dict):
            raise SceneProviderUnavailableError(
                f"Unexpected imagery payload type {type(payload).__name__}", coordinate=coordinate
            )
        return payload


def _image_position(image: dict[str, Any]) -> Coordinate | None:
    """Position of an image record; prefers the SfM-corrected computed_geometry."""
    for key in ("computed_geometry", "geometry"):
        geometry = image.get(key)
        if not isinstance(geometry, dict):
            continue
        coords = geometry.get("coordinates")
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            try:
                return Coordinate(latitude=float(coords[1]), longitude=float(coords[0]))
            except (TypeError, ValueError):
                logger.debug(f"Ignoring invalid {key} on image {image.get('id')}: {coords!r}")
    return None


def _scene_from_image(image: dict[str, Any], position: Coordinate) -> Scene:
    image_id = str(image["id"])
    captured_at = None
    if isinstance(image.get("captured_at"), (int, float)):
        # Mapillary timestamps are epoch milliseconds
        captured_at = datetime.fromtimestamp(image["captured_at"] / 1000, tz=UTC)

    compass = image.get("compass_angle")
    return Scene(
        image_id=image_id,
        image_url=str(image.get("thumb_1024_url") or ""),
        position=position,
        compass_angle=float(compass) if isinstance(compass, (int, float)) else None,
        captured_at=captured_at,
        is_panorama=bool(image.get("is_pano", True)),
        viewer_url=LookupConfig.VIEWER_URL.format(image_id=image_id),
    )
