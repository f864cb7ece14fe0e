"""Configuration constants for Panorama Map.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view parameters
    AnnotationConfig: Default points of interest and marker styling
    LookupConfig: Street-level scene lookup (Mapillary) parameters
    StyleConfig: Basemap tile sources and emphasis styling
    PanelConfig: Panorama panel dimensions
    ClickConfig: Pydeck picking parameters
"""

import os
from pathlib import Path

# Package root directory (where panorama_map/ lives)
PACKAGE_DIR = Path(__file__).parent

# Project root directory (parent of panorama_map/)
PROJECT_ROOT = PACKAGE_DIR.parent


class AppConfig:
    """UI application settings."""

    TITLE = "Panorama Map - Look Around Points of Interest"
    ICON = "🗺️"
    LAYOUT = "wide"


class MapConfig:
    """Default map view parameters."""

    # Initial center for program start: Kichijoji Station, Tokyo
    START_CENTER_LAT = 35.7023137
    START_CENTER_LON = 139.5803228

    # ~0.003 degree span around the start center
    DEFAULT_ZOOM = 16.5

    # Camera tilt per elevation rendering (0 = top-down)
    RELIEF_PITCH = 50.0
    FLAT_PITCH = 0.0
    DEFAULT_BEARING = 0.0

    MAP_HEIGHT = 640


class AnnotationConfig:
    """Default points of interest and marker styling."""

    # (id, title, lat, lon)
    DEFAULT_POIS: list[tuple[str, str, float, float]] = [
        ("kichijoji-station", "Kichijoji Station", 35.70312, 139.57975),
        ("inokashira-park", "Inokashira Park", 35.69985, 139.57353),
        ("sun-road", "Sun Road Shopping Street", 35.70465, 139.57963),
        ("harmonica-yokocho", "Harmonica Yokocho", 35.70380, 139.57990),
        ("nakamichi-dori", "Nakamichi-dori", 35.70530, 139.57590),
        ("ghibli-museum", "Ghibli Museum", 35.69622, 139.57040),
    ]

    # Optional GeoJSON FeatureCollection replacing DEFAULT_POIS
    POI_FILE_ENV_VAR = "PANORAMA_MAP_POI_FILE"

    MARKER_RADIUS_PX = 9
    MARKER_COLOR = [220, 53, 69, 230]  # Red pin
    MARKER_SELECTED_COLOR = [13, 110, 253, 255]  # Blue when selected
    MARKER_OUTLINE_COLOR = [255, 255, 255, 255]

    @staticmethod
    def poi_file() -> Path | None:
        """Path of the user-supplied points of interest file, if configured."""
        value = os.environ.get(AnnotationConfig.POI_FILE_ENV_VAR)
        return Path(value) if value else None


class LookupConfig:
    """Street-level scene lookup parameters (Mapillary Graph API v4)."""

    API_URL = "https://graph.mapillary.com/images"
    VIEWER_URL = "https://www.mapillary.com/app/?pKey={image_id}"
    TOKEN_ENV_VAR = "MAPILLARY_ACCESS_TOKEN"

    FIELDS = "id,thumb_1024_url,computed_geometry,geometry,compass_angle,captured_at,is_pano"
    SEARCH_RADIUS_M = 60.0  # Half-width of the search box around the annotation
    RESULT_LIMIT = 25
    PANORAMAS_ONLY = True

    TIMEOUT_S = 10.0
    MAX_WORKERS = 2
    POLL_INTERVAL_S = 0.3  # Rerun interval while a lookup is pending
    REQUEST_HISTORY = 32  # Recent SceneRequests kept for inspection

    @staticmethod
    def access_token() -> str | None:
        """Mapillary client token from the environment (None when unset)."""
        token = os.environ.get(LookupConfig.TOKEN_ENV_VAR, "").strip()
        return token or None


class StyleConfig:
    """Basemap tile sources and emphasis styling.

    All sources are free XYZ raster tiles usable without an API key.
    """

    CARTO_ATTRIBUTION = '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> © CARTO'
    ESRI_ATTRIBUTION = "Tiles © Esri, Maxar, Earthstar Geographics"

    STANDARD_TILES = [
        "https://a.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}.png",
        "https://b.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}.png",
        "https://c.basemaps.cartocdn.com/rastertiles/voyager/{z}/{x}/{y}.png",
    ]
    # CARTO Positron: low-contrast street map used for muted emphasis
    MUTED_TILES = [
        "https://a.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png",
        "https://b.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png",
        "https://c.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png",
    ]
    IMAGERY_TILES = [
        "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
    ]
    LABEL_TILES = [
        "https://server.arcgisonline.com/ArcGIS/rest/services/Reference/World_Boundaries_and_Places/MapServer/tile/{z}/{y}/{x}",
    ]

    # AWS Terrain Tiles (free, open, no API key)
    TERRAIN_TILES = "https://s3.amazonaws.com/elevation-tiles-prod/terrarium/{z}/{x}/{y}.png"
    TERRAIN_DECODER = {
        "rScaler": 256,
        "gScaler": 1,
        "bScaler": 1 / 256,
        "offset": -32768,
    }
    TERRAIN_MESH_MAX_ERROR = 2.0

    # Muted emphasis desaturates the standard basemap (Mapbox GL raster paint)
    MUTED_SATURATION = -0.75
    MUTED_BRIGHTNESS_MIN = 0.15
    TILE_MAX_ZOOM = 19


class PanelConfig:
    """Panorama panel dimensions."""

    PANORAMA_WIDTH = 480
    CAPTION_DATE_FORMAT = "%Y-%m-%d"


class ClickConfig:
    """Pydeck picking parameters."""

    TYPE_ANNOTATION = "annotation"
    PICKING_RADIUS_PX = 8
