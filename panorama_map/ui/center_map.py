"""MapRenderer - Pydeck map surface for the panorama map.

Implements the outbound side of the map surface contract
(apply_render_configuration) and renders annotations on an interactive
deck.gl map:
- Basemap from the applied RenderConfiguration (raster style dict in 2D,
  TerrainLayer in 3D relief)
- Points of interest as clickable markers (ScatterplotLayer)

Pydeck conventions:
- Uses [lon, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict] for GPU streaming
- pickable=True enables click detection
"""

import logging
from dataclasses import dataclass, field

import pydeck as pdk

from panorama_map.constants import AnnotationConfig, ClickConfig, MapConfig
from panorama_map.model.annotation import Annotation
from panorama_map.model.render_configuration import RenderConfiguration
from panorama_map.ui.basemap import create_terrain_layer, raster_style

logger = logging.getLogger(__name__)


@dataclass
class LayerCollection:
    """Pydeck layers in z-order (back to front): basemap -> annotations."""

    basemap: list[pdk.Layer] = field(default_factory=list)
    annotations: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        """Return all layers in correct z-order (back to front)."""
        return self.basemap + self.annotations


class MapRenderer:
    """Renders annotations on a Pydeck map configured by the core.

    The renderer never reads ConfigurationState directly. The session pushes
    a RenderConfiguration at startup and after every change.

    Example:
        renderer = MapRenderer()
        session = MapSession(map_surface=renderer, provider=provider)
        deck = renderer.render(annotations=annotations)
        st_deckgl(deck, key=f"map_{renderer.revision}")
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lon: float = MapConfig.START_CENTER_LON,
        zoom: float = MapConfig.DEFAULT_ZOOM,
        bearing: float = MapConfig.DEFAULT_BEARING,
    ) -> None:
        """Initialize map renderer.

        Args:
            center_lat: Initial map center latitude
            center_lon: Initial map center longitude
            zoom: Initial zoom level
            bearing: Map rotation (0=north up)
        """
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.zoom = zoom
        self.bearing = bearing
        self.configuration: RenderConfiguration | None = None
        # Incremented per applied configuration; part of the component key
        self.revision = 0

    # =========================================================================
    # MAP SURFACE CONTRACT
    # =========================================================================

    def apply_render_configuration(self, configuration: RenderConfiguration) -> None:
        """Store a new render configuration. Equal configurations are ignored."""
        if configuration == self.configuration:
            logger.debug(f"[MAP] Configuration unchanged: {configuration}")
            return
        self.configuration = configuration
        self.revision += 1
        logger.info(f"[MAP] Applied {configuration} (revision {self.revision})")

    @property
    def shows_relief(self) -> bool:
        return self.configuration is not None and self.configuration.shows_relief

    # =========================================================================
    # VIEW STATE
    # =========================================================================

    @property
    def pitch(self) -> float:
        """Camera tilt for the current relief hint."""
        return MapConfig.RELIEF_PITCH if self.shows_relief else MapConfig.FLAT_PITCH

    def get_view_state(self) -> pdk.ViewState:
        """Create Pydeck ViewState from current settings."""
        return pdk.ViewState(
            latitude=self.center_lat,
            longitude=self.center_lon,
            zoom=self.zoom,
            pitch=self.pitch,
            bearing=self.bearing,
        )

    # =========================================================================
    # RENDERING
    # =========================================================================

    def render(
        self,
        annotations: list[Annotation],
        selected_annotation_id: str | None = None,
    ) -> pdk.Deck:
        """Render the basemap and annotation markers.

        Args:
            annotations: Points of interest to draw
            selected_annotation_id: Annotation drawn in the highlight color

        Returns:
            pdk.Deck object ready for display.

        Raises:
            RuntimeError: If no render configuration has been applied yet.
        """
        if self.configuration is None:
            raise RuntimeError("MapRenderer.render() called before a render configuration was applied")

        layer_collection = LayerCollection()

        # 3D relief: TerrainLayer provides the basemap, map_style must be None
        # 2D: raster style dict (needs map_provider="mapbox", no API key for raster)
        if self.configuration.shows_relief:
            layer_collection.basemap.append(create_terrain_layer(self.configuration))
            map_style = None
            map_provider = None
        else:
            map_style = raster_style(self.configuration)
            map_provider = "mapbox"

        if annotations:
            layer_collection.annotations.append(
                self._create_annotation_layer(
                    annotations=annotations,
                    selected_id=selected_annotation_id,
                    draw_on_top=self.configuration.shows_relief,
                )
            )

        return pdk.Deck(
            map_style=map_style,
            map_provider=map_provider,
            initial_view_state=self.get_view_state(),
            layers=layer_collection.get_ordered_layers(),
            tooltip=self._create_tooltip_config(),
            parameters={"pickingRadius": ClickConfig.PICKING_RADIUS_PX},
        )

    @staticmethod
    def _create_annotation_layer(
        annotations: list[Annotation], selected_id: str | None, draw_on_top: bool = False
    ) -> pdk.Layer:
        """Marker layer. draw_on_top disables depth testing so relief terrain never hides markers."""
        data = [annotation.to_layer_record(selected=annotation.id == selected_id) for annotation in annotations]
        return pdk.Layer(
            "ScatterplotLayer",
            data,
            get_position="position",
            get_radius=AnnotationConfig.MARKER_RADIUS_PX,
            radius_units="pixels",
            get_fill_color="color",
            get_line_color=AnnotationConfig.MARKER_OUTLINE_COLOR,
            line_width_min_pixels=2,
            stroked=True,
            pickable=True,
            auto_highlight=True,
            parameters={"depthTest": not draw_on_top},
            id="annotations",
        )

    @staticmethod
    def _create_tooltip_config() -> dict[str, object]:
        return {
            "html": "<b>{title}</b>",
            "style": {"backgroundColor": "white", "color": "black", "fontSize": "12px"},
        }
