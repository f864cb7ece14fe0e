"""Basemaps for the map surface using free raster tiles.

Translates a RenderConfiguration into what pydeck needs:

2D basemap (map_style dict):
    Mapbox GL style specification with raster sources. deck.gl renders XYZ
    raster tiles natively from this format (pydeck's TileLayer cannot,
    because renderSubLayers is not exposed to Python). Requires
    map_provider="mapbox" in pdk.Deck() (works without API key for raster).

3D relief (TerrainLayer):
    AWS Terrarium elevation tiles meshed by deck.gl and textured with the
    basemap's primary tile source. The TerrainLayer provides the basemap in
    this mode, so map_style is None.

Per configuration:
    Standard  -> CARTO Voyager (Muted: CARTO Positron, desaturated)
    Hybrid    -> Esri World Imagery + Esri place/boundary labels
    Imagery   -> Esri World Imagery
"""

import logging
from dataclasses import dataclass

import pydeck as pdk

from panorama_map.constants import StyleConfig
from panorama_map.model.render_configuration import (
    FeatureEmphasis,
    HybridMapConfiguration,
    ImageryMapConfiguration,
    RenderConfiguration,
    StandardMapConfiguration,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterSource:
    """One raster tile source inside a basemap style."""

    name: str
    tiles: tuple[str, ...]
    attribution: str
    saturation: float = 0.0


def basemap_sources(configuration: RenderConfiguration) -> list[RasterSource]:
    """Raster sources for a configuration, bottom to top."""
    imagery = RasterSource(
        name="imagery",
        tiles=tuple(StyleConfig.IMAGERY_TILES),
        attribution=StyleConfig.ESRI_ATTRIBUTION,
    )

    if isinstance(configuration, StandardMapConfiguration):
        if configuration.feature_emphasis is FeatureEmphasis.DESATURATED:
            return [
                RasterSource(
                    name="standard_muted",
                    tiles=tuple(StyleConfig.MUTED_TILES),
                    attribution=StyleConfig.CARTO_ATTRIBUTION,
                    saturation=StyleConfig.MUTED_SATURATION,
                )
            ]
        return [
            RasterSource(
                name="standard",
                tiles=tuple(StyleConfig.STANDARD_TILES),
                attribution=StyleConfig.CARTO_ATTRIBUTION,
            )
        ]
    if isinstance(configuration, HybridMapConfiguration):
        labels = RasterSource(
            name="labels",
            tiles=tuple(StyleConfig.LABEL_TILES),
            attribution=StyleConfig.ESRI_ATTRIBUTION,
        )
        return [imagery, labels]
    if isinstance(configuration, ImageryMapConfiguration):
        return [imagery]
    raise TypeError(f"Unknown render configuration: {configuration!r}")


def raster_style(configuration: RenderConfiguration) -> dict[str, object]:
    """Mapbox GL style dict for the 2D basemap of a configuration."""
    sources: dict[str, object] = {}
    layers: list[dict[str, object]] = []

    for source in basemap_sources(configuration):
        sources[source.name] = {
            "type": "raster",
            "tiles": list(source.tiles),
            "tileSize": 256,
            "attribution": source.attribution,
        }
        layer: dict[str, object] = {
            "id": source.name,
            "type": "raster",
            "source": source.name,
            "minzoom": 0,
            "maxzoom": StyleConfig.TILE_MAX_ZOOM,
        }
        if source.saturation:
            layer["paint"] = {
                "raster-saturation": source.saturation,
                "raster-brightness-min": StyleConfig.MUTED_BRIGHTNESS_MIN,
            }
        layers.append(layer)

    return {"version": 8, "sources": sources, "layers": layers}


def create_terrain_layer(configuration: RenderConfiguration) -> pdk.Layer:
    """Create a 3D TerrainLayer textured with the configuration's primary tiles.

    Only the first source is draped (TerrainLayer takes one texture), so the
    hybrid label overlay is not shown in relief mode.
    """
    primary = basemap_sources(configuration)[0]
    return pdk.Layer(
        "TerrainLayer",
        elevation_data=StyleConfig.TERRAIN_TILES,
        elevation_decoder=StyleConfig.TERRAIN_DECODER,
        texture=primary.tiles[0],
        mesh_max_error=StyleConfig.TERRAIN_MESH_MAX_ERROR,
        id=f"terrain_3d_{primary.name}",
        pickable=False,
    )
