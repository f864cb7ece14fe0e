"""Annotation - a selectable point of interest on the map.

Annotations are owned by the map surface. The selection coordinator only
ever reads their coordinate; id and title are for rendering and picking.

Sources:
- AnnotationConfig.DEFAULT_POIS (built-in points around Kichijoji)
- A GeoJSON FeatureCollection of Point features (PANORAMA_MAP_POI_FILE)
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from panorama_map.constants import AnnotationConfig, ClickConfig
from panorama_map.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Annotation:
    """A point of interest marker.

    Attributes:
        id: Stable identifier used for picking and highlight
        coordinate: Marker position
        title: Label shown in the tooltip and panorama caption
    """

    id: str
    coordinate: Coordinate
    title: str

    def to_layer_record(self, selected: bool) -> dict[str, Any]:
        """Flat record for the pydeck ScatterplotLayer.

        The "type" field identifies annotation picks in click events.
        """
        return {
            "type": ClickConfig.TYPE_ANNOTATION,
            "id": self.id,
            "title": self.title,
            "lat": self.coordinate.latitude,
            "lon": self.coordinate.longitude,
            "position": list(self.coordinate.lon_lat),
            "color": AnnotationConfig.MARKER_SELECTED_COLOR if selected else AnnotationConfig.MARKER_COLOR,
        }


def default_annotations() -> list[Annotation]:
    """Built-in points of interest."""
    return [
        Annotation(id=poi_id, coordinate=Coordinate(latitude=lat, longitude=lon), title=title)
        for poi_id, title, lat, lon in AnnotationConfig.DEFAULT_POIS
    ]


def parse_geojson_annotations(payload: Any) -> list[Annotation]:
    """Build annotations from a GeoJSON FeatureCollection.

    Only Point features are used; other geometries are skipped with a debug log.
    Feature ids fall back to "poi-<index>", titles to properties.name.

    Raises:
        ValueError: If the payload is not a FeatureCollection or a feature or Point is malformed.
    """
    if not isinstance(payload, dict) or payload.get("type") != "FeatureCollection":
        found = payload.get("type") if isinstance(payload, dict) else type(payload).__name__
        raise ValueError(f"Expected a GeoJSON FeatureCollection, got {found!r}")

    features = payload.get("features", [])
    if not isinstance(features, list):
        raise ValueError(f"FeatureCollection features must be a list, got {type(features).__name__}")

    annotations: list[Annotation] = []
    seen_ids: set[str] = set()
    for index, feature in enumerate(features):
        if not isinstance(feature, dict):
            raise ValueError(f"Feature {index} is not an object: {feature!r}")

        geometry = feature.get("geometry") or {}
        if not isinstance(geometry, dict):
            raise ValueError(f"Feature {index} has invalid geometry: {geometry!r}")
        if geometry.get("type") != "Point":
            logger.debug(f"Skipping feature {index}: geometry type {geometry.get('type')!r}")
            continue

        coords = geometry.get("coordinates")
        if not isinstance(coords, (list, tuple)) or len(coords) < 2:
            raise ValueError(f"Feature {index} has invalid Point coordinates: {coords!r}")
        try:
            # GeoJSON order is [lon, lat]
            lon, lat = float(coords[0]), float(coords[1])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Feature {index} has non-numeric Point coordinates: {coords!r}") from e

        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            raise ValueError(f"Feature {index} has invalid properties: {props!r}")
        poi_id = str(feature.get("id") or props.get("id") or f"poi-{index}")
        if poi_id in seen_ids:
            raise ValueError(f"Duplicate annotation id {poi_id!r}")
        seen_ids.add(poi_id)

        title = str(props.get("title") or props.get("name") or poi_id)
        coordinate = Coordinate(latitude=lat, longitude=lon)
        annotations.append(Annotation(id=poi_id, coordinate=coordinate, title=title))

    return annotations


def load_annotations(path: Path | None = None) -> list[Annotation]:
    """Load annotations from a GeoJSON file, or the built-in set when no file is configured.

    Args:
        path: GeoJSON file path. Defaults to AnnotationConfig.poi_file().

    Returns:
        List of annotations (never empty when falling back to defaults).
    """
    path = path or AnnotationConfig.poi_file()
    if path is None:
        return default_annotations()

    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)

    annotations = parse_geojson_annotations(payload)
    logger.info(f"Loaded {len(annotations)} annotations from {path}")
    return annotations
