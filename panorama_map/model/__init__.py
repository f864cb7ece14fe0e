"""Data model classes for the panorama map.

- Coordinate: Location atom (latitude, longitude)
- Annotation: Selectable point of interest
- Scene / SceneRequest / SceneState: Resolved panoramas and lookup bookkeeping
- ConfigurationState: User-selected map style enums
- RenderConfiguration / resolve: Map surface configuration derived from settings
- Message / ToastMessage: User-facing messages
"""

from panorama_map.model.annotation import Annotation, default_annotations, load_annotations
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.map_settings import (
    ConfigurationState,
    ElevationStyle,
    EmphasisStyle,
    MapStyle,
)
from panorama_map.model.render_configuration import (
    FeatureEmphasis,
    HybridMapConfiguration,
    ImageryMapConfiguration,
    ReliefHint,
    RenderConfiguration,
    StandardMapConfiguration,
    resolve,
)
from panorama_map.model.scene import RequestStatus, Scene, SceneRequest, SceneState

__all__ = [
    "Annotation",
    "Coordinate",
    "ConfigurationState",
    "ElevationStyle",
    "EmphasisStyle",
    "FeatureEmphasis",
    "HybridMapConfiguration",
    "ImageryMapConfiguration",
    "MapStyle",
    "ReliefHint",
    "RenderConfiguration",
    "RequestStatus",
    "Scene",
    "SceneRequest",
    "SceneState",
    "StandardMapConfiguration",
    "default_annotations",
    "load_annotations",
    "resolve",
]
