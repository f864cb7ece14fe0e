"""Core foundation classes for scene lookups and state observation.

- GeoCalculator: Geodesic helpers (distances, search boxes, nearest candidate)
- Observable: subscribe/unsubscribe mixin for state containers

Modules that depend on the data model are imported directly to avoid a
circular import with panorama_map.model:
    from panorama_map.core.events import EventQueue
    from panorama_map.core.scene_provider import MapillarySceneProvider
    from panorama_map.core.lookup_executor import LookupExecutor
"""

from panorama_map.core.geo_calculator import GeoCalculator
from panorama_map.core.observable import Observable

__all__ = [
    "GeoCalculator",
    "Observable",
]
