"""Click detector - turns Pydeck click events into selection events.

This is the inbound side of the map surface contract. A click on an
annotation marker selects it; a click on empty map deselects the current
annotation. The map surface behaves like a single-selection list, so
clicking the already-selected annotation or clicking empty map with nothing
selected produces no event.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from panorama_map.constants import ClickConfig
from panorama_map.core.events import AnnotationDeselected, AnnotationSelected, SelectionEvent
from panorama_map.model.annotation import Annotation
from panorama_map.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


@dataclass
class ClickDetector:
    """Detects selection changes from Pydeck picked objects.

    Attributes:
        annotations: Annotations currently on the map
    """

    annotations: list[Annotation]
    _by_id: dict[str, Annotation] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_id = {annotation.id: annotation for annotation in self.annotations}

    def detect(
        self,
        clicked_object: dict[str, Any] | None,
        clicked_coordinate: list[float] | None,
        selected_annotation_id: str | None,
    ) -> SelectionEvent | None:
        """Detect a selection change from Pydeck event data.

        Args:
            clicked_object: The picked deck.gl object data (dict) or None
            clicked_coordinate: [lon, lat] of click location or None
            selected_annotation_id: Annotation currently selected on the map

        Returns:
            AnnotationSelected, AnnotationDeselected, or None if the selection did not change.
        """
        if clicked_object is not None:
            return self._parse_object_click(obj=clicked_object, selected_annotation_id=selected_annotation_id)

        if clicked_coordinate is not None:
            if selected_annotation_id is None:
                logger.debug("Empty map click with nothing selected")
                return None
            logger.debug(f"Empty map click at {clicked_coordinate} deselects {selected_annotation_id}")
            return AnnotationDeselected()

        return None

    def _parse_object_click(self, obj: dict[str, Any], selected_annotation_id: str | None) -> SelectionEvent | None:
        obj_type = obj.get("type")
        if obj_type != ClickConfig.TYPE_ANNOTATION:
            logger.warning(f"Click on unknown object type {obj_type!r}: {obj}")
            return None

        annotation_id = obj.get("id")
        if annotation_id is not None and annotation_id == selected_annotation_id:
            logger.debug(f"Annotation {annotation_id} is already selected")
            return None

        annotation = self._by_id.get(annotation_id) if annotation_id is not None else None
        if annotation is not None:
            return AnnotationSelected(coordinate=annotation.coordinate, annotation_id=annotation.id)

        # Fall back to the record's own position
        lat, lon = obj.get("lat"), obj.get("lon")
        if lat is None or lon is None:
            logger.warning(f"Annotation click without position: {obj}")
            return None
        return AnnotationSelected(
            coordinate=Coordinate(latitude=float(lat), longitude=float(lon)),
            annotation_id=annotation_id,
        )
