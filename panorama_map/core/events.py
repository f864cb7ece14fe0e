"""Events and the serialized event queue.

Every input to the core is an event posted to one EventQueue and processed,
in posting order, on the control thread:

    Map surface    -> AnnotationSelected / AnnotationDeselected  (SelectionEvent)
    Sidebar        -> ConfigurationChanged
    LookupExecutor -> SceneLookupSucceeded / SceneLookupFailed   (LookupCompletion)

Worker threads never touch core state: they only call EventQueue.post().
"""

from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from panorama_map.model.coordinate import Coordinate
from panorama_map.model.map_settings import ElevationStyle, EmphasisStyle, MapStyle

if TYPE_CHECKING:
    from panorama_map.core.scene_provider import SceneLookupError
    from panorama_map.model.scene import Scene

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationSelected:
    """User selected an annotation on the map.

    Attributes:
        coordinate: Annotation position (the only field the coordinator uses)
        annotation_id: Map surface identifier, for highlight and status text
    """

    coordinate: Coordinate
    annotation_id: str | None = None


@dataclass(frozen=True)
class AnnotationDeselected:
    """User deselected the current annotation (empty-map click or close button)."""


SelectionEvent = Union[AnnotationSelected, AnnotationDeselected]


@dataclass(frozen=True)
class SceneLookupSucceeded:
    """Lookup for request_id resolved to a scene."""

    request_id: int
    scene: Scene


@dataclass(frozen=True)
class SceneLookupFailed:
    """Lookup for request_id failed."""

    request_id: int
    error: SceneLookupError


LookupCompletion = Union[SceneLookupSucceeded, SceneLookupFailed]


@dataclass(frozen=True)
class ConfigurationChanged:
    """User changed one or more map style selectors. None = unchanged."""

    map_style: MapStyle | None = None
    elevation_style: ElevationStyle | None = None
    emphasis_style: EmphasisStyle | None = None

    @property
    def is_empty(self) -> bool:
        return self.map_style is None and self.elevation_style is None and self.emphasis_style is None


MapEvent = Union[SelectionEvent, LookupCompletion, ConfigurationChanged]


class EventQueue:
    """Thread-safe FIFO of MapEvents, drained on the control thread.

    post() may be called from any thread. drain() must only be called from
    the control thread; it returns the events queued at call time in order.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[MapEvent] = queue.SimpleQueue()

    def post(self, event: MapEvent) -> None:
        """Enqueue an event (any thread)."""
        self._queue.put(event)

    def drain(self) -> list[MapEvent]:
        """Remove and return all currently queued events, oldest first."""
        events: list[MapEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        if events:
            logger.debug(f"[QUEUE] Drained {len(events)} event(s)")
        return events

    def __len__(self) -> int:
        return self._queue.qsize()

    def is_empty(self) -> bool:
        return self._queue.empty()
