"""Scene data - resolved panoramas, lookup requests and the displayed scene.

- Scene: opaque handle for a resolved panorama (identity equality)
- RequestStatus / SceneRequest: one lookup issued by the selection coordinator
- SceneState: observable container for the currently displayed scene

SceneState invariant: current_scene is set only together with the id of the
request that produced it, and only the selection coordinator mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from panorama_map.core.observable import Observable
from panorama_map.model.coordinate import Coordinate


@dataclass(eq=False)
class Scene:
    """A resolved street-level panorama.

    Produced by the scene provider and passed through the core unchanged.
    Equality is by identity: two lookups of the same image are two scenes.

    Attributes:
        image_id: Provider image identifier
        image_url: URL of a rendered image of the panorama
        position: Where the panorama was captured (may differ from the annotation)
        compass_angle: Camera heading in degrees clockwise from North, if known
        captured_at: Capture time, if known
        is_panorama: True for 360° imagery, False for a regular photo
        viewer_url: Link to the provider's interactive viewer
    """

    image_id: str
    image_url: str
    position: Coordinate
    compass_angle: float | None = None
    captured_at: datetime | None = None
    is_panorama: bool = True
    viewer_url: str | None = None

    def __repr__(self) -> str:
        return f"Scene(image_id={self.image_id!r}, position={self.position!r})"


class RequestStatus(Enum):
    """Lifecycle of a SceneRequest. Everything except PENDING is terminal."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
    SUPERSEDED = "superseded"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


@dataclass
class SceneRequest:
    """One scene lookup issued for a selection.

    Attributes:
        request_id: Monotonically increasing id (1, 2, 3, ...)
        coordinate: Coordinate the scene is looked up for
        annotation_id: Map surface id of the selection that issued the request
        status: Current lifecycle status
    """

    request_id: int
    coordinate: Coordinate
    annotation_id: str | None = None
    status: RequestStatus = RequestStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    def finish(self, status: RequestStatus) -> None:
        """Move to a terminal status. Terminal requests never change again.

        Raises:
            ValueError: If status is PENDING or the request already finished.
        """
        if not status.is_terminal:
            raise ValueError("finish() requires a terminal status")
        if not self.is_pending:
            raise ValueError(f"Request {self.request_id} already {self.status.value}, cannot become {status.value}")
        self.status = status


@dataclass(eq=False)
class SceneState(Observable):
    """Observable holder of the currently displayed scene.

    Listeners are notified after every change of (current_scene,
    producing_request_id). Clearing an already-empty state is not a change.
    annotation_id is the selection the producing request was issued for, so
    the displayed scene keeps its own title while a newer lookup is pending
    or has failed.
    """

    current_scene: Scene | None = None
    producing_request_id: int | None = None
    annotation_id: str | None = None
    _listeners: list = field(default_factory=list, init=False, repr=False)

    def display(self, scene: Scene, request_id: int, annotation_id: str | None = None) -> None:
        """Show a scene produced by the given request."""
        if self.current_scene is scene and self.producing_request_id == request_id:
            return
        self.current_scene = scene
        self.producing_request_id = request_id
        self.annotation_id = annotation_id
        self._notify()

    def clear(self) -> None:
        """Hide the panorama."""
        if self.current_scene is None and self.producing_request_id is None:
            return
        self.current_scene = None
        self.producing_request_id = None
        self.annotation_id = None
        self._notify()

    @property
    def has_scene(self) -> bool:
        return self.current_scene is not None
