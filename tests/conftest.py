"""Shared pytest fixtures for panorama_map tests.

Provides fakes for the three collaborators of the core and reusable test data.
All fixtures use explicit values with documented rationale.

FAKES:
    FakeSceneRequester: records submissions instead of running lookups, so a
        test decides when (and in which order) each completion is delivered.
    StaticSceneProvider: synchronous SceneProvider returning scenes from a
        coordinate -> Scene table (raises NoSceneFoundError otherwise).
    RecordingMapSurface: records every applied RenderConfiguration.

COORDINATES:
    Tests use points around Kichijoji (the app's start center) so log output
    and scene positions look like real lookups.
"""

from dataclasses import dataclass, field

import pytest

from panorama_map.core.events import SceneLookupFailed, SceneLookupSucceeded
from panorama_map.core.scene_provider import NoSceneFoundError, SceneLookupError
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.render_configuration import RenderConfiguration
from panorama_map.model.scene import Scene
from panorama_map.ui.coordinator import SelectionCoordinator
from panorama_map.ui.session import MapSession

# Two nearby points of interest (~1.4 km apart)
COORD_A = Coordinate(latitude=35.70, longitude=139.58)
COORD_B = Coordinate(latitude=35.71, longitude=139.59)
COORD_C = Coordinate(latitude=35.72, longitude=139.60)


def make_scene(image_id: str, position: Coordinate = COORD_A) -> Scene:
    """Scene with a recognizable image id."""
    return Scene(
        image_id=image_id,
        image_url=f"https://images.example.test/{image_id}.jpg",
        position=position,
        compass_angle=90.0,
        viewer_url=f"https://viewer.example.test/?pKey={image_id}",
    )


# =============================================================================
# FAKES
# =============================================================================


@dataclass
class Submission:
    """One lookup handed to FakeSceneRequester."""

    request_id: int
    coordinate: Coordinate


@dataclass
class FakeSceneRequester:
    """SceneRequester that only records submissions.

    Completions are produced explicitly via succeed()/fail(), which return the
    event the real LookupExecutor would have posted.
    """

    submissions: list[Submission] = field(default_factory=list)

    def submit(self, request_id: int, coordinate: Coordinate) -> None:
        self.submissions.append(Submission(request_id=request_id, coordinate=coordinate))

    @property
    def request_ids(self) -> list[int]:
        return [s.request_id for s in self.submissions]

    def last(self) -> Submission:
        return self.submissions[-1]

    @staticmethod
    def succeed(request_id: int, scene: Scene) -> SceneLookupSucceeded:
        return SceneLookupSucceeded(request_id=request_id, scene=scene)

    @staticmethod
    def fail(request_id: int, message: str = "provider unavailable") -> SceneLookupFailed:
        return SceneLookupFailed(request_id=request_id, error=SceneLookupError(message))


class StaticSceneProvider:
    """Synchronous provider answering from a fixed table."""

    def __init__(self, scenes: dict[Coordinate, Scene] | None = None, radius_m: float = 60.0) -> None:
        self.scenes = scenes or {}
        self.radius_m = radius_m
        self.calls: list[Coordinate] = []

    def request_scene(self, coordinate: Coordinate) -> Scene:
        self.calls.append(coordinate)
        scene = self.scenes.get(coordinate)
        if scene is None:
            raise NoSceneFoundError(coordinate=coordinate, radius_m=self.radius_m)
        return scene


class RecordingMapSurface:
    """Map surface that records applied render configurations."""

    def __init__(self) -> None:
        self.applied: list[RenderConfiguration] = []

    def apply_render_configuration(self, configuration: RenderConfiguration) -> None:
        self.applied.append(configuration)

    @property
    def last(self) -> RenderConfiguration:
        return self.applied[-1]


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def requester() -> FakeSceneRequester:
    """Fresh FakeSceneRequester with no submissions."""
    return FakeSceneRequester()


@pytest.fixture
def failures() -> list[tuple[int, SceneLookupError]]:
    """Collects (request_id, error) pairs reported by the coordinator."""
    return []


@pytest.fixture
def coordinator(requester: FakeSceneRequester, failures: list) -> SelectionCoordinator:
    """SelectionCoordinator driven by the fake requester, failures collected."""
    return SelectionCoordinator(
        requester=requester,
        on_failure=lambda request, error: failures.append((request.request_id, error)),
        add_log_listener=False,
    )


@pytest.fixture
def map_surface() -> RecordingMapSurface:
    """Fresh RecordingMapSurface."""
    return RecordingMapSurface()


@pytest.fixture
def session(map_surface: RecordingMapSurface, requester: FakeSceneRequester) -> MapSession:
    """MapSession with recording surface and fake requester (no threads)."""
    return MapSession(map_surface=map_surface, requester=requester)


@pytest.fixture
def scene_factory():
    """make_scene(image_id, position) for building recognizable scenes."""
    return make_scene


@pytest.fixture
def static_provider() -> StaticSceneProvider:
    """Provider with imagery at COORD_A ("scene-a") and COORD_B ("scene-b") only."""
    return StaticSceneProvider(
        scenes={
            COORD_A: make_scene("scene-a", COORD_A),
            COORD_B: make_scene("scene-b", COORD_B),
        }
    )
