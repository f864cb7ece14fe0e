"""Tests for MapSession - event queue, configuration application and toasts.

Most tests use the fake requester (no threads). TestLookupExecutorIntegration
runs real lookups on the thread pool against StaticSceneProvider.
"""

from typing import TYPE_CHECKING

import pytest

from panorama_map.core.events import (
    AnnotationDeselected,
    AnnotationSelected,
    ConfigurationChanged,
    SceneLookupFailed,
)
from panorama_map.core.lookup_executor import create_lookup_pool
from panorama_map.core.scene_provider import NoSceneFoundError, SceneProviderUnavailableError
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.map_settings import ConfigurationState, ElevationStyle, EmphasisStyle, MapStyle
from panorama_map.model.message import LookupFailedMessage, NoPanoramaFoundMessage
from panorama_map.model.render_configuration import (
    FeatureEmphasis,
    HybridMapConfiguration,
    ImageryMapConfiguration,
    ReliefHint,
    StandardMapConfiguration,
)
from panorama_map.ui.panorama_panel import PanoramaPanel
from panorama_map.ui.session import MapSession

if TYPE_CHECKING:
    from conftest import FakeSceneRequester, RecordingMapSurface, StaticSceneProvider

COORD_A = Coordinate(latitude=35.70, longitude=139.58)
COORD_B = Coordinate(latitude=35.71, longitude=139.59)
COORD_NOWHERE = Coordinate(latitude=35.75, longitude=139.65)


# =============================================================================
# CONFIGURATION
# =============================================================================


class TestConfigurationFlow:
    """Style selections reach the map surface as render configurations."""

    def test_applied_once_at_startup(self, session: MapSession, map_surface: "RecordingMapSurface") -> None:
        assert map_surface.applied == [
            StandardMapConfiguration(relief=ReliefHint.RELIEF_3D, feature_emphasis=FeatureEmphasis.EMPHASIZED)
        ]
        assert session.render_configuration == map_surface.last

    def test_change_is_applied(self, session: MapSession, map_surface: "RecordingMapSurface") -> None:
        session.post(ConfigurationChanged(map_style=MapStyle.IMAGERY, elevation_style=ElevationStyle.FLAT))

        assert session.process_pending_events() == 1

        assert len(map_surface.applied) == 2
        assert map_surface.last == ImageryMapConfiguration(relief=ReliefHint.FLAT)

    def test_change_applied_on_processing_not_posting(
        self, session: MapSession, map_surface: "RecordingMapSurface"
    ) -> None:
        session.post(ConfigurationChanged(elevation_style=ElevationStyle.FLAT))
        assert len(map_surface.applied) == 1

        session.process_pending_events()

        assert len(map_surface.applied) == 2

    def test_noop_change_applies_nothing(self, session: MapSession, map_surface: "RecordingMapSurface") -> None:
        session.post(ConfigurationChanged(map_style=MapStyle.STANDARD))
        session.post(ConfigurationChanged())

        session.process_pending_events()

        assert len(map_surface.applied) == 1

    def test_emphasis_change_in_hybrid_reapplies_equal_value(
        self, session: MapSession, map_surface: "RecordingMapSurface"
    ) -> None:
        """The settings changed, so the surface is told; the value is equal and it may skip it."""
        session.post(ConfigurationChanged(map_style=MapStyle.HYBRID))
        session.post(ConfigurationChanged(emphasis_style=EmphasisStyle.MUTED))

        session.process_pending_events()

        assert len(map_surface.applied) == 3
        assert map_surface.applied[1] == map_surface.applied[2]

    def test_close_detaches_surface(self, session: MapSession, map_surface: "RecordingMapSurface") -> None:
        session.close()
        session.post(ConfigurationChanged(map_style=MapStyle.HYBRID))
        session.process_pending_events()
        assert len(map_surface.applied) == 1


# =============================================================================
# EVENT ORDERING
# =============================================================================


class TestEventQueueOrdering:
    """Events are processed in posting order on drain."""

    def test_nothing_happens_until_processed(self, session: MapSession, requester: "FakeSceneRequester") -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        assert requester.submissions == []
        assert not session.has_pending_lookup

    def test_fifo_order(self, session: MapSession, requester: "FakeSceneRequester", scene_factory) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(AnnotationSelected(coordinate=COORD_B))
        session.post(requester.succeed(2, scene_factory("b", COORD_B)))

        assert session.process_pending_events() == 3

        assert [s.coordinate for s in requester.submissions] == [COORD_A, COORD_B]
        assert session.scene_state.producing_request_id == 2
        assert not session.has_pending_lookup

    def test_deselect_then_completion_in_same_drain(
        self, session: MapSession, requester: "FakeSceneRequester", scene_factory
    ) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(AnnotationDeselected())
        session.post(requester.succeed(1, scene_factory("late")))

        session.process_pending_events()

        assert not session.scene_state.has_scene

    def test_subscribe_scene(self, session: MapSession, requester: "FakeSceneRequester", scene_factory) -> None:
        seen: list = []
        unsubscribe = session.subscribe_scene(lambda state: seen.append(state.current_scene))
        scene = scene_factory("a")

        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(requester.succeed(1, scene))
        session.process_pending_events()
        unsubscribe()
        session.post(AnnotationDeselected())
        session.process_pending_events()

        assert seen == [scene]


# =============================================================================
# FAILURE TOASTS
# =============================================================================


class TestFailureToasts:
    """Accepted failures become toasts; stale ones are silent."""

    def test_no_scene_found_toast(self, session: MapSession) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        error = NoSceneFoundError(coordinate=COORD_A, radius_m=60.0)
        session.post(SceneLookupFailed(request_id=1, error=error))

        session.process_pending_events()

        assert session.take_toasts() == [NoPanoramaFoundMessage(lat=35.70, lon=139.58, radius_m=60.0)]
        assert session.take_toasts() == []

    def test_provider_failure_toast(self, session: MapSession) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(SceneLookupFailed(request_id=1, error=SceneProviderUnavailableError("HTTP 503")))

        session.process_pending_events()

        (toast,) = session.take_toasts()
        assert isinstance(toast, LookupFailedMessage)
        assert "HTTP 503" in toast.message

    def test_stale_failure_has_no_toast(self, session: MapSession, requester: "FakeSceneRequester") -> None:
        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(AnnotationSelected(coordinate=COORD_B))
        session.post(requester.fail(1))

        session.process_pending_events()

        assert session.take_toasts() == []


# =============================================================================
# DISPLAYED SCENE IDENTITY
# =============================================================================


class TestDisplayedSceneIdentity:
    """The shown panorama keeps the annotation of the request that produced it."""

    def test_failed_newer_selection_keeps_previous_annotation(
        self, session: MapSession, requester: "FakeSceneRequester", scene_factory
    ) -> None:
        panel = PanoramaPanel(scene_state=session.scene_state, post=session.post)
        scene_a = scene_factory("scene-a", COORD_A)

        session.post(AnnotationSelected(coordinate=COORD_A, annotation_id="a"))
        session.post(requester.succeed(1, scene_a))
        session.post(AnnotationSelected(coordinate=COORD_B, annotation_id="b"))
        session.post(requester.fail(2))
        session.process_pending_events()

        assert session.coordinator.context.selected_annotation_id == "b"
        assert session.scene_state.current_scene is scene_a
        assert session.scene_state.annotation_id == "a"
        assert panel.scene is scene_a
        assert panel.annotation_id == "a"

    def test_pending_newer_selection_keeps_previous_annotation(
        self, session: MapSession, requester: "FakeSceneRequester", scene_factory
    ) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A, annotation_id="a"))
        session.post(requester.succeed(1, scene_factory("scene-a", COORD_A)))
        session.post(AnnotationSelected(coordinate=COORD_B, annotation_id="b"))
        session.process_pending_events()

        assert session.has_pending_lookup
        assert session.scene_state.annotation_id == "a"

    def test_accepted_newer_scene_takes_its_annotation(
        self, session: MapSession, requester: "FakeSceneRequester", scene_factory
    ) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A, annotation_id="a"))
        session.post(requester.succeed(1, scene_factory("scene-a", COORD_A)))
        session.post(AnnotationSelected(coordinate=COORD_B, annotation_id="b"))
        session.post(requester.succeed(2, scene_factory("scene-b", COORD_B)))
        session.process_pending_events()

        assert session.scene_state.annotation_id == "b"

    def test_deselect_clears_annotation(
        self, session: MapSession, requester: "FakeSceneRequester", scene_factory
    ) -> None:
        session.post(AnnotationSelected(coordinate=COORD_A, annotation_id="a"))
        session.post(requester.succeed(1, scene_factory("scene-a", COORD_A)))
        session.post(AnnotationDeselected())
        session.process_pending_events()

        assert session.scene_state.annotation_id is None


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    def test_requires_provider_or_requester(self, map_surface: "RecordingMapSurface") -> None:
        with pytest.raises(ValueError):
            MapSession(map_surface=map_surface)

    def test_starts_from_given_configuration(self, map_surface: "RecordingMapSurface", requester) -> None:
        configuration = ConfigurationState(map_style=MapStyle.IMAGERY, elevation_style=ElevationStyle.FLAT)

        MapSession(map_surface=map_surface, requester=requester, configuration=configuration)

        assert map_surface.applied == [ImageryMapConfiguration(relief=ReliefHint.FLAT)]

    def test_replacement_session_keeps_map_style(
        self, session: MapSession, map_surface: "RecordingMapSurface", requester
    ) -> None:
        """A session rebuilt after an error continues with the previous selection."""
        session.post(ConfigurationChanged(map_style=MapStyle.HYBRID))
        session.process_pending_events()
        session.close()

        replacement = MapSession(map_surface=map_surface, requester=requester, configuration=session.configuration)
        replacement.post(ConfigurationChanged(elevation_style=ElevationStyle.FLAT))
        replacement.process_pending_events()

        assert map_surface.applied[-2:] == [
            HybridMapConfiguration(relief=ReliefHint.RELIEF_3D),
            HybridMapConfiguration(relief=ReliefHint.FLAT),
        ]
        assert session.configuration.listener_count == 1

    def test_close_leaves_shared_pool_running(
        self, map_surface: "RecordingMapSurface", static_provider: "StaticSceneProvider"
    ) -> None:
        pool = create_lookup_pool(max_workers=1)
        ended = MapSession(map_surface=map_surface, provider=static_provider, pool=pool)
        ended.close(wait=True)

        active = MapSession(map_surface=map_surface, provider=static_provider, pool=pool)
        active.post(AnnotationSelected(coordinate=COORD_A))
        active.process_pending_events()
        pool.shutdown(wait=True)
        active.process_pending_events()

        assert active.scene_state.current_scene is static_provider.scenes[COORD_A]


# =============================================================================
# REAL LOOKUP EXECUTOR
# =============================================================================


class TestLookupExecutorIntegration:
    """Completions from worker threads flow back through the queue."""

    def test_lookup_resolves_to_scene(
        self, map_surface: "RecordingMapSurface", static_provider: "StaticSceneProvider"
    ) -> None:
        session = MapSession(map_surface=map_surface, provider=static_provider)
        session.post(AnnotationSelected(coordinate=COORD_A, annotation_id="a"))
        session.process_pending_events()
        assert session.has_pending_lookup

        session.close(wait=True)
        session.process_pending_events()

        assert session.scene_state.current_scene is static_provider.scenes[COORD_A]
        assert not session.has_pending_lookup
        assert static_provider.calls == [COORD_A]

    def test_missing_imagery_becomes_toast(
        self, map_surface: "RecordingMapSurface", static_provider: "StaticSceneProvider"
    ) -> None:
        session = MapSession(map_surface=map_surface, provider=static_provider)
        session.post(AnnotationSelected(coordinate=COORD_NOWHERE))
        session.process_pending_events()

        session.close(wait=True)
        session.process_pending_events()

        assert not session.scene_state.has_scene
        assert session.take_toasts() == [
            NoPanoramaFoundMessage(lat=COORD_NOWHERE.latitude, lon=COORD_NOWHERE.longitude, radius_m=60.0)
        ]

    def test_superseded_lookup_never_displays(
        self, map_surface: "RecordingMapSurface", static_provider: "StaticSceneProvider"
    ) -> None:
        session = MapSession(map_surface=map_surface, provider=static_provider)
        session.post(AnnotationSelected(coordinate=COORD_A))
        session.post(AnnotationSelected(coordinate=COORD_B))
        session.process_pending_events()

        session.close(wait=True)
        session.process_pending_events()

        assert session.scene_state.current_scene is static_provider.scenes[COORD_B]
        assert session.scene_state.producing_request_id == 2
