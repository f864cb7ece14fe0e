"""Map session - wires the core to the map and panorama surfaces.

One MapSession lives in st.session_state per browser session. It owns:
- the EventQueue (the single serialization point)
- ConfigurationState (+ subscription that re-resolves and applies the
  render configuration on every change, and once at startup)
- SelectionCoordinator and its SceneState
- the LookupExecutor posting lookup completions back into the queue

Streamlit widgets and the map adapter only call post(); each render cycle
calls process_pending_events() before drawing.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from panorama_map.core.events import ConfigurationChanged, EventQueue, MapEvent
from panorama_map.core.lookup_executor import LookupExecutor
from panorama_map.core.scene_provider import NoSceneFoundError, SceneLookupError, SceneProvider
from panorama_map.model.map_settings import ConfigurationState
from panorama_map.model.message import LookupFailedMessage, NoPanoramaFoundMessage, ToastMessage
from panorama_map.model.render_configuration import RenderConfiguration, resolve
from panorama_map.model.scene import SceneRequest, SceneState
from panorama_map.ui.coordinator import SceneRequester, SelectionCoordinator

logger = logging.getLogger(__name__)


class MapSurface(Protocol):
    """Outbound side of the map surface contract."""

    def apply_render_configuration(self, configuration: RenderConfiguration) -> None: ...


class MapSession:
    """Composition root for one user session."""

    def __init__(
        self,
        map_surface: MapSurface,
        provider: SceneProvider | None = None,
        requester: SceneRequester | None = None,
        pool: ThreadPoolExecutor | None = None,
        configuration: ConfigurationState | None = None,
    ) -> None:
        """Initialize session.

        Args:
            map_surface: Receives render configurations (MapRenderer in the app)
            provider: Scene provider, run on a LookupExecutor (ignored if requester given)
            requester: Explicit lookup requester (tests pass a fake)
            pool: Shared lookup pool (the session creates its own if None)
            configuration: Map settings to start from (defaults if None)

        Raises:
            ValueError: If neither provider nor requester is given.
        """
        self.events = EventQueue()
        self._executor: LookupExecutor | None = None
        if requester is None:
            if provider is None:
                raise ValueError("MapSession needs a scene provider or a requester")
            self._executor = LookupExecutor(provider=provider, post=self.events.post, pool=pool)
            requester = self._executor

        self.map_surface = map_surface
        self.configuration = configuration if configuration is not None else ConfigurationState()
        self.scene_state = SceneState()
        self.coordinator = SelectionCoordinator(
            requester=requester,
            scene_state=self.scene_state,
            on_failure=self._report_failure,
        )
        self.pending_toasts: list[ToastMessage] = []

        self._unsubscribe_configuration = self.configuration.subscribe(self._apply_configuration)
        # Startup application
        self._apply_configuration(self.configuration)

    # =========================================================================
    # EVENT FLOW
    # =========================================================================

    def post(self, event: MapEvent) -> None:
        """Enqueue an event. Safe from any thread."""
        self.events.post(event)

    def process_pending_events(self) -> int:
        """Drain the queue and dispatch each event in order. Control thread only.

        Returns:
            Number of events processed.
        """
        events = self.events.drain()
        for event in events:
            self._dispatch(event)
        return len(events)

    def _dispatch(self, event: MapEvent) -> None:
        if isinstance(event, ConfigurationChanged):
            if not event.is_empty:
                self.configuration.update(
                    map_style=event.map_style,
                    elevation_style=event.elevation_style,
                    emphasis_style=event.emphasis_style,
                )
            return
        self.coordinator.handle(event)

    # =========================================================================
    # SURFACE INTEGRATION
    # =========================================================================

    @property
    def render_configuration(self) -> RenderConfiguration:
        return resolve(self.configuration)

    @property
    def has_pending_lookup(self) -> bool:
        return self.coordinator.is_requesting

    def subscribe_scene(self, listener: Callable[[SceneState], None]) -> Callable[[], None]:
        """Subscribe a panorama surface to SceneState changes."""
        return self.scene_state.subscribe(listener)

    def take_toasts(self) -> list[ToastMessage]:
        """Pop toasts queued by failure reports since the last call."""
        toasts, self.pending_toasts = self.pending_toasts, []
        return toasts

    def _apply_configuration(self, state: ConfigurationState) -> None:
        configuration = resolve(state)
        logger.info(f"[CONFIG] Applying {configuration}")
        self.map_surface.apply_render_configuration(configuration)

    def _report_failure(self, request: SceneRequest, error: SceneLookupError) -> None:
        if isinstance(error, NoSceneFoundError):
            toast: ToastMessage = NoPanoramaFoundMessage(
                lat=request.coordinate.latitude,
                lon=request.coordinate.longitude,
                radius_m=error.radius_m,
            )
        else:
            toast = LookupFailedMessage(reason=str(error))
        self.pending_toasts.append(toast)

    def close(self, wait: bool = False) -> None:
        """Detach from the map surface and stop the lookup pool.

        Args:
            wait: Block until in-flight lookups have posted their completion
        """
        self._unsubscribe_configuration()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
