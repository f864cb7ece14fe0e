"""Selection coordinator - turns map selections into displayed scenes.

Consumes every SelectionEvent and LookupCompletion through one handle()
entry point, on the control thread, in queue order. Responsibilities:

1. Selection: allocate request_id = last + 1, supersede a still-pending
   predecessor, submit the async lookup, enter REQUESTING.
2. Deselection: clear SceneState immediately, supersede a pending request,
   enter IDLE.
3. Completion (success or failure): apply the acceptance rule. A completion
   is accepted only if it belongs to the most recently issued request, that
   request is still pending and the machine is REQUESTING. Everything else is
   stale and dropped without touching state.
4. Accepted failure: enter FAILED, keep any previously displayed scene,
   report to the failure reporter. Never retried.

The external lookup cannot be cancelled; the acceptance rule is what makes
late results harmless.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from panorama_map.core.events import (
    AnnotationDeselected,
    AnnotationSelected,
    MapEvent,
    SceneLookupFailed,
    SceneLookupSucceeded,
)
from panorama_map.core.scene_provider import SceneLookupError
from panorama_map.model.coordinate import Coordinate
from panorama_map.model.scene import RequestStatus, SceneRequest, SceneState
from panorama_map.ui.state_machine import LookupContext, SceneLookupMachine

logger = logging.getLogger(__name__)

FailureReporter = Callable[[SceneRequest, SceneLookupError], None]


class SceneRequester(Protocol):
    """Starts an async lookup whose completion is posted back as an event."""

    def submit(self, request_id: int, coordinate: Coordinate) -> Any: ...


class SelectionCoordinator:
    """Arbitrates between user selections and asynchronous scene lookups.

    Attributes:
        scene_state: Observable displayed scene (read by the panorama surface)
        machine: Lookup lifecycle state machine
        context: Machine model (request counter, current request, history)
    """

    def __init__(
        self,
        requester: SceneRequester,
        scene_state: SceneState | None = None,
        on_failure: FailureReporter | None = None,
        add_log_listener: bool = True,
    ) -> None:
        """Initialize coordinator.

        Args:
            requester: Issues lookups (LookupExecutor in the app, a fake in tests)
            scene_state: SceneState to drive (creates new if None)
            on_failure: Observability hook for accepted lookup failures
            add_log_listener: Log state transitions
        """
        self._requester = requester
        self._on_failure = on_failure
        self.machine, self.context = SceneLookupMachine.create(
            scene_state=scene_state,
            add_log_listener=add_log_listener,
        )
        self._handlers: dict[type, Callable[[Any], None]] = {
            AnnotationSelected: self._on_selected,
            AnnotationDeselected: self._on_deselected,
            SceneLookupSucceeded: self._on_lookup_succeeded,
            SceneLookupFailed: self._on_lookup_failed,
        }

    @property
    def scene_state(self) -> SceneState:
        return self.context.scene

    @property
    def current_request(self) -> SceneRequest | None:
        return self.context.current_request

    @property
    def is_requesting(self) -> bool:
        return self.machine.is_requesting

    def handles(self, event: MapEvent) -> bool:
        """True if handle() accepts this event type."""
        return type(event) in self._handlers

    def handle(self, event: MapEvent) -> None:
        """Process one event. Must be called on the control thread.

        Raises:
            TypeError: For event types the coordinator does not consume.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"SelectionCoordinator cannot handle {type(event).__name__}")
        handler(event)

    # =========================================================================
    # SELECTION EVENTS
    # =========================================================================

    def _on_selected(self, event: AnnotationSelected) -> None:
        self._supersede_pending(reason="new selection")
        request = SceneRequest(
            request_id=self.context.next_request_id(),
            coordinate=event.coordinate,
            annotation_id=event.annotation_id,
        )
        self.machine.select_annotation(request=request, annotation_id=event.annotation_id)
        logger.info(f"[SELECT] Request {request.request_id} for {event.annotation_id or event.coordinate!r}")
        self._requester.submit(request_id=request.request_id, coordinate=request.coordinate)

    def _on_deselected(self, event: AnnotationDeselected) -> None:
        self._supersede_pending(reason="deselection")
        self.machine.deselect_annotation()
        logger.info("[SELECT] Deselected - panorama cleared")

    def _supersede_pending(self, reason: str) -> None:
        request = self.context.current_request
        if request is not None and request.is_pending:
            request.finish(RequestStatus.SUPERSEDED)
            logger.debug(f"[SELECT] Request {request.request_id} superseded by {reason}")

    # =========================================================================
    # LOOKUP COMPLETIONS
    # =========================================================================

    def _accept(self, request_id: int) -> SceneRequest | None:
        """Acceptance rule: the completion must belong to the live request."""
        request = self.context.current_request
        if request is None or request.request_id != request_id:
            return None
        if not request.is_pending or not self.machine.is_requesting:
            return None
        return request

    def _on_lookup_succeeded(self, event: SceneLookupSucceeded) -> None:
        request = self._accept(event.request_id)
        if request is None:
            logger.debug(f"[LOOKUP] Dropping stale success for request {event.request_id}")
            return

        request.finish(RequestStatus.RESOLVED)
        self.machine.lookup_succeeded(scene=event.scene, request_id=request.request_id)

    def _on_lookup_failed(self, event: SceneLookupFailed) -> None:
        request = self._accept(event.request_id)
        if request is None:
            logger.debug(f"[LOOKUP] Dropping stale failure for request {event.request_id}: {event.error}")
            return

        request.finish(RequestStatus.FAILED)
        self.machine.lookup_failed()
        logger.warning(f"[LOOKUP] Request {request.request_id} for {request.coordinate!r} failed: {event.error}")
        if self._on_failure is not None:
            self._on_failure(request, event.error)
