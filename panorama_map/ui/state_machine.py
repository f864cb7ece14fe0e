"""State machine for the scene lookup lifecycle.

Uses python-statemachine for explicit lifecycle states with:
- Clear state definitions
- Entry hooks that keep SceneState consistent with the state
- Event-driven transitions carrying the request/scene as keyword arguments

States (4 states):
    IDLE: Nothing selected, panorama hidden
    REQUESTING: A lookup for the latest selection is in flight
    DISPLAYED: The latest selection's scene is shown
    FAILED: The latest selection's lookup failed (previous scene, if any, stays)

Transitions:
    ANY -> REQUESTING: select_annotation (new selection, including reselection)
    ANY -> IDLE: deselect_annotation (clears the panorama immediately)
    REQUESTING -> DISPLAYED: lookup_succeeded
    REQUESTING -> FAILED: lookup_failed

The machine does not decide which completions are stale. SelectionCoordinator
applies the acceptance rule first and only sends lookup_succeeded /
lookup_failed for the current request.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from statemachine import State, StateMachine

from panorama_map.constants import LookupConfig
from panorama_map.model.scene import SceneRequest, SceneState

if TYPE_CHECKING:
    from panorama_map.model.scene import Scene

logger = logging.getLogger(__name__)


@dataclass
class LookupContext:
    """Shared model for the lookup state machine.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model. It stores the current state value.

    Attributes:
        scene: Observable displayed-scene container (owned by the core)
        last_request_id: Id of the most recently issued request (0 = none yet)
        current_request: Most recently issued request, pending or finished
        selected_annotation_id: Map surface id of the latest selection
        history: Recent requests, oldest first (bounded)
    """

    state: str | None = None
    scene: SceneState = field(default_factory=SceneState)
    last_request_id: int = 0
    current_request: SceneRequest | None = None
    selected_annotation_id: str | None = None
    history: deque[SceneRequest] = field(default_factory=lambda: deque(maxlen=LookupConfig.REQUEST_HISTORY))

    def next_request_id(self) -> int:
        return self.last_request_id + 1

    def __repr__(self) -> str:
        current = self.current_request
        return (
            f"LookupContext(state={self.state}, "
            f"last_request_id={self.last_request_id}, "
            f"current={current.request_id if current else None}/{current.status.value if current else None}, "
            f"scene={self.scene.producing_request_id})"
        )


class TransitionLogListener:
    """Listener that logs every transition.

    Usage:
        sm = SceneLookupMachine(context=context)
        sm.add_listener(TransitionLogListener())
    """

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")


class SceneLookupMachine(StateMachine):
    """Lifecycle of the selection-driven scene lookup.

    See module docstring for the transition table.
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    idle = State("Idle", initial=True)
    requesting = State("Requesting")
    displayed = State("Displayed")
    failed = State("Failed")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    # New selection from any state (reselecting while requesting supersedes)
    select_annotation = (
        idle.to(requesting) | requesting.to(requesting) | displayed.to(requesting) | failed.to(requesting)
    )
    # Deselection from any state
    deselect_annotation = idle.to(idle) | requesting.to(idle) | displayed.to(idle) | failed.to(idle)
    # Completions for the current request
    lookup_succeeded = requesting.to(displayed)
    lookup_failed = requesting.to(failed)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_requesting(self) -> bool:
        return self.requesting.is_active

    @property
    def is_displayed(self) -> bool:
        return self.displayed.is_active

    @property
    def is_failed(self) -> bool:
        return self.failed.is_active

    # ==========================================================================
    # Entry Hooks
    # ==========================================================================

    def on_enter_idle(self) -> None:
        """Hook: Entering idle - the panorama hides immediately."""
        self.context.scene.clear()
        self.context.selected_annotation_id = None

    # NOTE: Entering FAILED deliberately leaves context.scene untouched

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_select_annotation(self, request: SceneRequest, annotation_id: str | None = None) -> None:
        """Record the new request as current."""
        self.context.last_request_id = request.request_id
        self.context.current_request = request
        self.context.selected_annotation_id = annotation_id
        self.context.history.append(request)

    def before_lookup_succeeded(self, scene: Scene, request_id: int) -> None:
        """Publish the scene produced by the current request."""
        request = self.context.current_request
        annotation_id = request.annotation_id if request is not None else None
        self.context.scene.display(scene=scene, request_id=request_id, annotation_id=annotation_id)

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: LookupContext | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
        """
        model = context or LookupContext()
        super().__init__(model=model)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> LookupContext:
        """Alias for model."""
        return self.model

    def get_state_name(self) -> str:
        """Get current state name for display."""
        return self.current_state.name

    def __repr__(self) -> str:
        return f"SceneLookupMachine(state={self.get_state_name()}, model={self.context!r})"

    @staticmethod
    def create(
        scene_state: SceneState | None = None,
        add_log_listener: bool = True,
    ) -> tuple["SceneLookupMachine", LookupContext]:
        """Factory method to create state machine with context and optional log listener.

        Args:
            scene_state: Existing SceneState to drive (creates new if None)
            add_log_listener: If True, adds TransitionLogListener.

        Returns:
            Tuple of (SceneLookupMachine, LookupContext)
        """
        context = LookupContext(scene=scene_state) if scene_state is not None else LookupContext()
        sm = SceneLookupMachine(context=context)
        if add_log_listener:
            sm.add_listener(TransitionLogListener())
        return sm, context
