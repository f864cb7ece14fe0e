"""Panorama panel - the panorama surface beside the map.

Observes SceneState and shows the current scene: image, capture caption,
and a link to the interactive viewer. Hidden when there is no scene.
The close button deselects the annotation, which clears the scene.
"""

import logging
from collections.abc import Callable

import streamlit as st

from panorama_map.constants import PanelConfig
from panorama_map.core.events import AnnotationDeselected, MapEvent
from panorama_map.model.scene import Scene, SceneState
from panorama_map.ui.infra import bump_map_version, trigger_rerun

logger = logging.getLogger(__name__)


class PanoramaPanel:
    """Renders the scene published in SceneState.

    Attributes:
        scene: Latest scene received from SceneState (None = hidden)
        request_id: Request that produced the scene
        annotation_id: Annotation the producing request was issued for
    """

    def __init__(self, scene_state: SceneState, post: Callable[[MapEvent], None]) -> None:
        """Initialize panel and subscribe to scene changes.

        Args:
            scene_state: Observable scene container owned by the session
            post: Enqueues events into the session
        """
        self._post = post
        self.scene: Scene | None = None
        self.request_id: int | None = None
        self.annotation_id: str | None = None
        self._unsubscribe = scene_state.subscribe(self._on_scene_changed)
        self._on_scene_changed(scene_state)

    def _on_scene_changed(self, state: SceneState) -> None:
        self.scene = state.current_scene
        self.request_id = state.producing_request_id
        self.annotation_id = state.annotation_id
        logger.debug(f"[PANEL] Scene now {self.scene!r} (request {self.request_id})")

    @property
    def is_visible(self) -> bool:
        return self.scene is not None

    @staticmethod
    def caption(scene: Scene, title: str | None = None) -> str:
        """One-line description of a scene."""
        parts = [title] if title else []
        if scene.captured_at is not None:
            parts.append(f"captured {scene.captured_at.strftime(PanelConfig.CAPTION_DATE_FORMAT)}")
        if scene.compass_angle is not None:
            parts.append(f"heading {scene.compass_angle:.0f}°")
        parts.append("360° panorama" if scene.is_panorama else "street-level photo")
        return " · ".join(parts)

    def render(self, title: str | None = None) -> None:
        """Render the panel (nothing when no scene is shown)."""
        scene = self.scene
        if scene is None:
            return

        st.markdown("### 👀 Look Around")
        if scene.image_url:
            st.image(scene.image_url, width=PanelConfig.PANORAMA_WIDTH)
        st.caption(self.caption(scene=scene, title=title))

        col_open, col_close = st.columns(2)
        with col_open:
            if scene.viewer_url:
                st.link_button("🌐 Open viewer", scene.viewer_url, width="stretch")
        with col_close:
            if st.button("✖️ Close panorama", width="stretch", key="close_panorama"):
                self.close_panorama()

    def close_panorama(self) -> None:
        """Deselect the annotation and reload the map."""
        logger.info(f"[PANEL] Closing panorama from request {self.request_id}")
        self._post(AnnotationDeselected())
        bump_map_version()
        trigger_rerun()

    def detach(self) -> None:
        """Stop observing SceneState."""
        self._unsubscribe()
