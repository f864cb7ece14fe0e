"""Panorama Map - Interactive Look Around application.

Browse points of interest on a configurable map, select one and look
around at street level. Lookups run in the background; only the result for
the latest selection is ever shown.

Run: streamlit run panorama_map/app.py
"""

import logging
import traceback
from concurrent.futures import ThreadPoolExecutor

import streamlit as st

from panorama_map.constants import AppConfig, LookupConfig, MapConfig
from panorama_map.core.lookup_executor import create_lookup_pool
from panorama_map.core.scene_provider import MapillarySceneProvider
from panorama_map.model.annotation import Annotation, load_annotations
from panorama_map.model.map_settings import ConfigurationState
from panorama_map.model.message import (
    LookingAroundMessage,
    Message,
    MissingAccessTokenMessage,
    SelectAnnotationHintMessage,
)
from panorama_map.ui import (
    ClickDetector,
    MapRenderer,
    MapSession,
    PanoramaPanel,
    SidebarRenderer,
    schedule_poll,
    trigger_rerun,
)
from panorama_map.ui.pydeck_click_handler import render_pydeck_map

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize session state with annotations, provider and the map session."""
    if "map_version" not in st.session_state:
        st.session_state.map_version = 0

    if "annotations" not in st.session_state:
        st.session_state.annotations = load_annotations()

    if "map_renderer" not in st.session_state:
        st.session_state.map_renderer = MapRenderer(
            center_lat=MapConfig.START_CENTER_LAT,
            center_lon=MapConfig.START_CENTER_LON,
            zoom=MapConfig.DEFAULT_ZOOM,
            bearing=MapConfig.DEFAULT_BEARING,
        )

    if "scene_provider" not in st.session_state:
        st.session_state.scene_provider = MapillarySceneProvider(access_token=LookupConfig.access_token())

    if "map_session" not in st.session_state:
        _create_map_session()


@st.cache_resource
def _lookup_pool() -> ThreadPoolExecutor:
    """One lookup pool for the whole server process, shared by all browser sessions."""
    logger.info(f"[LOOKUP] Starting shared pool with {LookupConfig.MAX_WORKERS} workers")
    return create_lookup_pool(max_workers=LookupConfig.MAX_WORKERS)


def _create_map_session(configuration: ConfigurationState | None = None) -> None:
    session = MapSession(
        map_surface=st.session_state.map_renderer,
        provider=st.session_state.scene_provider,
        pool=_lookup_pool(),
        configuration=configuration,
    )
    st.session_state.map_session = session
    st.session_state.panorama_panel = PanoramaPanel(scene_state=session.scene_state, post=session.post)


def reset_ui_state() -> None:
    """Reset lookup state to initial while preserving annotations and the map view.

    Called when an error occurs to recover gracefully. Resets:
    - Map session (event queue, coordinator, state machine, scene)
    - Panorama panel subscription
    - Map version (to clear any stale map state)

    The map style selection carries over into the new session.
    """
    logger.info("Resetting UI state due to error recovery")

    old_session: MapSession | None = st.session_state.get("map_session")
    old_panel: PanoramaPanel | None = st.session_state.get("panorama_panel")
    if old_panel is not None:
        old_panel.detach()
    if old_session is not None:
        old_session.close()

    _create_map_session(configuration=old_session.configuration if old_session is not None else None)
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1

    logger.info("UI state reset complete - annotations preserved")


# =============================================================================
# STATUS
# =============================================================================


def _find_annotation(annotations: list[Annotation], annotation_id: str | None) -> Annotation | None:
    if annotation_id is None:
        return None
    return next((annotation for annotation in annotations if annotation.id == annotation_id), None)


def _status_message(session: MapSession, selected: Annotation | None) -> Message:
    provider: MapillarySceneProvider = st.session_state.scene_provider
    if not provider.is_configured:
        return MissingAccessTokenMessage(env_var=LookupConfig.TOKEN_ENV_VAR)
    if session.has_pending_lookup:
        return LookingAroundMessage(title=selected.title if selected else "the selected point")
    return SelectAnnotationHintMessage()


# =============================================================================
# MAP RENDERING
# =============================================================================


def _render_map(session: MapSession, selected_annotation_id: str | None) -> None:
    """Render map and post selection events for clicks."""
    renderer: MapRenderer = st.session_state.map_renderer
    annotations: list[Annotation] = st.session_state.annotations

    deck = renderer.render(annotations=annotations, selected_annotation_id=selected_annotation_id)

    # Revision changes with every applied render configuration, forcing a
    # remount so deck.gl picks up the new basemap and pitch
    map_key = f"main_map_{st.session_state.map_version}_{renderer.revision}"
    logger.debug(f"[RENDER] Map key={map_key}, annotations={len(annotations)}, selected={selected_annotation_id}")
    click_result = render_pydeck_map(deck=deck, key=map_key, height=MapConfig.MAP_HEIGHT)

    detector = ClickDetector(annotations=annotations)
    event = detector.detect(
        clicked_object=click_result.clicked_object,
        clicked_coordinate=click_result.clicked_coordinate,
        selected_annotation_id=selected_annotation_id,
    )
    if event is not None:
        logger.info(f"[CLICK] {event}")
        session.post(event)
        trigger_rerun()


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    session: MapSession = st.session_state.map_session
    panel: PanoramaPanel = st.session_state.panorama_panel
    annotations: list[Annotation] = st.session_state.annotations

    processed = session.process_pending_events()
    logger.info(
        f"[MAIN] Render cycle: state={session.coordinator.machine.get_state_name()}, "
        f"events={processed}, map_version={st.session_state.map_version}"
    )

    for toast in session.take_toasts():
        toast.display()

    selected_id = session.coordinator.context.selected_annotation_id
    selected = _find_annotation(annotations, selected_id)

    # Sidebar: a style change is applied before the map is drawn this cycle
    sidebar = SidebarRenderer(configuration=session.configuration, status=_status_message(session, selected))
    change = sidebar.render()
    if change is not None:
        session.post(change)
        session.process_pending_events()

    col_map, col_panel = st.columns([3, 2])

    with col_map:
        _render_map(session=session, selected_annotation_id=selected_id)

    # The panorama may belong to an earlier selection than the highlighted one
    shown = _find_annotation(annotations, panel.annotation_id)
    with col_panel:
        panel.render(title=shown.title if shown else None)

    # Completions arrive on worker threads; keep rerunning until one is accepted
    if session.has_pending_lookup:
        schedule_poll(LookupConfig.POLL_INTERVAL_S)


if __name__ == "__main__":
    main()
