"""Infrastructure utilities for Streamlit UI operations.

Wraps Streamlit-specific infrastructure (st.rerun, st.session_state) so tests
can patch these functions instead of every place a rerun happens.

Only infrastructure belongs here (rerun, map version, polling).
"""

import logging
import time

import streamlit as st

logger = logging.getLogger(__name__)


def trigger_rerun(scope: str = "app") -> None:
    """Trigger Streamlit rerun with optional scope.

    In tests, patch 'panorama_map.ui.infra.trigger_rerun' to prevent actual
    reruns (which raise StopExecution).

    Args:
        scope: Rerun scope - "app" for full rerun, "fragment" for partial.
    """
    st.rerun(scope=scope)


def bump_map_version() -> None:
    """Increment map_version to create fresh Pydeck component.

    A new component instance has no memory of previous click events, which
    eliminates ghost clicks after the selection is changed outside the map.
    """
    old_version = st.session_state.get("map_version", 0)
    new_version = old_version + 1
    st.session_state.map_version = new_version
    logger.info(f"[MAP] Bumped map_version: {old_version} -> {new_version}")


def schedule_poll(interval_s: float) -> None:
    """Rerun after interval_s so pending lookup completions get processed.

    Lookup results arrive on worker threads and sit in the event queue until
    the next script run drains it. Never returns.
    """
    time.sleep(interval_s)
    logger.debug(f"[POLL] Rerun after {interval_s:.2f}s")
    trigger_rerun()
