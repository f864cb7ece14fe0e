"""Map click capture for the annotation map.

st.pydeck_chart only reports picked objects, so a click on empty map (which
deselects the current annotation) would be lost. The streamlit-deckgl
component forwards every deck.gl click, with the [lon, lat] under the
cursor and, for marker picks, the annotation's layer record merged in.

The component keeps returning its most recent click on every rerun; the
last seen click id per map key is stored in st.session_state so each click
is handed to the ClickDetector once.
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
import streamlit as st
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from panorama_map.constants import MapConfig

logger = logging.getLogger(__name__)

_COMPONENT_KEYS = ("coordinate", "eventType")


@dataclass
class PydeckClickResult:
    """One map click, split into the picked annotation record and the map position.

    Attributes:
        clicked_object: Annotation layer record, None when the click hit no marker
        clicked_coordinate: [lon, lat] under the cursor
    """

    clicked_object: dict[str, Any] | None
    clicked_coordinate: list[float] | None

    @property
    def is_object_click(self) -> bool:
        return self.clicked_object is not None

    @property
    def is_empty_map_click(self) -> bool:
        """Click landed on the basemap, away from every marker."""
        return self.clicked_object is None and self.clicked_coordinate is not None

    @staticmethod
    def empty() -> "PydeckClickResult":
        return PydeckClickResult(clicked_object=None, clicked_coordinate=None)


def parse_click_event(event: Any) -> PydeckClickResult:
    """Split a raw streamlit-deckgl event into marker record and position.

    Marker picks arrive flattened, e.g.
        {type: "annotation", id: "sun-road", title: ..., lat: ..., lon: ..., coordinate: [lon, lat], eventType: "click"}
    while a basemap click only has coordinate and eventType.
    """
    if not event or not isinstance(event, dict):
        return PydeckClickResult.empty()

    position = event.get("coordinate")
    clicked_coordinate = None
    if isinstance(position, (list, tuple)) and len(position) >= 2:
        clicked_coordinate = [float(position[0]), float(position[1])]

    # Annotation records set "type"; the component itself only ever reports "click"
    marker_type = event.get("type")
    clicked_object = None
    if marker_type and marker_type != "click":
        clicked_object = {k: v for k, v in event.items() if k not in _COMPONENT_KEYS}
        logger.debug(f"[CLICK] Marker pick: type={marker_type}, id={event.get('id')}")

    return PydeckClickResult(clicked_object=clicked_object, clicked_coordinate=clicked_coordinate)


def render_pydeck_map(
    deck: pdk.Deck,
    key: str,
    height: int = MapConfig.MAP_HEIGHT,
) -> PydeckClickResult:
    """Draw the deck and return the click made since the previous rerun.

    Args:
        deck: Deck built by MapRenderer
        key: Component key (changes force a remount)
        height: Map height in pixels

    Returns:
        The new click, or PydeckClickResult.empty() when nothing new was clicked.
    """
    seen_key = f"_deckgl_last_click_{key}"
    st.session_state.setdefault(seen_key, None)

    event = st_deckgl(deck, key=key, height=height, events=["click"])
    result = parse_click_event(event)
    if result == PydeckClickResult.empty():
        return result

    click_id = get_click_id(obj=result.clicked_object, coord=result.clicked_coordinate)
    if click_id == st.session_state[seen_key]:
        return PydeckClickResult.empty()

    st.session_state[seen_key] = click_id
    logger.debug(f"[CLICK] New click on {key}: marker={result.is_object_click}, at={result.clicked_coordinate}")
    return result


def get_click_id(obj: dict[str, Any] | None, coord: list[float] | None) -> str:
    """Identity of a click: the picked marker plus the position rounded to ~1 m."""
    parts = []
    if obj:
        if obj.get("type") and obj.get("id"):
            parts.append(f"{obj['type']}_{obj['id']}")
        elif obj.get("position"):
            lon, lat = obj["position"][:2]
            parts.append(f"pos_{lon:.6f}_{lat:.6f}")
    if coord:
        parts.append(f"coord_{coord[0]:.5f}_{coord[1]:.5f}")
    return "_".join(parts)
