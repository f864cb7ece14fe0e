"""Sidebar UI renderer for the panorama map.

Renders the left sidebar with:
- Lookup status (hint, looking-around, or missing token warning)
- Map style selector (Standard / Hybrid / Imagery)
- Elevation selector (Realistic / Flat)
- Emphasis selector (Default / Muted, standard map style only)

The sidebar never mutates ConfigurationState. A changed selection is
returned as a ConfigurationChanged event for the session to process.
"""

import logging
from enum import Enum
from typing import TypeVar

import streamlit as st

from panorama_map.core.events import ConfigurationChanged
from panorama_map.model.map_settings import ConfigurationState, ElevationStyle, EmphasisStyle, MapStyle
from panorama_map.model.message import Message

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class SidebarRenderer:
    """Renders the sidebar and returns the user's configuration change, if any."""

    def __init__(self, configuration: ConfigurationState, status: Message | None = None) -> None:
        """Initialize sidebar renderer.

        Args:
            configuration: Current map settings (read only)
            status: Message shown at the top of the sidebar
        """
        self.configuration = configuration
        self.status = status

    def render(self) -> ConfigurationChanged | None:
        """Render complete sidebar.

        Returns:
            ConfigurationChanged carrying only the fields the user changed, or None.
        """
        with st.sidebar:
            if self.status is not None:
                self.status.display()
            st.divider()

            st.markdown("### 🗺️ Map")
            map_style = self._render_selector(
                label="Map style",
                options=list(MapStyle),
                current=self.configuration.map_style,
                key="sidebar_map_style",
            )
            elevation_style = self._render_selector(
                label="Elevation",
                options=list(ElevationStyle),
                current=self.configuration.elevation_style,
                key="sidebar_elevation_style",
            )
            emphasis_style = self._render_selector(
                label="Emphasis",
                options=list(EmphasisStyle),
                current=self.configuration.emphasis_style,
                key="sidebar_emphasis_style",
                disabled=map_style is not MapStyle.STANDARD,
                help_text="Only the standard map style supports emphasis",
            )

        return self.diff(
            map_style=map_style,
            elevation_style=elevation_style,
            emphasis_style=emphasis_style,
        )

    def diff(
        self,
        map_style: MapStyle,
        elevation_style: ElevationStyle,
        emphasis_style: EmphasisStyle,
    ) -> ConfigurationChanged | None:
        """Compare widget values against the current configuration."""
        change = ConfigurationChanged(
            map_style=map_style if map_style is not self.configuration.map_style else None,
            elevation_style=elevation_style if elevation_style is not self.configuration.elevation_style else None,
            emphasis_style=emphasis_style if emphasis_style is not self.configuration.emphasis_style else None,
        )
        if change.is_empty:
            return None
        logger.info(f"[SIDEBAR] Configuration change requested: {change}")
        return change

    @staticmethod
    def _render_selector(
        label: str,
        options: list[E],
        current: E,
        key: str,
        disabled: bool = False,
        help_text: str | None = None,
    ) -> E:
        selected = st.radio(
            label,
            options=options,
            index=options.index(current),
            format_func=lambda option: option.display_name,
            horizontal=True,
            key=key,
            disabled=disabled,
            help=help_text if disabled else None,
        )
        # Streamlit reruns can hand back a value from a reloaded enum class
        return type(current)(selected.value)
