"""Map settings - the three user-selected style enums.

ConfigurationState is mutated only by explicit user selection (sidebar
selectors, delivered as ConfigurationChanged events) and notifies its
listeners after every committed change. All fields default to the first
enumerator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from panorama_map.core.observable import Observable


class MapStyle(Enum):
    """Base map style."""

    STANDARD = "standard"
    HYBRID = "hybrid"
    IMAGERY = "imagery"

    @property
    def display_name(self) -> str:
        return {
            MapStyle.STANDARD: "Standard",
            MapStyle.HYBRID: "Hybrid",
            MapStyle.IMAGERY: "Imagery",
        }[self]


class ElevationStyle(Enum):
    """How terrain elevation is rendered."""

    REALISTIC = "realistic"
    FLAT = "flat"

    @property
    def display_name(self) -> str:
        return "Realistic" if self is ElevationStyle.REALISTIC else "Flat"


class EmphasisStyle(Enum):
    """How strongly map features (points of interest, roads) are emphasized.

    Only the standard map style supports emphasis.
    """

    DEFAULT = "default"
    MUTED = "muted"

    @property
    def display_name(self) -> str:
        return "Default" if self is EmphasisStyle.DEFAULT else "Muted"


@dataclass(eq=False)
class ConfigurationState(Observable):
    """Observable map style configuration.

    Attributes:
        map_style: Base map style
        elevation_style: Terrain rendering
        emphasis_style: Feature emphasis (ignored outside MapStyle.STANDARD)
    """

    map_style: MapStyle = MapStyle.STANDARD
    elevation_style: ElevationStyle = ElevationStyle.REALISTIC
    emphasis_style: EmphasisStyle = EmphasisStyle.DEFAULT
    _listeners: list = field(default_factory=list, init=False, repr=False)

    def update(
        self,
        map_style: MapStyle | None = None,
        elevation_style: ElevationStyle | None = None,
        emphasis_style: EmphasisStyle | None = None,
    ) -> bool:
        """Apply a user selection. None leaves a field unchanged.

        Returns:
            True if any field changed (listeners were notified), False otherwise.
        """
        changed = False
        if map_style is not None and map_style is not self.map_style:
            self.map_style = map_style
            changed = True
        if elevation_style is not None and elevation_style is not self.elevation_style:
            self.elevation_style = elevation_style
            changed = True
        if emphasis_style is not None and emphasis_style is not self.emphasis_style:
            self.emphasis_style = emphasis_style
            changed = True

        if changed:
            self._notify()
        return changed

    def snapshot(self) -> tuple[MapStyle, ElevationStyle, EmphasisStyle]:
        """Current values as an immutable tuple."""
        return (self.map_style, self.elevation_style, self.emphasis_style)
