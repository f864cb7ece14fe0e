"""Render configuration - what the map surface is asked to draw.

resolve() maps a ConfigurationState to one of three frozen configuration
values. It is pure and total: every enum combination has a result, and
equal inputs give equal outputs, so the map surface can compare values to
skip redundant reapplication.

Mapping:
    STANDARD -> StandardMapConfiguration(relief, feature_emphasis)
    HYBRID   -> HybridMapConfiguration(relief)     (emphasis ignored)
    IMAGERY  -> ImageryMapConfiguration(relief)    (emphasis ignored)

    ElevationStyle.REALISTIC -> ReliefHint.RELIEF_3D
    ElevationStyle.FLAT      -> ReliefHint.FLAT
    EmphasisStyle.DEFAULT    -> FeatureEmphasis.EMPHASIZED
    EmphasisStyle.MUTED      -> FeatureEmphasis.DESATURATED
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from panorama_map.model.map_settings import (
    ConfigurationState,
    ElevationStyle,
    EmphasisStyle,
    MapStyle,
)


class ReliefHint(Enum):
    """Terrain rendering hint for the map surface."""

    RELIEF_3D = "relief_3d"
    FLAT = "flat"


class FeatureEmphasis(Enum):
    """Point of interest / road emphasis on the standard basemap."""

    EMPHASIZED = "emphasized"
    DESATURATED = "desaturated"


@dataclass(frozen=True)
class StandardMapConfiguration:
    """Street map with configurable feature emphasis."""

    relief: ReliefHint
    feature_emphasis: FeatureEmphasis

    @property
    def shows_relief(self) -> bool:
        return self.relief is ReliefHint.RELIEF_3D


@dataclass(frozen=True)
class HybridMapConfiguration:
    """Satellite imagery with road and place labels."""

    relief: ReliefHint

    @property
    def shows_relief(self) -> bool:
        return self.relief is ReliefHint.RELIEF_3D


@dataclass(frozen=True)
class ImageryMapConfiguration:
    """Satellite imagery only."""

    relief: ReliefHint

    @property
    def shows_relief(self) -> bool:
        return self.relief is ReliefHint.RELIEF_3D


RenderConfiguration = Union[StandardMapConfiguration, HybridMapConfiguration, ImageryMapConfiguration]

_RELIEF_BY_ELEVATION = {
    ElevationStyle.REALISTIC: ReliefHint.RELIEF_3D,
    ElevationStyle.FLAT: ReliefHint.FLAT,
}

_EMPHASIS_BY_STYLE = {
    EmphasisStyle.DEFAULT: FeatureEmphasis.EMPHASIZED,
    EmphasisStyle.MUTED: FeatureEmphasis.DESATURATED,
}


def resolve(state: ConfigurationState) -> RenderConfiguration:
    """Compute the render configuration for the current map settings."""
    relief = _RELIEF_BY_ELEVATION[state.elevation_style]

    if state.map_style is MapStyle.HYBRID:
        return HybridMapConfiguration(relief=relief)
    if state.map_style is MapStyle.IMAGERY:
        return ImageryMapConfiguration(relief=relief)
    return StandardMapConfiguration(relief=relief, feature_emphasis=_EMPHASIS_BY_STYLE[state.emphasis_style])
