"""Panorama Map - Select a point of interest and look around at street level.

An interactive map application featuring:
- Points of interest on a configurable basemap (standard, hybrid, imagery)
- Realistic 3D relief or flat rendering, with muted feature emphasis
- Asynchronous street-level panorama lookups that never show a stale result
- State machine-based lookup lifecycle

Modules:
    core: Foundation classes (events, geo calculations, scene provider, lookup executor)
    model: Data structures (Coordinate, Annotation, Scene, ConfigurationState)
    ui: Streamlit interface components (session, coordinator, renderers, panels)

Example:
    from panorama_map.core.scene_provider import MapillarySceneProvider
    from panorama_map.ui import MapRenderer, MapSession
"""
