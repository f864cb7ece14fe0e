"""User interface components for the panorama map.

File Structure (layout-based naming):
- left_panel.py: Sidebar with lookup status and map style selectors
- center_map.py: Pydeck map with basemap and annotation markers
- panorama_panel.py: Look Around panel showing the current scene

Core Components:
- state_machine.py: SceneLookupMachine (4 states) + LookupContext
- coordinator.py: SelectionCoordinator (selection -> lookup -> scene)
- session.py: MapSession composition root (event queue, configuration)
- click_detector.py: Pydeck clicks -> selection events
- basemap.py: Raster basemaps and 3D terrain per render configuration
"""

from panorama_map.ui.center_map import MapRenderer
from panorama_map.ui.click_detector import ClickDetector
from panorama_map.ui.coordinator import SelectionCoordinator
from panorama_map.ui.infra import bump_map_version, schedule_poll, trigger_rerun
from panorama_map.ui.left_panel import SidebarRenderer
from panorama_map.ui.panorama_panel import PanoramaPanel
from panorama_map.ui.session import MapSession
from panorama_map.ui.state_machine import LookupContext, SceneLookupMachine

__all__ = [
    "SceneLookupMachine",
    "LookupContext",
    "SelectionCoordinator",
    "MapSession",
    "MapRenderer",
    "ClickDetector",
    "SidebarRenderer",
    "PanoramaPanel",
    "bump_map_version",
    "schedule_poll",
    "trigger_rerun",
]
