# corona_map/pages/map_components/__init__.py
"""
This file makes the 'map_components' directory a Python package.

It defines the public API used by the map dashboard and the regions page.
"""

from .presenter import StreamlitPresenter
from .region_panel import render_region_panel, top_regions_frame
from .session import (apply_map_selection, get_data_manager, get_map_controller,
                      mark_map_hidden, mark_map_visible)

__all__ = [
    "StreamlitPresenter",
    "render_region_panel",
    "top_regions_frame",
    "apply_map_selection",
    "get_data_manager",
    "get_map_controller",
    "mark_map_hidden",
    "mark_map_visible",
]
