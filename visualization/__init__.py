# corona_map/visualization/__init__.py
# ROBUST & EXPLICIT PACKAGE API

"""
Initializes the visualization package, defining its public API.
This file explicitly exports all public-facing functions from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Core Plotting Functions from plots.py ---
from .plots import (
    set_plotly_theme,
    create_empty_figure,
    plot_bar_chart,
    plot_report_map,
)

# --- Custom UI Element Renderers from ui_elements.py ---
from .ui_elements import (
    load_and_inject_css,
    format_count,
    render_count_card,
)

# --- Define the canonical public API for the package ---
__all__ = [
    # from plots.py
    "set_plotly_theme",
    "create_empty_figure",
    "plot_bar_chart",
    "plot_report_map",

    # from ui_elements.py
    "load_and_inject_css",
    "format_count",
    "render_count_card",
]
