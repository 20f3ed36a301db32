# corona_map/analytics/__init__.py

"""
Initializes the analytics package: the refresh and subset policies, map
annotations, and the controller that wires them to a data source.

This __init__.py defines the public API for the package.
"""

# From policies.py
from .policies import SubsetName, hour_age, select_subset, should_refresh

# From annotations.py
from .annotations import (AnnotationSets, MarkerStyle, ReportAnnotation,
                          build_annotation_sets)

# From orchestrator.py
from .orchestrator import (DataSource, MapController, PanelPosition, Presenter,
                           RefreshState)

# --- Define the public API for the analytics package ---
__all__ = [
    # Policies
    "SubsetName",
    "hour_age",
    "select_subset",
    "should_refresh",

    # Annotations
    "AnnotationSets",
    "MarkerStyle",
    "ReportAnnotation",
    "build_annotation_sets",

    # Controller
    "DataSource",
    "MapController",
    "PanelPosition",
    "Presenter",
    "RefreshState",
]
