# corona_map/data_processing/__init__.py
# ROBUST & EXPLICIT PACKAGE API

"""
Initializes the data_processing package, defining its public API.

This file explicitly exports all public-facing names from its submodules,
providing a single, consistent import point for the rest of the application.
"""

# --- Core Data Pipeline & Utilities from helpers.py ---
from .helpers import (
    DataPipeline,
    convert_to_numeric,
    robust_json_load
)

# --- Records & Failures ---
from .models import CaseCounts, GlobalReport, Report
from .errors import LoadFailure, RefreshFailure, ReportDataError

# --- Data Loading from loaders.py ---
from .loaders import (
    DAILY_REPORTS_CONFIG,
    load_cache_metadata,
    load_daily_reports
)

# --- Aggregation from aggregation.py ---
from .aggregation import (
    build_country_reports,
    build_global_report,
    build_region_reports,
    make_region_id
)

# --- Data Source from data_manager.py ---
from .data_manager import VirusDataManager, fetch_with_retry


# --- Define the canonical public API for the package ---
__all__ = [
    # helpers.py
    "DataPipeline",
    "convert_to_numeric",
    "robust_json_load",

    # models.py / errors.py
    "CaseCounts",
    "GlobalReport",
    "Report",
    "LoadFailure",
    "RefreshFailure",
    "ReportDataError",

    # loaders.py
    "DAILY_REPORTS_CONFIG",
    "load_cache_metadata",
    "load_daily_reports",

    # aggregation.py
    "build_country_reports",
    "build_global_report",
    "build_region_reports",
    "make_region_id",

    # data_manager.py
    "VirusDataManager",
    "fetch_with_retry",
]
