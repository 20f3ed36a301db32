# corona_map/pages/map_components/presenter.py
"""
Streamlit side of the map controller.

Streamlit redraws the page top to bottom on every run, so the presenter keeps
the view state the controller pushes into it, and the page draws from that
state. Only the error flash talks to Streamlit directly, since it is a
transient element shown while the script runs.
"""

import logging
import time
from typing import Optional, Sequence, Tuple

import streamlit as st

from analytics import PanelPosition, ReportAnnotation
from config import settings
from data_processing.models import Report

logger = logging.getLogger(__name__)


class StreamlitPresenter:
    """Holds the rendered map state between script runs."""

    def __init__(self, zoom_level: float = settings.MAP.default_zoom):
        self.annotations: Tuple[ReportAnnotation, ...] = ()
        self.zoom_level = zoom_level
        self.progress_message: Optional[str] = None
        self.region_report: Optional[Report] = None
        self.panel_position = PanelPosition.HIDDEN

    def render_annotations(self, annotations: Sequence[ReportAnnotation]) -> None:
        self.annotations = tuple(annotations)

    def restyle_annotations(self, zoom_level: float) -> None:
        self.zoom_level = zoom_level

    def show_progress(self, message: str) -> None:
        self.progress_message = message

    def hide_progress(self) -> None:
        self.progress_message = None

    def flash_error(self, delay: float) -> None:
        logger.info("Flashing update error to the user.")
        placeholder = st.empty()
        placeholder.error("Could not update the outbreak reports.", icon="⚠️")
        time.sleep(delay)
        placeholder.empty()

    def update_region_screen(self, report: Optional[Report]) -> None:
        self.region_report = report

    def move_panel(self, position: PanelPosition) -> None:
        self.panel_position = position
