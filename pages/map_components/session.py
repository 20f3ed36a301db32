# corona_map/pages/map_components/session.py
"""Per-session wiring of the shared data manager, presenter and map controller."""

import logging
from typing import Optional

import streamlit as st

from analytics import MapController
from data_processing import VirusDataManager
from .presenter import StreamlitPresenter

logger = logging.getLogger(__name__)

CONTROLLER_KEY = "map_controller"
MAP_VISIBLE_KEY = "map_visible"
MAP_SELECTION_KEY = "last_map_selection"


@st.cache_resource
def get_data_manager() -> VirusDataManager:
    """One data manager per server process; its download worker and HTTP session are shared."""
    return VirusDataManager()


def get_map_controller() -> MapController:
    """Returns this session's controller, creating and loading it on first use."""
    if CONTROLLER_KEY not in st.session_state:
        controller = MapController(get_data_manager(), StreamlitPresenter())
        if not controller.view_did_load():
            logger.warning("No local report data on first load; waiting for a refresh.")
        st.session_state[CONTROLLER_KEY] = controller
        st.session_state[MAP_VISIBLE_KEY] = False
    return st.session_state[CONTROLLER_KEY]


def apply_map_selection(controller: MapController, region_id: Optional[str]) -> None:
    """Forwards a change in the map's point selection to the controller."""
    if region_id == st.session_state.get(MAP_SELECTION_KEY):
        return
    st.session_state[MAP_SELECTION_KEY] = region_id
    if region_id is None:
        controller.did_deselect()
    else:
        controller.did_select(controller.annotation_for(region_id))


def mark_map_visible(controller: MapController) -> None:
    """Fires the appear lifecycle once each time the map page becomes visible."""
    if not st.session_state.get(MAP_VISIBLE_KEY, False):
        st.session_state[MAP_VISIBLE_KEY] = True
        controller.view_did_appear()


def mark_map_hidden(controller: MapController) -> None:
    # The map widget comes back with no selection, so a stale key would read as a deselect.
    st.session_state.pop(MAP_SELECTION_KEY, None)
    if st.session_state.get(MAP_VISIBLE_KEY, False):
        st.session_state[MAP_VISIBLE_KEY] = False
        controller.view_will_disappear()
