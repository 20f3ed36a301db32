# corona_map/app.py
# APPLICATION ENTRY POINT - OUTBREAK MAP

import logging
import sys
from pathlib import Path
from typing import Any, Optional

try:
    _project_root = Path(__file__).resolve().parent
    if str(_project_root) not in sys.path:
        sys.path.insert(0, str(_project_root))

    import streamlit as st
    from config import settings
    from pages.map_components import (apply_map_selection, get_map_controller,
                                      mark_map_visible, render_region_panel)
    from analytics import PanelPosition
    from visualization import load_and_inject_css, plot_report_map, set_plotly_theme

except ImportError as e:
    print(f"FATAL ERROR in app.py: A core module failed to import.", file=sys.stderr)
    print("1. Ensure you have installed the project: `pip install -e .`", file=sys.stderr)
    print("2. Run the app from the project root: `streamlit run app.py`", file=sys.stderr)
    print(f"\nPython Path: {sys.path}\nOriginal ImportError: {e}", file=sys.stderr)
    sys.exit(1)

# --- Global Configuration ---
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format=settings.LOG_FORMAT,
    datefmt=settings.LOG_DATE_FORMAT,
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True
)
logger = logging.getLogger(__name__)

# Keep per-request HTTP chatter out of the console.
logging.getLogger("urllib3").setLevel(logging.WARNING)


st.set_page_config(
    page_title=f"{settings.APP_NAME} - Map",
    page_icon="🦠",
    layout="wide", initial_sidebar_state="expanded",
    menu_items={
        "Get Help": f"mailto:{settings.SUPPORT_CONTACT_INFO}",
        "Report a bug": f"mailto:{settings.SUPPORT_CONTACT_INFO}?subject=Bug Report - {settings.APP_NAME} v{settings.APP_VERSION}",
        "About": f"### {settings.APP_NAME} (v{settings.APP_VERSION})\n{settings.APP_FOOTER_TEXT}"
    }
)

load_and_inject_css(settings.STYLE_CSS_PATH)
set_plotly_theme()


def _selected_region_id(event: Any) -> Optional[str]:
    """Region id of the first selected map point, if any."""
    try:
        points = event["selection"]["points"]
    except (KeyError, TypeError):
        return None
    if not points:
        return None
    custom = points[0].get("customdata")
    if isinstance(custom, (list, tuple)):
        custom = custom[0] if custom else None
    return str(custom) if custom else None


# --- Controller & Lifecycle ---
controller = get_map_controller()
presenter = controller.presenter
controller.poll()
mark_map_visible(controller)

if controller.is_refreshing and presenter.progress_message:
    with st.spinner(presenter.progress_message):
        controller.wait()

# --- Sidebar ---
with st.sidebar:
    st.header(settings.APP_NAME)
    st.caption(f"v{settings.APP_VERSION}")
    st.divider()
    zoom = st.slider(
        "Map zoom", min_value=0.0, max_value=12.0, step=0.5,
        value=float(presenter.zoom_level), key="map_zoom",
        help=f"Zoom past {settings.MAP.zoom_threshold:g} to see every province and state."
    )
    if controller.is_refreshing:
        st.caption("Updating reports in the background...")
        if st.button("Check for update", width="stretch"):
            controller.poll()
    st.divider()
    st.caption(settings.APP_FOOTER_TEXT)

if zoom != controller.zoom_level:
    controller.visible_region_changed(zoom)
    controller.region_did_change(zoom)

# --- Map & Region Panel ---
st.title(f"🦠 {settings.APP_NAME}")

panel_ratio = [0.5, 0.5] if controller.panel_position is PanelPosition.FULL else [0.7, 0.3]
map_col, panel_col = st.columns(panel_ratio)

with map_col:
    selected_id = controller.selected_report.region_id if controller.selected_report else None
    fig = plot_report_map(presenter.annotations, zoom_level=zoom, selected_region_id=selected_id)
    event = st.plotly_chart(fig, width="stretch", on_select="rerun", selection_mode="points", key="report_map")

    apply_map_selection(controller, _selected_region_id(event))
    st.caption(f"Showing {len(presenter.annotations):,} regions with confirmed cases.")

with panel_col:
    with st.container(border=True):
        render_region_panel(controller)

logger.debug("Map page rendered.")
