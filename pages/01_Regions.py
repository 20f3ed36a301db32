# corona_map/pages/01_Regions.py
# REGION LIST - SEARCHABLE TABLE OF ALL REPORTS

import logging

import pandas as pd
import streamlit as st

from config import settings
from pages.map_components import get_map_controller, mark_map_hidden

# --- Page Setup ---
st.set_page_config(page_title="Regions", page_icon="📋", layout="wide")
logger = logging.getLogger(__name__)

controller = get_map_controller()
controller.poll()
mark_map_hidden(controller)

# --- Main Page ---
st.title("📋 Regions")
st.markdown("Every region with a report, most affected first. Select a row to open it on the map.")
st.divider()

reports = controller.data_source.all_reports
if not reports:
    st.error("No outbreak reports available yet.")
    st.stop()

query = st.text_input("Search regions", placeholder="Country or province")
if query:
    needle = query.strip().lower()
    reports = [r for r in reports if needle in r.long_name.lower()]

table = pd.DataFrame([
    {
        'Region': r.long_name,
        'Confirmed': r.confirmed_count,
        'Active': r.active_count,
        'Recovered': r.recovered_count,
        'Deaths': r.death_count,
        'Death Rate': r.death_rate,
        'region_id': r.region_id,
    }
    for r in reports
])

if table.empty:
    st.info(f"No regions match '{query}'.")
    st.stop()

event = st.dataframe(
    table, hide_index=True, width="stretch",
    column_order=['Region', 'Confirmed', 'Active', 'Recovered', 'Deaths', 'Death Rate'],
    column_config={
        "Confirmed": st.column_config.NumberColumn(format="%d"),
        "Active": st.column_config.NumberColumn(format="%d"),
        "Recovered": st.column_config.NumberColumn(format="%d"),
        "Deaths": st.column_config.NumberColumn(format="%d"),
        "Death Rate": st.column_config.ProgressColumn(format="%.1f%%", min_value=0, max_value=max(10.0, table['Death Rate'].max())),
    },
    on_select="rerun", selection_mode="single-row", key="regions_table",
)

selected_rows = event["selection"]["rows"] if event else []
if selected_rows:
    region_id = table.iloc[selected_rows[0]]['region_id']
    report = next((r for r in reports if r.region_id == region_id), None)
    if report is not None and st.button(f"Show {report.long_name} on map", type="primary"):
        controller.update_region_screen(report)
        controller.show_region_screen()
        st.switch_page("app.py")

st.divider()
st.caption(settings.APP_FOOTER_TEXT)
