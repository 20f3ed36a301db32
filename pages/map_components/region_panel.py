# corona_map/pages/map_components/region_panel.py
"""
Region detail panel shown beside the map.

Displays the selected region's figures, or world totals when nothing is
selected. In the FULL position it also lists the most affected regions.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import pandas as pd
import streamlit as st

from analytics import MapController, PanelPosition, hour_age
from config import settings
from data_processing.models import CaseCounts, GlobalReport, Report
from visualization import format_count, plot_bar_chart, render_count_card

logger = logging.getLogger(__name__)


def top_regions_frame(reports: Sequence[Report], limit: int = settings.TOP_REGIONS_COUNT) -> pd.DataFrame:
    """Most-confirmed regions as a display table."""
    rows: List[dict] = [
        {
            'region': r.long_name,
            'confirmed': r.confirmed_count,
            'active': r.active_count,
            'recovered': r.recovered_count,
            'deaths': r.death_count,
        }
        for r in sorted(reports, key=lambda r: r.confirmed_count, reverse=True)[:limit]
    ]
    return pd.DataFrame(rows, columns=['region', 'confirmed', 'active', 'recovered', 'deaths'])


def _render_counts(counts: CaseCounts) -> None:
    cols = st.columns(2)
    with cols[0]:
        render_count_card("Confirmed", counts.confirmed_count, "confirmed", icon="🦠")
        render_count_card("Recovered", counts.recovered_count, "recovered", icon="💚",
                          caption=f"{counts.recovery_rate:.1f}% of confirmed")
    with cols[1]:
        render_count_card("Active", counts.active_count, "active", icon="🏥")
        render_count_card("Deaths", counts.death_count, "deaths", icon="🕯️",
                          caption=f"{counts.death_rate:.1f}% of confirmed")


def _render_header(report: Optional[Report], global_report: Optional[GlobalReport]) -> None:
    if report is not None:
        st.subheader(report.long_name)
        if report.last_update:
            st.caption(f"Last reported {report.last_update:%Y-%m-%d %H:%M} UTC")
        return
    st.subheader("Worldwide")
    if global_report is not None:
        age = hour_age(global_report.last_update, datetime.now(timezone.utc))
        age_text = f"{age:.0f}h ago" if age is not None else "unknown"
        st.caption(f"{format_count(global_report.region_count)} countries · updated {age_text}")


def render_region_panel(controller: MapController) -> None:
    """Draws the panel from the controller's current selection and position."""
    report = controller.selected_report
    global_report = controller.data_source.global_report
    position = controller.panel_position

    _render_header(report, global_report)
    counts: Optional[CaseCounts] = report or global_report
    if counts is None:
        st.info("No outbreak reports loaded yet.")
        return
    _render_counts(counts)

    if position is PanelPosition.FULL:
        if st.button("Collapse panel", key="collapse_region_panel", width="stretch"):
            controller.hide_region_screen()
            st.rerun()
        top_df = top_regions_frame(controller.data_source.main_reports)
        fig = plot_bar_chart(top_df, x_col='confirmed', y_col='region', title="Most Affected Countries",
                             x_title="Confirmed Cases", y_title="", orientation='h')
        st.plotly_chart(fig, width="stretch")
        st.dataframe(top_df, hide_index=True, width="stretch")
    elif st.button("Show more", key="expand_region_panel", width="stretch"):
        controller.show_region_screen()
        st.rerun()
