# corona_map/visualization/plots.py
# CENTRALIZED PLOTTING FACTORY

import html
import logging
from typing import Any, Optional, Sequence, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import plotly.io as pio

from analytics.annotations import ReportAnnotation
from config import settings

logger = logging.getLogger(__name__)

# --- Helper Functions ---
def _hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Converts a hex color string to an rgba string for Plotly compatibility."""
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6: return 'rgba(0,0,0,0.1)'
    try:
        rgb = tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
        return f'rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})'
    except ValueError:
        return 'rgba(0,0,0,0.1)'

# --- Theme Setup ---
def set_plotly_theme():
    """Sets the custom theme as the default for all Plotly charts."""
    base_layout = {
        'font': {'family': "sans-serif", 'size': 12, 'color': settings.COLOR_TEXT_PRIMARY},
        'title': {'x': 0.5, 'xanchor': 'center', 'font': {'size': 18, 'color': settings.COLOR_TEXT_HEADINGS}},
        'paper_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'plot_bgcolor': settings.COLOR_BACKGROUND_CONTENT,
        'margin': dict(l=60, r=40, t=60, b=60),
        'legend': dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1, font={'size': 10}),
        'xaxis': {'showgrid': False, 'zeroline': False},
        'yaxis': {'gridcolor': '#e9ecef', 'zeroline': False},
    }
    corona_template = go.layout.Template(layout=base_layout)
    corona_template.layout.colorway = settings.PLOTLY_COLORWAY
    pio.templates['corona'] = corona_template
    pio.templates.default = 'corona'
    logger.debug("Custom 'corona' Plotly theme applied.")

# --- Factory Functions for Charts ---
def create_empty_figure(title: str, message: str = "No data available.") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>",
        xaxis={"visible": False}, yaxis={"visible": False},
        annotations=[{"text": html.escape(message), "xref": "paper", "yref": "paper", "showarrow": False, "font": {"size": 14, "color": settings.COLOR_TEXT_MUTED}}]
    )
    return fig

def plot_bar_chart(
    df: pd.DataFrame, x_col: str, y_col: str, title: str,
    x_title: Optional[str] = None, y_title: Optional[str] = None, **px_kwargs: Any
) -> go.Figure:
    """Creates a themed bar chart with correct axis labeling and non-negative count axis."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return create_empty_figure(title)

    try:
        axis_labels = {
            x_col: x_title or x_col.replace('_', ' ').title(),
            y_col: y_title or y_col.replace('_', ' ').title()
        }
        orientation = px_kwargs.get('orientation', 'v')

        fig = px.bar(
            df, x=x_col, y=y_col, title=f"<b>{html.escape(title)}</b>",
            labels=axis_labels, **px_kwargs
        )
        text_template = '%{x:,.0f}' if orientation == 'h' else '%{y:,.0f}'
        fig.update_traces(texttemplate=text_template, textposition='outside')
        if orientation == 'h':
            fig.update_xaxes(tickformat=',d', rangemode='nonnegative')
            fig.update_yaxes(autorange='reversed')
        else:
            fig.update_yaxes(tickformat=',d', rangemode='nonnegative')
        return fig
    except (KeyError, ValueError) as e:
        logger.error(f"Failed to create bar chart '{title}': {e}", exc_info=True)
        return create_empty_figure(title, "Error generating chart.")

def plot_report_map(
    annotations: Sequence[ReportAnnotation],
    zoom_level: float,
    center: Optional[Tuple[float, float]] = None,
    selected_region_id: Optional[str] = None,
    title: str = "",
    height: Optional[int] = None,
) -> go.Figure:
    """
    Draws report annotations as circle markers on a MapLibre tile map.

    Each point carries its region id as customdata so chart selections can be
    mapped back to an annotation.
    """
    center = center or settings.MAP.default_center
    height = height or settings.MAP.height_px
    fig = go.Figure()

    if annotations:
        styles = [a.render_at(zoom_level) for a in annotations]
        show_labels = any(s.show_label for s in styles)
        colors = [
            settings.COLOR_PRIMARY if a.region_id == selected_region_id else _hex_to_rgba(settings.COLOR_CONFIRMED, 0.6)
            for a in annotations
        ]
        fig.add_trace(go.Scattermap(
            lat=[a.latitude for a in annotations],
            lon=[a.longitude for a in annotations],
            mode='markers+text' if show_labels else 'markers',
            marker=dict(size=[s.radius * 2 for s in styles], color=colors, sizemode='diameter'),
            text=[a.title if s.show_label else "" for a, s in zip(annotations, styles)],
            textposition='top center',
            customdata=[a.region_id for a in annotations],
            hovertext=[f"<b>{html.escape(a.title)}</b><br>{a.subtitle}" for a in annotations],
            hoverinfo='text',
            name="Reports",
        ))

    fig.update_layout(
        title_text=f"<b>{html.escape(title)}</b>" if title else None,
        map=dict(
            style=settings.MAP.style, zoom=zoom_level,
            center={"lat": center[0], "lon": center[1]},
        ),
        margin={"r": 0, "t": 40 if title else 0, "l": 0, "b": 0},
        height=height, showlegend=False,
    )
    return fig
