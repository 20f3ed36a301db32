# corona_map/visualization/ui_elements.py
# THEME-AWARE UI COMPONENTS

import html
import logging
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import streamlit as st

from config import settings

logger = logging.getLogger(__name__)

@st.cache_resource
def _read_css(css_path: str) -> Optional[str]:
    path = Path(css_path)
    if not path.is_file():
        logger.warning(f"CSS file not found at: {path}. UI may not be styled correctly.")
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Error loading CSS from {path}: {e}", exc_info=True)
        return None


def load_and_inject_css(css_path: Union[str, Path]) -> None:
    """Loads a CSS file and injects it into the Streamlit application."""
    css = _read_css(str(css_path))
    if css:
        st.markdown(f'<style>{css}</style>', unsafe_allow_html=True)


def format_count(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return "N/A"
    if isinstance(value, float) and not value.is_integer():
        return f"{value:,.2f}"
    if isinstance(value, (int, float)):
        return f"{int(value):,}"
    return str(value)


def render_count_card(
    title: str,
    value: Any,
    category: str,
    caption: Optional[str] = None,
    icon: str = "🦠",
) -> None:
    """
    Renders one case figure as an HTML card. `category` picks the accent color
    (confirmed, active, recovered, deaths); `caption` is a muted line below the value.
    """
    category_slug = category.lower().replace('_', '-')
    caption_html = f'<p class="count-caption">{html.escape(caption)}</p>' if caption else ""

    card_html = f"""
    <div class="count-card count-{category_slug}">
        <div class="count-title"><span class="count-icon">{html.escape(icon)}</span>{html.escape(title)}</div>
        <p class="count-value">{html.escape(format_count(value))}</p>
        {caption_html}
    </div>
    """
    st.markdown(card_html, unsafe_allow_html=True)
