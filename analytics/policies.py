# corona_map/analytics/policies.py
# PURE DECISION POLICIES FOR REFRESH & ANNOTATION SUBSETS

"""
The two decisions the map controller delegates: whether cached data is stale
enough to re-download, and which annotation subset a zoom level warrants.

Both are pure and total; they have no Streamlit or I/O dependency.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

DEFAULT_MAX_AGE_HOURS = 6.0
DEFAULT_ZOOM_THRESHOLD = 4.0


class SubsetName(str, Enum):
    ALL = "all"
    MAIN = "main"


def hour_age(last_updated: Optional[datetime], now: datetime) -> Optional[float]:
    """Hours from `last_updated` to `now`; None when there is no timestamp."""
    if last_updated is None:
        return None
    if (last_updated.tzinfo is None) != (now.tzinfo is None):
        last_updated = last_updated.replace(tzinfo=timezone.utc) if last_updated.tzinfo is None else last_updated
        now = now.replace(tzinfo=timezone.utc) if now.tzinfo is None else now
    return (now - last_updated).total_seconds() / 3600.0


def should_refresh(
    last_updated: Optional[datetime],
    now: datetime,
    max_age_hours: float = DEFAULT_MAX_AGE_HOURS,
) -> bool:
    """
    True when data was never loaded or is at least `max_age_hours` old.

    A missing timestamp always refreshes; it is never treated as fresh.
    """
    age = hour_age(last_updated, now)
    return age is None or age >= max_age_hours


def select_subset(zoom_level: float, threshold_zoom: float = DEFAULT_ZOOM_THRESHOLD) -> SubsetName:
    """ALL when zoomed in past `threshold_zoom`, MAIN otherwise."""
    return SubsetName.ALL if zoom_level > threshold_zoom else SubsetName.MAIN
