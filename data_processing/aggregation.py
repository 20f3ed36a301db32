# corona_map/data_processing/aggregation.py
# REGION, COUNTRY & WORLD AGGREGATIONS

"""
Turns a cleaned daily report table into the three collections the map
needs: province-level reports, country-level reports and the world total.

County rows ('admin2') are always folded into their province. Coordinates
are the mean of a group's valid coordinates; (0, 0) is the feed's marker for
unassigned rows and is treated as missing.
"""

import logging
import re
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .models import GlobalReport, Report

logger = logging.getLogger(__name__)


def make_region_id(country: str, province: str = "") -> str:
    """Stable slug identifying a region, e.g. 'canada/british-columbia'."""
    parts = [country, province] if province else [country]
    return "/".join(re.sub(r'[^a-z0-9]+', '-', p.lower()).strip('-') for p in parts)


def _with_valid_coordinates(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    lat = pd.to_numeric(out.get('latitude', pd.Series(np.nan, index=out.index)), errors='coerce')
    lon = pd.to_numeric(out.get('longitude', pd.Series(np.nan, index=out.index)), errors='coerce')
    invalid = lat.isna() | lon.isna() | ((lat == 0) & (lon == 0)) | ~lat.between(-90, 90) | ~lon.between(-180, 180)
    out['latitude'] = lat.mask(invalid)
    out['longitude'] = lon.mask(invalid)
    if 'last_update' not in out.columns:
        out['last_update'] = pd.NaT
    return out


def _group_to_reports(df: pd.DataFrame, keys: Sequence[str]) -> List[Report]:
    if df.empty:
        return []

    grouped = df.groupby(list(keys), dropna=False, sort=False).agg(
        confirmed=('confirmed', 'sum'),
        deaths=('deaths', 'sum'),
        recovered=('recovered', 'sum'),
        latitude=('latitude', 'mean'),
        longitude=('longitude', 'mean'),
        last_update=('last_update', 'max'),
    ).reset_index()

    located = grouped.dropna(subset=['latitude', 'longitude'])
    dropped = len(grouped) - len(located)
    if dropped:
        logger.debug(f"Dropped {dropped} region(s) without any valid coordinate from {list(keys)} grouping.")

    reports: List[Report] = []
    for row in located.sort_values('confirmed', ascending=False).itertuples(index=False):
        country = str(row.country_region)
        province = str(getattr(row, 'province_state', '') or '')
        last_update = None if pd.isna(row.last_update) else pd.Timestamp(row.last_update).to_pydatetime()
        reports.append(Report(
            region_id=make_region_id(country, province),
            name=province or country,
            country=country,
            province=province,
            latitude=float(row.latitude),
            longitude=float(row.longitude),
            confirmed_count=max(int(row.confirmed), 0),
            death_count=max(int(row.deaths), 0),
            recovered_count=max(int(row.recovered), 0),
            last_update=last_update,
        ))
    return reports


def build_region_reports(df: pd.DataFrame) -> List[Report]:
    """One report per (country, province); countries without provinces appear once."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return []
    return _group_to_reports(_with_valid_coordinates(df), ['country_region', 'province_state'])


def build_country_reports(df: pd.DataFrame) -> List[Report]:
    """One report per country, the primary regions shown when zoomed out."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return []
    return _group_to_reports(_with_valid_coordinates(df), ['country_region'])


def build_global_report(df: pd.DataFrame, fetched_at: Optional[datetime] = None) -> Optional[GlobalReport]:
    """
    World totals. `last_update` is the fetch time when known, otherwise the
    newest row timestamp.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return None

    last_update = fetched_at
    if last_update is None and 'last_update' in df.columns:
        newest = df['last_update'].max()
        last_update = None if pd.isna(newest) else pd.Timestamp(newest).to_pydatetime()

    return GlobalReport(
        confirmed_count=max(int(df['confirmed'].sum()), 0),
        death_count=max(int(df['deaths'].sum()), 0),
        recovered_count=max(int(df['recovered'].sum()), 0),
        region_count=int(df['country_region'].nunique()),
        last_update=last_update,
    )
