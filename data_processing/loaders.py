# corona_map/data_processing/loaders.py
# ROBUST & INTEGRATED DATA LOADING

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, Field

from .helpers import DataPipeline, robust_json_load

logger = logging.getLogger(__name__)

# --- Pydantic Models for Type-Safe Configuration ---

class CsvConfig(BaseModel):
    """Defines the schema for loading and processing a CSV data source."""
    date_cols: List[str] = Field(default_factory=list)
    rename_map: Dict[str, str] = Field(default_factory=dict)
    dtype_map: Dict[str, str] = Field(default_factory=dict)
    default_values: Dict[str, Any] = Field(default_factory=dict)
    required_cols: List[str] = Field(default_factory=list)
    read_options: Dict[str, Any] = Field(default_factory=lambda: {'low_memory': False})

# --- Centralized Data Source Configuration ---

# Covers both generations of the daily report layout: the early
# 'Province/State, Latitude, Longitude' header and the later
# 'Province_State, Lat, Long_' header with county-level 'Admin2' rows.
DAILY_REPORTS_CONFIG = CsvConfig(
    date_cols=['last_update'],
    rename_map={'lat': 'latitude', 'long': 'longitude'},
    default_values={
        'admin2': '', 'province_state': '', 'country_region': '',
        'confirmed': 0, 'deaths': 0, 'recovered': 0,
        'latitude': float('nan'), 'longitude': float('nan'),
    },
    required_cols=['country_region', 'confirmed'],
)

CsvSource = Union[str, Path, io.IOBase]

# --- Main Loading Functions ---

def _read_csv(source: CsvSource, config: CsvConfig) -> pd.DataFrame:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            logger.error(f"CSV file not found at: {path}")
            return pd.DataFrame()
    return pd.read_csv(source, **config.read_options)


def load_daily_reports(source: CsvSource, config: CsvConfig = DAILY_REPORTS_CONFIG) -> pd.DataFrame:
    """
    Loads and cleans one daily report table.

    Returns an empty DataFrame when the source is missing, unreadable or
    lacks the required columns; callers treat that as a load failure.
    """
    try:
        raw_df = _read_csv(source, config)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        logger.error(f"Could not read daily reports from {source}: {e}")
        return pd.DataFrame()

    if raw_df.empty:
        return raw_df

    cleaned = (DataPipeline(raw_df)
        .clean_column_names()
        .rename_columns(config.rename_map)
        .get_dataframe()
    )
    missing_cols = set(config.required_cols) - set(cleaned.columns)
    if missing_cols:
        logger.critical(f"Schema validation failed for daily reports! Missing required columns: {missing_cols}")
        return pd.DataFrame()

    processed_df = (DataPipeline(cleaned)
        .standardize_missing_values(config.default_values)
        .cast_column_types(config.dtype_map)
        .convert_date_columns(config.date_cols)
        .get_dataframe()
    )
    processed_df = processed_df[processed_df['country_region'] != '']

    logger.info(f"Successfully loaded and processed {len(processed_df)} daily report rows.")
    return processed_df


def load_cache_metadata(path: Union[str, Path]) -> Dict[str, Any]:
    """Reads the cache sidecar written after each successful download."""
    if not Path(path).is_file():
        return {}
    data = robust_json_load(path)
    return data if isinstance(data, dict) else {}
