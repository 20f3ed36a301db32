# corona_map/data_processing/helpers.py
# Fluent DataPipeline and shared conversion utilities.

"""
A collection of robust utility functions and a fluent DataPipeline class
for cleaning the raw daily report tables before aggregation.
"""
import json
import logging
import re
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# --- Standalone Utility Functions ---

NA_REGEX_PATTERN = re.compile(
    r'(?i)^\s*(nan|none|n/a|#n/a|np\.nan|nat|<na>|null|nil|na|undefined|unknown|-|)\s*$'
)

def convert_to_numeric(data_input: Any, default_value: Any = np.nan, target_type: Optional[Type] = None) -> Any:
    """
    Robustly converts various inputs to a numeric pandas Series or scalar,
    handling common "Not Available" string representations.
    """
    is_series = isinstance(data_input, pd.Series)
    series = data_input if is_series else pd.Series([data_input], dtype=object)

    if pd.api.types.is_object_dtype(series.dtype):
        series = series.replace(NA_REGEX_PATTERN, np.nan, regex=True)

    numeric_series = pd.to_numeric(series, errors='coerce')
    if not pd.isna(default_value):
        numeric_series = numeric_series.fillna(default_value)

    if target_type is int and pd.api.types.is_numeric_dtype(numeric_series.dtype):
        # Nullable integers only when NaNs survive the fill.
        numeric_series = numeric_series.astype(pd.Int64Dtype() if numeric_series.isnull().any() else int)
    elif target_type is float:
        numeric_series = numeric_series.astype(float)

    return numeric_series if is_series else (numeric_series.iloc[0] if not numeric_series.empty else default_value)


def robust_json_load(file_path: Union[str, Path]) -> Optional[Union[Dict, List]]:
    """Loads JSON data from a file with robust error handling and UTF-8 encoding."""
    path_obj = Path(file_path)
    if not path_obj.is_file():
        logger.error(f"JSON load failed: File not found at {path_obj.resolve()}")
        return None
    try:
        with path_obj.open('r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error(f"Error decoding JSON from {path_obj.resolve()}: {e}")
        return None
    except OSError as e:
        logger.error(f"An unexpected error occurred while reading {path_obj.resolve()}: {e}", exc_info=True)
        return None


class DataPipeline:
    """
    A fluent interface for applying a sequence of data processing operations.

    Usage:
        processed_df = (DataPipeline(raw_df)
                        .clean_column_names()
                        .rename_columns({'lat': 'latitude'})
                        .convert_date_columns(['last_update'])
                        .standardize_missing_values({'confirmed': 0, 'province_state': ''})
                        .get_dataframe())
    """
    def __init__(self, df: pd.DataFrame):
        if not isinstance(df, pd.DataFrame):
            raise TypeError("DataPipeline must be initialized with a pandas DataFrame.")
        self.df = df.copy()

    def get_dataframe(self) -> pd.DataFrame:
        """Returns the processed DataFrame."""
        return self.df

    def clean_column_names(self) -> 'DataPipeline':
        """
        Cleans column names: lowercase, underscore-separated, no duplicates.
        'Province/State' and 'Province_State' both become 'province_state'.
        """
        if len(self.df.columns) == 0:
            return self

        new_cols = (self.df.columns.astype(str).str.lower()
                    .str.replace(r'[^0-9a-zA-Z_]+', '_', regex=True)
                    .str.replace(r'__+', '_', regex=True).str.strip('_'))
        new_cols = [f"unnamed_col_{i}" if not name else name for i, name in enumerate(new_cols)]

        counts = Counter(new_cols)
        if max(counts.values()) > 1:
            seen_counts: Counter = Counter()
            final_cols = []
            for name in new_cols:
                if counts[name] > 1:
                    seen_counts[name] += 1
                    final_cols.append(f"{name}_{seen_counts[name]-1}")
                else:
                    final_cols.append(name)
            self.df.columns = final_cols
        else:
            self.df.columns = new_cols
        return self

    def rename_columns(self, rename_map: Dict[str, str]) -> 'DataPipeline':
        """Renames columns, skipping targets that already exist."""
        if not rename_map:
            return self
        applicable = {
            src: dst for src, dst in rename_map.items()
            if src in self.df.columns and dst not in self.df.columns
        }
        self.df = self.df.rename(columns=applicable)
        return self

    def cast_column_types(self, dtype_map: Dict[str, str]) -> 'DataPipeline':
        """Casts present columns to the requested dtypes, leaving failures untouched."""
        for col, dtype in (dtype_map or {}).items():
            if col not in self.df.columns:
                continue
            try:
                self.df[col] = self.df[col].astype(dtype)
            except (TypeError, ValueError) as e:
                logger.warning(f"Could not cast column '{col}' to {dtype}: {e}")
        return self

    def standardize_missing_values(self, default_values: Dict[str, Any]) -> 'DataPipeline':
        """
        Standardizes various "Not Available" formats to np.nan and then fills
        with provided defaults, inferring type from the default value.
        """
        if not default_values:
            return self

        for col, default in default_values.items():
            if col not in self.df.columns:
                self.df[col] = default
                continue
            if isinstance(default, (int, float, np.number)):
                target_type = int if isinstance(default, int) else float
                self.df[col] = convert_to_numeric(self.df[col], default_value=default, target_type=target_type)
            else:
                series = self.df[col].astype(object).replace(NA_REGEX_PATTERN, np.nan, regex=True)
                self.df[col] = series.fillna(str(default)).astype(str).str.strip()
        return self

    def convert_date_columns(self, date_columns: List[str], errors: str = 'coerce') -> 'DataPipeline':
        """Converts specified columns to UTC datetimes, coercing errors to NaT."""
        for col in date_columns or []:
            if col in self.df.columns:
                self.df[col] = pd.to_datetime(self.df[col], errors=errors, utc=True)
        return self
