# corona_map/config/settings.py
# CENTRALIZED CONFIGURATION HUB

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Literal, Optional, Tuple

from pydantic import (BaseModel, DirectoryPath, Field, FilePath,
                      computed_field, field_validator, model_validator)
from pydantic_settings import BaseSettings, SettingsConfigDict

settings_logger = logging.getLogger(__name__)

# --- Nested Models for Structured Configuration ---
class MapConfig(BaseModel):
    style: str = "carto-positron"
    default_center: Tuple[float, float] = (30.0, 10.0)
    default_zoom: float = 1.5
    zoom_threshold: float = 4.0  # above this, every region is shown
    label_zoom_threshold: float = 5.0
    marker_min_radius: float = 4.0; marker_max_radius: float = 40.0
    height_px: int = 640

class DownloadConfig(BaseModel):
    timeout_seconds: float = 20.0
    retries: int = 2
    backoff_seconds: float = 2.0
    lookback_days: int = 3

# --- Main Settings Class ---
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='CORONA_', case_sensitive=False, env_file='.env', env_file_encoding='utf-8', extra='ignore', env_nested_delimiter='__')

    PROJECT_ROOT_DIR: DirectoryPath = Path(__file__).resolve().parent.parent
    APP_NAME: str = "Corona Outbreak Map"; APP_VERSION: str = "1.4.0"
    ORGANIZATION_NAME: str = "Samabox"; SUPPORT_CONTACT_INFO: str = "support@samabox.com"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    ASSETS_DIR: DirectoryPath; DATA_SOURCES_DIR: DirectoryPath
    STYLE_CSS_PATH: FilePath
    CACHE_DIR: Path; SEED_REPORTS_PATH: Optional[Path] = None

    @model_validator(mode='before')
    @classmethod
    def set_default_paths(cls, values: Any) -> Any:
        if isinstance(values, dict):
            root = values.get('PROJECT_ROOT_DIR', Path(__file__).resolve().parent.parent)
            assets = Path(root) / "assets"; data = Path(root) / "data_sources"
            values.setdefault('ASSETS_DIR', assets); values.setdefault('DATA_SOURCES_DIR', data)
            values.setdefault('STYLE_CSS_PATH', assets / "style.css")
            values.setdefault('CACHE_DIR', data / "cache")
            values.setdefault('SEED_REPORTS_PATH', data / "reports_sample.csv")
        return values

    # --- Refresh & Filtering Policy ---
    MAX_DATA_AGE_HOURS: float = 6.0
    MIN_CONFIRMED_COUNT: int = 0  # annotations need strictly more than this
    ERROR_FLASH_SECONDS: float = 1.0

    # --- Remote Feed ---
    REPORTS_URL_TEMPLATE: str = (
        "https://raw.githubusercontent.com/CSSEGISandData/COVID-19/master/"
        "csse_covid_19_data/csse_covid_19_daily_reports/{date:%m-%d-%Y}.csv"
    )
    REPORTS_DATE: Optional[date] = Field(date(2023, 3, 9), description="Pin the feed to one day; unset to follow today")
    DOWNLOAD: DownloadConfig = DownloadConfig()

    @field_validator('REPORTS_DATE', mode='before')
    @classmethod
    def blank_date_follows_today(cls, value: Any) -> Any:
        # CORONA_REPORTS_DATE= (empty) unpins the feed.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    MAP: MapConfig = MapConfig()
    TOP_REGIONS_COUNT: int = 10

    COLOR_PRIMARY: str = "#1976D2"; COLOR_SECONDARY: str = "#546E7A"
    COLOR_BACKGROUND_CONTENT: str = "#FFFFFF"
    COLOR_TEXT_PRIMARY: str = "#343A40"; COLOR_TEXT_HEADINGS: str = "#1A2557"; COLOR_TEXT_MUTED: str = "#6C757D"
    COLOR_CONFIRMED: str = "#E53935"; COLOR_DEATHS: str = "#424242"
    COLOR_RECOVERED: str = "#43A047"; COLOR_ACTIVE: str = "#FB8C00"
    PLOTLY_COLORWAY: List[str] = [COLOR_CONFIRMED, COLOR_ACTIVE, COLOR_RECOVERED, COLOR_DEATHS, COLOR_SECONDARY]

    @computed_field
    @property
    def APP_FOOTER_TEXT(self) -> str: return f"© {datetime.now().year} {self.ORGANIZATION_NAME}. Data: Johns Hopkins CSSE COVID-19 daily reports."

try:
    settings = Settings()
    settings_logger.info(f"Settings loaded successfully. App: {settings.APP_NAME} v{settings.APP_VERSION}")
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize Pydantic settings. Error: {e}", exc_info=True)
    raise
