# corona_map/data_processing/models.py
# Immutable report records shared by the data source, the map and the panel.

import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


class CaseCounts(BaseModel):
    """Case figures common to a single region and to the whole world."""
    model_config = ConfigDict(frozen=True)

    confirmed_count: int = Field(0, ge=0)
    death_count: int = Field(0, ge=0)
    recovered_count: int = Field(0, ge=0)

    @computed_field
    @property
    def active_count(self) -> int:
        return max(self.confirmed_count - self.death_count - self.recovered_count, 0)

    @computed_field
    @property
    def death_rate(self) -> float:
        return _percent(self.death_count, self.confirmed_count)

    @computed_field
    @property
    def recovery_rate(self) -> float:
        return _percent(self.recovered_count, self.confirmed_count)


class Report(CaseCounts):
    """One region's case counts at a point in time."""

    region_id: str
    name: str
    country: str
    province: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    last_update: Optional[datetime] = None

    @computed_field
    @property
    def is_province(self) -> bool:
        return bool(self.province)

    @property
    def long_name(self) -> str:
        return f"{self.province}, {self.country}" if self.province else self.country


class GlobalReport(CaseCounts):
    """World totals plus the time the data was last refreshed."""

    region_count: int = 0
    last_update: Optional[datetime] = None
