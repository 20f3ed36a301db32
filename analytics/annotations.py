# corona_map/analytics/annotations.py
# MAP ANNOTATIONS BUILT FROM REPORTS

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence, Tuple

from config import settings
from config.settings import MapConfig
from data_processing.models import Report
from .policies import SubsetName

logger = logging.getLogger(__name__)


class ReportCollections(Protocol):
    """The slice of the data source annotation building reads."""
    @property
    def all_reports(self) -> Sequence[Report]: ...
    @property
    def main_reports(self) -> Sequence[Report]: ...


@dataclass(frozen=True)
class MarkerStyle:
    radius: float
    show_label: bool


@dataclass(frozen=True)
class ReportAnnotation:
    """A map-displayable projection of one Report."""
    report: Report

    @property
    def region_id(self) -> str:
        return self.report.region_id

    @property
    def latitude(self) -> float:
        return self.report.latitude

    @property
    def longitude(self) -> float:
        return self.report.longitude

    @property
    def title(self) -> str:
        return self.report.long_name

    @property
    def subtitle(self) -> str:
        return f"{self.report.confirmed_count:,} confirmed"

    def render_at(self, zoom_level: float, map_config: MapConfig = settings.MAP) -> MarkerStyle:
        """Marker size grows with case count and zoom; labels only when zoomed in."""
        zoom_scale = 1.0 + max(zoom_level - 2.0, 0.0) * 0.25
        base = map_config.marker_min_radius + 2.5 * math.log10(self.report.confirmed_count + 1)
        radius = min(max(base * zoom_scale, map_config.marker_min_radius), map_config.marker_max_radius)
        return MarkerStyle(radius=radius, show_label=zoom_level > map_config.label_zoom_threshold)


AnnotationTuple = Tuple[ReportAnnotation, ...]


@dataclass(frozen=True)
class AnnotationSets:
    all: AnnotationTuple = ()
    main: AnnotationTuple = ()

    def subset(self, name: SubsetName) -> AnnotationTuple:
        return self.all if name is SubsetName.ALL else self.main


def _annotate(reports: Iterable[Report], min_confirmed: int) -> AnnotationTuple:
    return tuple(ReportAnnotation(r) for r in reports if r.confirmed_count > min_confirmed)


def build_annotation_sets(source: ReportCollections, min_confirmed: int = 0) -> AnnotationSets:
    """Builds both subsets from scratch; each is filtered independently."""
    sets = AnnotationSets(
        all=_annotate(source.all_reports, min_confirmed),
        main=_annotate(source.main_reports, min_confirmed),
    )
    logger.debug(f"Built annotation sets: {len(sets.all)} all, {len(sets.main)} main.")
    return sets
