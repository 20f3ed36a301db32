# corona_map/analytics/orchestrator.py
# MAP CONTROLLER: DATA SOURCE, POLICIES & PRESENTATION WIRING

import logging
from concurrent.futures import Future, wait as wait_for_futures
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from config import settings
from data_processing.models import GlobalReport, Report
from .annotations import AnnotationSets, AnnotationTuple, ReportAnnotation, build_annotation_sets
from .policies import SubsetName, select_subset, should_refresh

logger = logging.getLogger(__name__)


class PanelPosition(str, Enum):
    FULL = "full"
    HALF = "half"
    HIDDEN = "hidden"


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    SUCCESS = "success"
    LOAD_FAILED = "load_failed"
    FAILED = "failed"


class DataSource(Protocol):
    def load(self) -> bool: ...
    def download(self, completion: Optional[Callable[[bool], None]] = None) -> "Future[bool]": ...
    @property
    def all_reports(self) -> Sequence[Report]: ...
    @property
    def main_reports(self) -> Sequence[Report]: ...
    @property
    def global_report(self) -> Optional[GlobalReport]: ...


class Presenter(Protocol):
    def render_annotations(self, annotations: Sequence[ReportAnnotation]) -> None: ...
    def restyle_annotations(self, zoom_level: float) -> None: ...
    def show_progress(self, message: str) -> None: ...
    def hide_progress(self) -> None: ...
    def flash_error(self, delay: float) -> None: ...
    def update_region_screen(self, report: Optional[Report]) -> None: ...
    def move_panel(self, position: PanelPosition) -> None: ...


class MapController:
    """
    Binds a report data source and a presenter to the refresh and subset
    policies.

    A refresh runs as a Future owned by the data source. Its outcome is only
    applied on the caller's thread, through `poll()` or `wait()`, so all state
    here is touched from one thread. At most one refresh is in flight.
    """

    def __init__(
        self,
        data_source: DataSource,
        presenter: Presenter,
        *,
        max_data_age_hours: float = settings.MAX_DATA_AGE_HOURS,
        zoom_threshold: float = settings.MAP.zoom_threshold,
        min_confirmed: int = settings.MIN_CONFIRMED_COUNT,
        error_flash_seconds: float = settings.ERROR_FLASH_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.data_source = data_source
        self.presenter = presenter
        self.max_data_age_hours = max_data_age_hours
        self.zoom_threshold = zoom_threshold
        self.min_confirmed = min_confirmed
        self.error_flash_seconds = error_flash_seconds
        self._clock = clock

        self.annotation_sets = AnnotationSets()
        self.annotations: AnnotationTuple = ()
        self.zoom_level: Optional[float] = None
        self.selected_report: Optional[Report] = None
        self.panel_position = PanelPosition.HIDDEN

        self.refresh_state = RefreshState.IDLE
        self.last_refresh_outcome: Optional[RefreshState] = None
        self._pending: Optional["Future[bool]"] = None
        self._progress_shown = False

    # --- Lifecycle ---

    def view_did_load(self) -> bool:
        return self.update()

    def view_did_appear(self) -> bool:
        """Shows the panel and starts a refresh when the data is stale."""
        if self.panel_position is PanelPosition.HIDDEN:
            self._move_panel(PanelPosition.HALF)
        return self.download_if_needed()

    def view_will_disappear(self) -> None:
        self._move_panel(PanelPosition.HIDDEN)

    # --- Data ---

    def update(self) -> bool:
        """Loads from the data source and rebuilds every annotation subset."""
        if not self.data_source.load():
            return False
        self._rebuild()
        return True

    def _rebuild(self) -> None:
        self.annotation_sets = build_annotation_sets(self.data_source, self.min_confirmed)
        subset = SubsetName.ALL if self.zoom_level is None else select_subset(self.zoom_level, self.zoom_threshold)
        self._render(self.annotation_sets.subset(subset))

        if self.selected_report is not None:
            refreshed = self.annotation_for(self.selected_report.region_id)
            self.selected_report = refreshed.report if refreshed else None
        self.presenter.update_region_screen(self.selected_report)

    def _render(self, annotations: AnnotationTuple) -> None:
        self.annotations = annotations
        self.presenter.render_annotations(annotations)

    # --- Refresh ---

    @property
    def is_refreshing(self) -> bool:
        return self.refresh_state is RefreshState.REFRESHING

    def download_if_needed(self) -> bool:
        """Starts a refresh when the staleness policy asks for one. Returns True if started."""
        if self.is_refreshing:
            logger.debug("Refresh already in flight; not starting another.")
            return False

        global_report = self.data_source.global_report
        last_updated = global_report.last_update if global_report else None
        if not should_refresh(last_updated, self._clock(), self.max_data_age_hours):
            return False

        self._progress_shown = not self.annotations
        if self._progress_shown:
            self.presenter.show_progress("Updating...")

        logger.info(f"Report data stale (last update: {last_updated}); starting refresh.")
        self.refresh_state = RefreshState.REFRESHING
        self._pending = self.data_source.download()
        return True

    def poll(self) -> RefreshState:
        """Applies a finished refresh, if any, without blocking."""
        if self._pending is not None and self._pending.done():
            self._finish_refresh(self._pending)
        return self.refresh_state

    def wait(self, timeout: Optional[float] = None) -> RefreshState:
        """Blocks up to `timeout` seconds for the in-flight refresh, then applies it."""
        if self._pending is None:
            return self.refresh_state
        wait_for_futures([self._pending], timeout=timeout)
        return self.poll()

    def _finish_refresh(self, future: "Future[bool]") -> None:
        self._pending = None
        try:
            try:
                downloaded = bool(future.result())
            except Exception as e:
                logger.error(f"Report refresh raised unexpectedly: {e}", exc_info=True)
                downloaded = False

            if self._progress_shown:
                self.presenter.hide_progress()

            if not downloaded:
                outcome = RefreshState.FAILED
            elif self.update():
                outcome = RefreshState.SUCCESS
            else:
                outcome = RefreshState.LOAD_FAILED

            if outcome is not RefreshState.SUCCESS and self._progress_shown:
                self.presenter.flash_error(self.error_flash_seconds)

            logger.info(f"Refresh finished: {outcome.value}.")
            self.last_refresh_outcome = outcome
        finally:
            # A raising load must not leave the controller stuck mid-refresh.
            self.refresh_state = RefreshState.IDLE
            self._progress_shown = False

    # --- Map Events ---

    def visible_region_changed(self, zoom_level: float) -> None:
        self.zoom_level = zoom_level
        self.presenter.restyle_annotations(zoom_level)

    def region_did_change(self, zoom_level: float) -> bool:
        """
        Swaps the rendered subset when the zoom level calls for the other one.

        Sets are compared by size only: if ALL and MAIN hold the same number of
        annotations, the swap is skipped even when their members differ.
        """
        self.zoom_level = zoom_level
        target = self.annotation_sets.subset(select_subset(zoom_level, self.zoom_threshold))
        if len(self.annotations) == len(target):
            return False
        self._render(target)
        return True

    def annotation_for(self, region_id: str) -> Optional[ReportAnnotation]:
        for annotation in (*self.annotations, *self.annotation_sets.all, *self.annotation_sets.main):
            if annotation.region_id == region_id:
                return annotation
        return None

    def did_select(self, annotation: Optional[ReportAnnotation]) -> None:
        self.update_region_screen(annotation.report if annotation else None)

    def did_deselect(self) -> None:
        self.update_region_screen(None)

    # --- Region Panel ---

    def update_region_screen(self, report: Optional[Report]) -> None:
        self.selected_report = report
        self.presenter.update_region_screen(report)

    def show_region_screen(self) -> None:
        self._move_panel(PanelPosition.FULL)

    def hide_region_screen(self) -> None:
        self._move_panel(PanelPosition.HALF)

    def _move_panel(self, position: PanelPosition) -> None:
        self.panel_position = position
        self.presenter.move_panel(position)
