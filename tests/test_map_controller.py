# corona_map/tests/test_map_controller.py
# MAP CONTROLLER TESTS

import json
from datetime import date, timedelta
from unittest.mock import MagicMock

import pytest

from analytics import (MapController, PanelPosition, RefreshState, SubsetName,
                       select_subset)
from config.settings import DownloadConfig
from data_processing import VirusDataManager

# Fixtures are sourced from conftest.py

@pytest.fixture
def make_controller(presenter, now):
    def _make(source, **kwargs):
        kwargs.setdefault('clock', lambda: now)
        return MapController(source, presenter, **kwargs)
    return _make


@pytest.fixture
def empty_source(make_source, report_sets):
    """A source with nothing cached yet; it only loads once a refresh lands."""
    all_reports, main_reports = report_sets
    return make_source(all_reports, main_reports, last_update=None, load_ok=False)


def _region_ids(annotations):
    return [a.region_id for a in annotations]

# --- Loading & Subsets ---
def test_view_did_load_renders_every_region(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    assert controller.view_did_load() is True

    # Yukon has no cases and is left off the map.
    assert _region_ids(controller.annotations) == ['canada/ontario', 'canada/alberta', 'france/france']
    presenter.render_annotations.assert_called_once_with(controller.annotation_sets.all)
    assert len(controller.annotation_sets.main) == 2

def test_min_confirmed_filters_each_subset(make_controller, fresh_source):
    controller = make_controller(fresh_source, min_confirmed=150)
    controller.update()
    assert _region_ids(controller.annotation_sets.all) == ['canada/ontario', 'france/france']
    assert _region_ids(controller.annotation_sets.main) == ['canada/canada', 'france/france']

def test_update_is_idempotent(make_controller, fresh_source):
    controller = make_controller(fresh_source)
    controller.update()
    first = controller.annotation_sets
    controller.update()
    assert controller.annotation_sets == first
    assert controller.annotations == first.all

def test_failed_load_leaves_annotations_untouched(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.update()
    presenter.reset_mock()

    fresh_source.load_ok = False
    assert controller.update() is False
    assert len(controller.annotations) == 3
    presenter.render_annotations.assert_not_called()

def test_update_after_zoom_renders_selected_subset(make_controller, fresh_source):
    controller = make_controller(fresh_source)
    controller.view_did_load()
    controller.region_did_change(2.0)
    controller.update()
    assert controller.annotations == controller.annotation_sets.subset(SubsetName.MAIN)

# --- Refresh Orchestration ---
def test_fresh_data_skips_refresh(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.view_did_load()

    assert controller.view_did_appear() is False
    assert fresh_source.downloads == []
    assert controller.refresh_state is RefreshState.IDLE
    presenter.show_progress.assert_not_called()

def test_stale_data_refreshes_in_background(make_controller, stale_source, presenter):
    controller = make_controller(stale_source)
    controller.view_did_load()

    assert controller.view_did_appear() is True
    assert len(stale_source.downloads) == 1
    assert controller.is_refreshing
    # Regions are already on the map, so no blocking progress indicator.
    presenter.show_progress.assert_not_called()

    stale_source.downloads[0].set_result(True)
    assert controller.poll() is RefreshState.IDLE
    assert controller.last_refresh_outcome is RefreshState.SUCCESS
    assert stale_source.load_calls == 2
    presenter.hide_progress.assert_not_called()
    presenter.flash_error.assert_not_called()

def test_poll_before_completion_changes_nothing(make_controller, stale_source):
    controller = make_controller(stale_source)
    controller.view_did_load()
    controller.download_if_needed()

    assert controller.poll() is RefreshState.REFRESHING
    assert stale_source.load_calls == 1
    assert controller.last_refresh_outcome is None

def test_missing_data_always_refreshes(make_controller, empty_source, presenter):
    controller = make_controller(empty_source, max_data_age_hours=10_000)
    assert controller.view_did_load() is False
    assert controller.download_if_needed() is True
    presenter.show_progress.assert_called_once_with("Updating...")

def test_empty_map_refresh_success_hides_progress(make_controller, empty_source, presenter):
    controller = make_controller(empty_source)
    controller.view_did_load()
    controller.view_did_appear()

    empty_source.load_ok = True
    empty_source.downloads[0].set_result(True)
    controller.poll()

    presenter.hide_progress.assert_called_once_with()
    presenter.flash_error.assert_not_called()
    assert controller.last_refresh_outcome is RefreshState.SUCCESS
    assert len(controller.annotations) == 3

def test_empty_map_download_failure_flashes_error(make_controller, empty_source, presenter):
    controller = make_controller(empty_source, error_flash_seconds=0.5)
    controller.view_did_load()
    controller.view_did_appear()

    empty_source.downloads[0].set_result(False)
    controller.poll()

    presenter.hide_progress.assert_called_once_with()
    presenter.flash_error.assert_called_once_with(0.5)
    assert controller.last_refresh_outcome is RefreshState.FAILED
    # A failed download never triggers a reload.
    assert empty_source.load_calls == 1

def test_empty_map_load_failure_after_download_flashes_error(make_controller, empty_source, presenter):
    controller = make_controller(empty_source)
    controller.view_did_load()
    controller.view_did_appear()

    empty_source.downloads[0].set_result(True)
    controller.poll()

    presenter.flash_error.assert_called_once_with(1.0)
    assert controller.last_refresh_outcome is RefreshState.LOAD_FAILED
    assert empty_source.load_calls == 2

def test_background_failure_does_not_flash(make_controller, stale_source, presenter):
    controller = make_controller(stale_source)
    controller.view_did_load()
    controller.view_did_appear()

    stale_source.downloads[0].set_result(False)
    controller.poll()

    presenter.flash_error.assert_not_called()
    presenter.hide_progress.assert_not_called()
    assert controller.last_refresh_outcome is RefreshState.FAILED
    assert len(controller.annotations) == 3

def test_background_load_failure_keeps_rendered_set(make_controller, stale_source, presenter):
    controller = make_controller(stale_source)
    controller.view_did_load()
    rendered = controller.annotations
    controller.view_did_appear()

    stale_source.load_ok = False
    stale_source.downloads[0].set_result(True)
    controller.poll()

    assert controller.last_refresh_outcome is RefreshState.LOAD_FAILED
    assert controller.annotations == rendered
    presenter.flash_error.assert_not_called()

def test_download_exception_counts_as_failure(make_controller, empty_source, presenter):
    controller = make_controller(empty_source)
    controller.view_did_load()
    controller.view_did_appear()

    empty_source.downloads[0].set_exception(RuntimeError("worker crashed"))
    assert controller.poll() is RefreshState.IDLE
    assert controller.last_refresh_outcome is RefreshState.FAILED
    presenter.flash_error.assert_called_once()

def test_raising_reload_does_not_block_later_refreshes(make_controller, empty_source, presenter):
    controller = make_controller(empty_source)
    controller.view_did_load()
    controller.view_did_appear()

    empty_source.load = MagicMock(side_effect=RuntimeError("cache unreadable"))
    empty_source.downloads[0].set_result(True)
    with pytest.raises(RuntimeError, match="cache unreadable"):
        controller.poll()

    assert controller.refresh_state is RefreshState.IDLE
    assert controller.is_refreshing is False
    presenter.hide_progress.assert_called_once_with()
    assert controller.download_if_needed() is True
    assert len(empty_source.downloads) == 2

def test_only_one_refresh_in_flight(make_controller, stale_source):
    controller = make_controller(stale_source)
    controller.view_did_load()

    assert controller.download_if_needed() is True
    assert controller.download_if_needed() is False
    assert len(stale_source.downloads) == 1

    stale_source.downloads[0].set_result(True)
    controller.poll()
    # Data is still stale by the fake clock, so a new refresh may start.
    assert controller.download_if_needed() is True
    assert len(stale_source.downloads) == 2

def test_wait_times_out_while_refreshing(make_controller, stale_source):
    controller = make_controller(stale_source)
    controller.view_did_load()
    controller.download_if_needed()

    assert controller.wait(timeout=0.01) is RefreshState.REFRESHING
    stale_source.downloads[0].set_result(True)
    assert controller.wait(timeout=0.01) is RefreshState.IDLE
    assert controller.wait() is RefreshState.IDLE

def test_refresh_against_real_data_manager(tmp_path, presenter, now, daily_report_csv):
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    (cache_dir / "reports.csv").write_text(daily_report_csv, encoding='utf-8')
    (cache_dir / "reports_meta.json").write_text(
        json.dumps({'fetched_at': (now - timedelta(hours=7)).isoformat()}), encoding='utf-8')

    response = MagicMock(status_code=200, text=daily_report_csv)
    session = MagicMock()
    session.get.return_value = response
    manager = VirusDataManager(
        cache_dir=cache_dir, seed_path=None, reports_date=date(2023, 3, 9),
        url_template="https://example.test/{date:%m-%d-%Y}.csv",
        download_config=DownloadConfig(retries=0, backoff_seconds=0),
        session=session, clock=lambda: now,
    )
    controller = MapController(manager, presenter, clock=lambda: now)
    try:
        controller.view_did_load()
        # Nauru reports no cases and is filtered out.
        assert len(controller.annotations) == 5
        assert controller.view_did_appear() is True
        assert controller.wait(timeout=5) is RefreshState.IDLE
    finally:
        manager.shutdown(wait=True)

    assert controller.last_refresh_outcome is RefreshState.SUCCESS
    assert manager.global_report.last_update == now
    assert controller.download_if_needed() is False

# --- Map Events ---
def test_visible_region_changed_restyles_only(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.view_did_load()
    presenter.reset_mock()

    controller.visible_region_changed(3.0)
    presenter.restyle_annotations.assert_called_once_with(3.0)
    presenter.render_annotations.assert_not_called()
    assert controller.zoom_level == 3.0

def test_region_did_change_swaps_subsets(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.view_did_load()

    assert controller.region_did_change(2.0) is True
    assert controller.annotations == controller.annotation_sets.main
    assert controller.region_did_change(3.5) is False
    assert controller.region_did_change(4.5) is True
    assert controller.annotations == controller.annotation_sets.all
    assert presenter.render_annotations.call_count == 3

def test_region_did_change_skips_equal_sized_subsets(make_controller, make_source, make_report, presenter):
    all_reports = [make_report("Ontario", 200, country="Canada", province="Ontario"),
                   make_report("Lyon", 50, country="France", province="Lyon")]
    main_reports = [make_report("Canada", 200, country="Canada"),
                    make_report("France", 50, country="France")]
    controller = make_controller(make_source(all_reports, main_reports))
    controller.view_did_load()

    # The selector asks for MAIN, but equal sizes hide the change.
    assert select_subset(1.0) is SubsetName.MAIN
    assert controller.region_did_change(1.0) is False
    assert controller.annotations == controller.annotation_sets.all
    assert controller.zoom_level == 1.0

# --- Selection & Region Panel ---
def test_select_and_deselect_region(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.view_did_load()

    annotation = controller.annotation_for('canada/ontario')
    controller.did_select(annotation)
    assert controller.selected_report == annotation.report
    presenter.update_region_screen.assert_called_with(annotation.report)

    controller.did_deselect()
    assert controller.selected_report is None
    presenter.update_region_screen.assert_called_with(None)

def test_annotation_for_finds_inactive_subset(make_controller, fresh_source):
    controller = make_controller(fresh_source)
    controller.view_did_load()
    assert controller.annotation_for('canada/canada').report.confirmed_count == 300
    assert controller.annotation_for('atlantis') is None

def test_refresh_reresolves_selected_region(make_controller, stale_source, make_report):
    controller = make_controller(stale_source)
    controller.view_did_load()
    controller.did_select(controller.annotation_for('canada/ontario'))

    stale_source.staged_all = [make_report("Ontario", 250, country="Canada", province="Ontario")]
    controller.update()
    assert controller.selected_report.confirmed_count == 250

    stale_source.staged_all = [make_report("Alberta", 120, country="Canada", province="Alberta")]
    controller.update()
    assert controller.selected_report is None

def test_panel_positions_follow_lifecycle(make_controller, fresh_source, presenter):
    controller = make_controller(fresh_source)
    controller.view_did_load()
    assert controller.panel_position is PanelPosition.HIDDEN

    controller.view_did_appear()
    assert controller.panel_position is PanelPosition.HALF
    controller.show_region_screen()
    assert controller.panel_position is PanelPosition.FULL
    controller.hide_region_screen()
    assert controller.panel_position is PanelPosition.HALF
    controller.view_will_disappear()
    assert controller.panel_position is PanelPosition.HIDDEN
    presenter.move_panel.assert_called_with(PanelPosition.HIDDEN)

def test_appear_keeps_expanded_panel(make_controller, fresh_source):
    controller = make_controller(fresh_source)
    controller.view_did_load()
    controller.show_region_screen()
    controller.view_did_appear()
    assert controller.panel_position is PanelPosition.FULL
