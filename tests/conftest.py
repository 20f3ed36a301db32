# corona_map/tests/conftest.py
# PYTEST FIXTURES

import sys
from pathlib import Path

# --- Path Setup for Module Imports ---
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import io
from concurrent.futures import Future
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from unittest.mock import MagicMock

import pandas as pd
import pytest

from analytics import Presenter
from data_processing import GlobalReport, Report, load_daily_reports

NOW = datetime(2023, 3, 10, 12, 0, tzinfo=timezone.utc)

# Later feed layout: county rows, an unlocated province and a (0, 0) bucket.
DAILY_REPORT_CSV = """FIPS,Admin2,Province_State,Country_Region,Last_Update,Lat,Long_,Confirmed,Deaths,Recovered,Active,Combined_Key
,,Alberta,Canada,2023-03-09 04:21:03,53.9333,-116.5765,100,2,,,"Alberta, Canada"
,,Ontario,Canada,2023-03-09 04:21:03,51.2538,-85.3232,200,4,,,"Ontario, Canada"
,,Unknown,Canada,2023-03-09 04:21:03,,,5,0,,,"Unknown, Canada"
6037,Los Angeles,California,US,2023-03-10 04:21:03,34.3,-118.2,1000,10,,,"Los Angeles, California, US"
6073,San Diego,California,US,2023-03-10 04:21:03,33.0,-116.7,500,5,,,"San Diego, California, US"
90048,Unassigned,Texas,US,2023-03-10 04:21:03,0,0,10,0,,,"Unassigned, Texas, US"
48201,Harris,Texas,US,2023-03-10 04:21:03,29.8,-95.4,300,3,,,"Harris, Texas, US"
,,,France,2023-03-10 04:21:03,46.2276,2.2137,400,8,20,,France
,,,Nauru,2023-03-10 04:21:03,-0.5228,166.9315,0,0,,,Nauru
"""

# Early feed layout.
LEGACY_REPORT_CSV = """Province/State,Country/Region,Last Update,Confirmed,Deaths,Recovered,Latitude,Longitude
Hubei,Mainland China,2020-03-01T10:13:19,66907,2761,31536,30.9756,112.2707
,South Korea,2020-03-01T23:43:03,3736,17,30,36.0000,128.0000
"""


@pytest.fixture
def daily_report_csv() -> str:
    return DAILY_REPORT_CSV


@pytest.fixture
def legacy_report_csv() -> str:
    return LEGACY_REPORT_CSV


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def daily_report_df() -> pd.DataFrame:
    """The sample daily report after loading and cleaning."""
    return load_daily_reports(io.StringIO(DAILY_REPORT_CSV))


@pytest.fixture
def make_report():
    """Factory for Report records with sensible defaults."""
    counter = {'n': 0}

    def _make(name: Optional[str] = None, confirmed: int = 10, country: str = "Testland",
              province: str = "", deaths: int = 0, recovered: int = 0) -> Report:
        counter['n'] += 1
        name = name or f"Region {counter['n']}"
        return Report(
            region_id=f"{country.lower()}/{name.lower().replace(' ', '-')}",
            name=name, country=country, province=province,
            latitude=10.0 + counter['n'], longitude=20.0 + counter['n'],
            confirmed_count=confirmed, death_count=deaths, recovered_count=recovered,
        )
    return _make


class FakeDataSource:
    """
    In-memory data source. `load()` publishes the staged collections, so a
    test can stage new data and observe when the controller reloads it.
    """

    def __init__(self, all_reports: List[Report], main_reports: List[Report],
                 last_update: Optional[datetime] = None, load_ok: bool = True):
        self.staged_all = list(all_reports)
        self.staged_main = list(main_reports)
        self.staged_last_update = last_update
        self.load_ok = load_ok
        self.all_reports: List[Report] = []
        self.main_reports: List[Report] = []
        self.global_report: Optional[GlobalReport] = None
        self.load_calls = 0
        self.downloads: List[Future] = []

    def load(self) -> bool:
        self.load_calls += 1
        if not self.load_ok:
            return False
        self.all_reports = list(self.staged_all)
        self.main_reports = list(self.staged_main)
        self.global_report = GlobalReport(
            confirmed_count=sum(r.confirmed_count for r in self.staged_main),
            last_update=self.staged_last_update,
        )
        return True

    def download(self, completion=None) -> Future:
        future: Future = Future()
        if completion is not None:
            future.add_done_callback(lambda f: completion(f.result()))
        self.downloads.append(future)
        return future


@pytest.fixture
def report_sets(make_report):
    """Three regional reports (one with no cases) and two country reports."""
    all_reports = [
        make_report("Ontario", 200, country="Canada", province="Ontario"),
        make_report("Alberta", 100, country="Canada", province="Alberta"),
        make_report("Yukon", 0, country="Canada", province="Yukon"),
        make_report("France", 400, country="France"),
    ]
    main_reports = [
        make_report("Canada", 300, country="Canada"),
        make_report("France", 400, country="France"),
    ]
    return all_reports, main_reports


@pytest.fixture
def make_source():
    return FakeDataSource


@pytest.fixture
def fresh_source(report_sets) -> FakeDataSource:
    all_reports, main_reports = report_sets
    return FakeDataSource(all_reports, main_reports, last_update=NOW - timedelta(hours=3))


@pytest.fixture
def stale_source(report_sets) -> FakeDataSource:
    all_reports, main_reports = report_sets
    return FakeDataSource(all_reports, main_reports, last_update=NOW - timedelta(hours=7))


@pytest.fixture
def presenter() -> MagicMock:
    return MagicMock(spec=Presenter)
