# corona_map/data_processing/data_manager.py
# REPORT DATA SOURCE: LOCAL CACHE + REMOTE REFRESH

"""
Owns the report collections shown on the map.

`load()` reads the local cache (falling back to the bundled seed sample) and
rebuilds every collection wholesale. `download()` fetches the latest daily
report on a worker thread and writes it into the cache; it never touches the
in-memory collections, so callers must `load()` again after a successful
download. Completion is delivered once through the returned Future.
"""

import io
import json
import logging
import os
import tempfile
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

import requests

from config import settings
from config.settings import DownloadConfig
from .aggregation import build_country_reports, build_global_report, build_region_reports
from .errors import LoadFailure, RefreshFailure
from .loaders import load_cache_metadata, load_daily_reports
from .models import GlobalReport, Report

logger = logging.getLogger(__name__)

_UNSET = object()


def fetch_with_retry(
    session: requests.Session,
    url: str,
    *,
    timeout: float,
    retries: int = 2,
    backoff: float = 2.0,
) -> requests.Response:
    """GET *url* with automatic retry on transient failures.

    Retries on connection errors, timeouts, and 5xx responses.
    Raises on non-retryable errors (4xx) immediately.
    """
    last_exc: Optional[Exception] = None
    for attempt in range(1, retries + 2):
        try:
            resp = session.get(url, timeout=timeout)
            if resp.status_code < 500:
                resp.raise_for_status()
                return resp
            logger.warning("HTTP %d from %s (attempt %d/%d)", resp.status_code, url[:80], attempt, retries + 1)
            last_exc = requests.HTTPError(f"HTTP {resp.status_code} from {url}", response=resp)
        except (requests.ConnectionError, requests.Timeout) as exc:
            last_exc = exc
            logger.warning("Network error on %s (attempt %d/%d): %s", url[:80], attempt, retries + 1, exc)

        if attempt <= retries:
            time.sleep(backoff * attempt)

    raise last_exc or requests.ConnectionError(f"Failed after {retries + 1} attempts")


def _atomic_write(path: Path, payload: Union[str, bytes]) -> None:
    """Writes via a temp file in the same directory so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = payload.encode('utf-8') if isinstance(payload, str) else payload
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class VirusDataManager:
    """Report data source backed by a CSV cache and the daily report feed."""

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        seed_path: Optional[Path] = _UNSET,  # type: ignore[assignment]
        url_template: Optional[str] = None,
        reports_date: Optional[date] = _UNSET,  # type: ignore[assignment]
        download_config: Optional[DownloadConfig] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else settings.CACHE_DIR
        self.seed_path = settings.SEED_REPORTS_PATH if seed_path is _UNSET else seed_path
        self.url_template = url_template or settings.REPORTS_URL_TEMPLATE
        self.reports_date = settings.REPORTS_DATE if reports_date is _UNSET else reports_date
        self.download_config = download_config or settings.DOWNLOAD
        self.session = session or requests.Session()
        self._clock = clock
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="report-download")
        self._download_lock = threading.Lock()
        self._inflight: Optional[Future] = None

        self._all_reports: List[Report] = []
        self._main_reports: List[Report] = []
        self._global_report: Optional[GlobalReport] = None

    # --- Collections ---

    @property
    def cache_path(self) -> Path:
        return self.cache_dir / "reports.csv"

    @property
    def meta_path(self) -> Path:
        return self.cache_dir / "reports_meta.json"

    @property
    def all_reports(self) -> List[Report]:
        return list(self._all_reports)

    @property
    def main_reports(self) -> List[Report]:
        return list(self._main_reports)

    @property
    def global_report(self) -> Optional[GlobalReport]:
        return self._global_report

    # --- Loading ---

    def _source_path(self) -> Path:
        if self.cache_path.is_file():
            return self.cache_path
        if self.seed_path and Path(self.seed_path).is_file():
            logger.info(f"No report cache at {self.cache_path}; using seed data {self.seed_path}.")
            return Path(self.seed_path)
        raise LoadFailure(f"No report cache at {self.cache_path} and no seed data available.")

    def _fetched_at(self, source: Path) -> Optional[datetime]:
        if source != self.cache_path:
            return None
        raw = load_cache_metadata(self.meta_path).get('fetched_at')
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed fetched_at '{raw}' in {self.meta_path}.")
            return None

    def _load(self) -> None:
        source = self._source_path()
        df = load_daily_reports(source)
        if df.empty:
            raise LoadFailure(f"No usable report rows in {source}.")

        all_reports = build_region_reports(df)
        main_reports = build_country_reports(df)
        global_report = build_global_report(df, fetched_at=self._fetched_at(source))

        self._all_reports, self._main_reports, self._global_report = all_reports, main_reports, global_report
        logger.info(f"Loaded {len(all_reports)} regional and {len(main_reports)} country reports from {source.name}.")

    def load(self) -> bool:
        """Rebuilds all collections from local data. Previous data is kept on failure."""
        try:
            self._load()
            return True
        except LoadFailure as e:
            logger.warning(f"Report load failed: {e}")
            return False

    # --- Downloading ---

    def _candidate_urls(self) -> Iterator[str]:
        if self.reports_date is not None:
            yield self.url_template.format(date=self.reports_date)
            return
        today = self._clock().date()
        for days_back in range(self.download_config.lookback_days + 1):
            yield self.url_template.format(date=today - timedelta(days=days_back))

    def _fetch_latest(self) -> Tuple[str, requests.Response]:
        cfg = self.download_config
        for url in self._candidate_urls():
            try:
                return url, fetch_with_retry(
                    self.session, url,
                    timeout=cfg.timeout_seconds, retries=cfg.retries, backoff=cfg.backoff_seconds,
                )
            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status == 404:
                    logger.info(f"No daily report published at {url}; trying an earlier day.")
                    continue
                raise RefreshFailure(f"HTTP error from {url}: {e}") from e
            except requests.RequestException as e:
                raise RefreshFailure(f"Network failure fetching {url}: {e}") from e
        raise RefreshFailure("No daily report found within the lookback window.")

    def _download(self) -> None:
        url, resp = self._fetch_latest()
        body = resp.text
        if load_daily_reports(io.StringIO(body)).empty:
            raise RefreshFailure(f"Downloaded report from {url} is empty or malformed.")

        meta = {'fetched_at': self._clock().isoformat(), 'source_url': url}
        try:
            _atomic_write(self.cache_path, body)
            _atomic_write(self.meta_path, json.dumps(meta, indent=2))
        except OSError as e:
            raise RefreshFailure(f"Could not write report cache in {self.cache_dir}: {e}") from e
        logger.info(f"Downloaded {len(body)} bytes of report data from {url}.")

    def _download_task(self) -> bool:
        try:
            self._download()
            return True
        except RefreshFailure as e:
            logger.error(f"Report refresh failed: {e}")
            return False

    def download(self, completion: Optional[Callable[[bool], None]] = None) -> "Future[bool]":
        """
        Starts a background refresh of the cache.

        The returned Future resolves to True on success. `completion`, when
        given, is called exactly once with the same value on the worker thread.
        A call made while a refresh is still running joins that refresh.
        """
        with self._download_lock:
            future = self._inflight
            if future is None or future.done():
                future = self._executor.submit(self._download_task)
                self._inflight = future
        if completion is not None:
            future.add_done_callback(lambda f: completion(f.result()))
        return future

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)
        self.session.close()
