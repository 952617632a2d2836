from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional, Protocol, Union

from .aggregate import aggregate
from .columns import resolve_columns
from .config import AppConfig
from .models import DashboardData, IngestIssues
from .normalize import normalize_records
from .sources import CsvExportSource, GoogleSheetsSource
from .tabular import Table, parse_csv, table_from_rows

LOGGER = logging.getLogger(__name__)


class TextSource(Protocol):
    def fetch_text(self) -> str: ...


class RowSource(Protocol):
    def fetch_values(self) -> list[list[str]]: ...


Source = Union[TextSource, RowSource]


def make_source(config: AppConfig) -> Source:
    if config.sheets is not None:
        return GoogleSheetsSource(config.sheets)
    return CsvExportSource(config.source)


def load_table(source: Source) -> Table:
    """Fetch and parse; FetchError and ParseError propagate unchanged."""

    fetch_values = getattr(source, "fetch_values", None)
    if fetch_values is not None:
        return table_from_rows(fetch_values())
    return parse_csv(source.fetch_text())


def _log_issues(issues: IngestIssues, total: int) -> None:
    if not issues.degraded:
        return
    LOGGER.warning(
        "Rows fell back to defaults (of %s): %s without description, %s without status, "
        "%s without date, %s with unparseable date",
        total,
        issues.placeholder_descriptions,
        issues.default_statuses,
        issues.missing_dates,
        issues.unparsed_dates,
    )


def build_dashboard(
    table: Table, config: AppConfig, *, now: datetime | None = None
) -> DashboardData:
    """Resolve columns, normalize every row and aggregate the result."""

    if not table.records:
        LOGGER.warning("No data rows found in the source sheet")
        return DashboardData.empty(generated_at=now or datetime.now())

    resolved = resolve_columns(table.headers, config.columns)
    tasks, issues = normalize_records(table.records, resolved, config)
    _log_issues(issues, len(tasks))

    data = aggregate(tasks, config.department_names, now=now, issues=issues)
    LOGGER.info(
        "Processed %s tasks across %s departments (%s%% complete)",
        len(data.tasks),
        len(data.department_stats),
        data.overall_progress,
    )
    return data


def run_pipeline(
    config: AppConfig,
    *,
    source: Source | None = None,
    now: datetime | None = None,
) -> DashboardData:
    source = source or make_source(config)
    table = load_table(source)
    return build_dashboard(table, config, now=now)


class DashboardSession:
    """Holds the latest snapshot for one consumer and serializes refreshes.

    A refresh that fails leaves the previous snapshot in place and re-raises.
    """

    def __init__(self, config: AppConfig, source: Source | None = None) -> None:
        self._config = config
        self._source = source or make_source(config)
        self._lock = threading.Lock()
        self._data: Optional[DashboardData] = None

    @property
    def data(self) -> Optional[DashboardData]:
        return self._data

    def refresh(self, *, now: datetime | None = None) -> DashboardData:
        with self._lock:
            data = run_pipeline(self._config, source=self._source, now=now)
            self._data = data
            return data
