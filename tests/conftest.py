from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytest

from erp_tracker.config import AppConfig
from erp_tracker.models import RawRecord, Task, TaskStatus
from erp_tracker.tabular import table_from_rows

FIXED_NOW = datetime(2024, 3, 15, 10, 30)

SAMPLE_CSV = """\
No, Task Description ,Current Status,Owner,EDD
1,Process payroll adjustments,Completed,Aisha,15-Jan-24
2,Tender for new warehouse racks,,Omar,2024-02-30
3,Configure bank reconciliation,In progress,Lina,20/03/2024

4,Stock count at main store,Done,Omar,TBD
5,Go-live review,Pending,Aisha,
"""


class FakeTextSource:
    def __init__(self, text: str = SAMPLE_CSV, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls = 0

    def fetch_text(self) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


class FakeRowSource:
    def __init__(self, rows: list[list[str]]) -> None:
        self.rows = rows

    def fetch_values(self) -> list[list[str]]:
        return self.rows


def record_from(mapping: dict[str, str]) -> RawRecord:
    table = table_from_rows([list(mapping), list(mapping.values())])
    return table.records[0]


def make_task(
    index: int,
    *,
    department: str = "Finance",
    done: bool = False,
    due: Optional[date] = None,
    description: str | None = None,
) -> Task:
    return Task(
        id=f"task-{index}",
        description=description or f"Task {index}",
        status=TaskStatus.DONE if done else TaskStatus.PENDING,
        raw_date_text=due.isoformat() if due else "",
        parsed_date=due,
        department=department,
        raw_record=RawRecord(pairs=(), values=()),
    )


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def _clear_source_override(monkeypatch):
    monkeypatch.delenv("ERP_TRACKER_SOURCE_URL", raising=False)
