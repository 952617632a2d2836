from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class TaskStatus(str, Enum):
    DONE = "Done"
    PENDING = "Pending"
    # Declared for display compatibility; classification never produces it.
    IN_PROGRESS = "In Progress"


@dataclass(frozen=True, slots=True)
class RawRecord:
    """One source row: header/value pairs in column order plus the raw values."""

    pairs: Tuple[Tuple[str, str], ...]
    values: Tuple[str, ...]

    def get(self, header: str | None) -> Optional[str]:
        """Value of the first column named ``header``, or None when absent."""

        if header is None:
            return None
        for name, value in self.pairs:
            if name == header:
                return value
        return None

    def value_at(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.values):
            return self.values[index]
        return None

    def as_dict(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for name, value in self.pairs:
            result.setdefault(name, value)
        return result


@dataclass(frozen=True, slots=True)
class Task:
    """Normalized task row."""

    id: str
    description: str
    status: TaskStatus
    raw_date_text: str
    parsed_date: Optional[date]
    department: str
    raw_record: RawRecord = field(repr=False, compare=False)

    @property
    def is_done(self) -> bool:
        return self.status is TaskStatus.DONE


@dataclass(frozen=True, slots=True)
class DepartmentStats:
    name: str
    total_tasks: int
    completed_tasks: int
    percentage: int
    next_deadline: Optional[date]
    overdue_count: int


@dataclass(frozen=True, slots=True)
class IngestIssues:
    """Counts of rows that fell back to defaults during normalization."""

    placeholder_descriptions: int = 0
    default_statuses: int = 0
    missing_dates: int = 0
    unparsed_dates: int = 0

    @property
    def degraded(self) -> bool:
        return any(
            (
                self.placeholder_descriptions,
                self.default_statuses,
                self.missing_dates,
                self.unparsed_dates,
            )
        )


@dataclass(frozen=True, slots=True)
class DashboardData:
    """Result of one ingestion run; replaced wholesale on refresh."""

    tasks: Tuple[Task, ...]
    department_stats: Tuple[DepartmentStats, ...]
    overall_progress: int
    issues: IngestIssues = field(default_factory=IngestIssues)
    generated_at: Optional[datetime] = None

    @classmethod
    def empty(cls, generated_at: Optional[datetime] = None) -> "DashboardData":
        return cls(tasks=(), department_stats=(), overall_progress=0, generated_at=generated_at)

    @property
    def total_overdue(self) -> int:
        return sum(stats.overdue_count for stats in self.department_stats)
