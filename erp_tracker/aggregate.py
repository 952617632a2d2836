from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence

from .models import DashboardData, DepartmentStats, IngestIssues, Task


def percent(part: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 for an empty total."""

    if total <= 0:
        return 0
    return int(math.floor(part / total * 100 + 0.5))


def next_deadline(tasks: Sequence[Task], now: datetime) -> Optional[date]:
    """Earliest date of an open task that is still strictly in the future."""

    upcoming = [
        task.parsed_date
        for task in tasks
        if not task.is_done
        and task.parsed_date is not None
        and datetime.combine(task.parsed_date, time.min) > now
    ]
    return min(upcoming, default=None)


def overdue_count(tasks: Sequence[Task], today: date) -> int:
    """Open tasks dated before ``today``; a task due today is not overdue yet."""

    return sum(
        1
        for task in tasks
        if not task.is_done and task.parsed_date is not None and task.parsed_date < today
    )


def department_stats(name: str, tasks: Sequence[Task], now: datetime) -> DepartmentStats:
    completed = sum(1 for task in tasks if task.is_done)
    return DepartmentStats(
        name=name,
        total_tasks=len(tasks),
        completed_tasks=completed,
        percentage=percent(completed, len(tasks)),
        next_deadline=next_deadline(tasks, now),
        overdue_count=overdue_count(tasks, now.date()),
    )


def aggregate(
    tasks: Sequence[Task],
    department_names: Sequence[str],
    *,
    now: datetime | None = None,
    issues: IngestIssues | None = None,
) -> DashboardData:
    """Group tasks by department and compute completion and deadline metrics.

    ``department_names`` fixes the output order. Departments without tasks are
    dropped from the result, as are tasks whose department is not listed.
    """

    if now is None:
        now = datetime.now()

    groups: Dict[str, List[Task]] = {name: [] for name in department_names}
    for task in tasks:
        if task.department in groups:
            groups[task.department].append(task)

    stats = tuple(
        department_stats(name, members, now)
        for name, members in groups.items()
        if members
    )
    completed_all = sum(1 for task in tasks if task.is_done)
    return DashboardData(
        tasks=tuple(tasks),
        department_stats=stats,
        overall_progress=percent(completed_all, len(tasks)),
        issues=issues or IngestIssues(),
        generated_at=now,
    )
