from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Sequence

from .models import DashboardData, DepartmentStats, Task, TaskStatus

STATUS_FILTERS = ("all", "done", "pending")
SORT_KEYS = ("description", "date", "status")


def find_department(data: DashboardData, name: str) -> DepartmentStats | None:
    wanted = name.strip().casefold()
    for stats in data.department_stats:
        if stats.name.casefold() == wanted:
            return stats
    return None


def tasks_for_department(data: DashboardData, name: str) -> List[Task]:
    """Tasks of the selected department, in source order."""

    return [task for task in data.tasks if task.department == name]


def filter_tasks(
    tasks: Sequence[Task], search: str = "", status_filter: str = "all"
) -> List[Task]:
    """Keep tasks whose description contains ``search`` and that match the status filter.

    ``pending`` means anything that is not Done.
    """

    if status_filter not in STATUS_FILTERS:
        msg = f"Unknown status filter '{status_filter}'; expected one of {', '.join(STATUS_FILTERS)}"
        raise ValueError(msg)

    needle = search.lower()
    result = []
    for task in tasks:
        if needle and needle not in task.description.lower():
            continue
        if status_filter == "done" and not task.is_done:
            continue
        if status_filter == "pending" and task.is_done:
            continue
        result.append(task)
    return result


def sort_tasks(tasks: Sequence[Task], key: str = "date", descending: bool = False) -> List[Task]:
    """Sort for display. Undated tasks always go last when sorting by date."""

    if key == "date":
        dated = [task for task in tasks if task.parsed_date is not None]
        undated = [task for task in tasks if task.parsed_date is None]
        dated.sort(key=lambda task: task.parsed_date, reverse=descending)
        return dated + undated
    if key == "description":
        return sorted(tasks, key=lambda task: task.description.casefold(), reverse=descending)
    if key == "status":
        return sorted(tasks, key=lambda task: task.status.value, reverse=descending)
    msg = f"Unknown sort key '{key}'; expected one of {', '.join(SORT_KEYS)}"
    raise ValueError(msg)


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def task_to_dict(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "description": task.description,
        "status": task.status.value,
        "date": task.raw_date_text,
        "parsed_date": _iso(task.parsed_date),
        "department": task.department,
    }


def dashboard_to_dict(data: DashboardData) -> Dict[str, Any]:
    return {
        "generated_at": data.generated_at.isoformat() if data.generated_at else None,
        "overall_progress": data.overall_progress,
        "total_overdue": data.total_overdue,
        "departments": [
            {
                "name": stats.name,
                "total_tasks": stats.total_tasks,
                "completed_tasks": stats.completed_tasks,
                "percentage": stats.percentage,
                "next_deadline": _iso(stats.next_deadline),
                "overdue_count": stats.overdue_count,
            }
            for stats in data.department_stats
        ],
        "issues": {
            "placeholder_descriptions": data.issues.placeholder_descriptions,
            "default_statuses": data.issues.default_statuses,
            "missing_dates": data.issues.missing_dates,
            "unparsed_dates": data.issues.unparsed_dates,
        },
        "tasks": [task_to_dict(task) for task in data.tasks],
    }


def _short_date(value: date | None) -> str:
    return value.strftime("%b %d").replace(" 0", " ") if value else "-"


def render_dashboard(data: DashboardData) -> str:
    lines = [
        f"Overall progress: {data.overall_progress}%  "
        f"({len(data.tasks)} tasks, {data.total_overdue} overdue)",
    ]
    if not data.department_stats:
        lines.append("No tasks found.")
        return "\n".join(lines)

    width = max(len(stats.name) for stats in data.department_stats)
    lines.append("")
    lines.append(f"{'Department':<{width}}  Done/Total     %  Overdue  Next")
    for stats in data.department_stats:
        done_total = f"{stats.completed_tasks}/{stats.total_tasks}"
        lines.append(
            f"{stats.name:<{width}}  {done_total:>10}  {stats.percentage:>4}  "
            f"{stats.overdue_count:>7}  {_short_date(stats.next_deadline)}"
        )
    return "\n".join(lines)


def render_department(stats: DepartmentStats, tasks: Sequence[Task], today: date) -> str:
    lines = [
        f"{stats.name}: {stats.completed_tasks}/{stats.total_tasks} done "
        f"({stats.percentage}%), {stats.overdue_count} overdue",
        "",
    ]
    if not tasks:
        lines.append("No tasks found matching your filters.")
        return "\n".join(lines)

    for task in tasks:
        marker = ""
        if (
            task.status is not TaskStatus.DONE
            and task.parsed_date is not None
            and task.parsed_date < today
        ):
            marker = "  [overdue]"
        when = task.parsed_date.isoformat() if task.parsed_date else (task.raw_date_text or "-")
        lines.append(f"{task.status.value:<8} {when:<12} {task.description}{marker}")
    return "\n".join(lines)
