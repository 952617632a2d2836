from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_DEPARTMENTS, AppConfig, DepartmentRule, ParsingConfig
from .models import TaskStatus

DEFAULT_DEPARTMENT: str = AppConfig.model_fields["default_department"].default
DONE_MARKERS: tuple[str, ...] = ParsingConfig.model_fields["done_markers"].default


def classify_department(
    description: str,
    rules: Sequence[DepartmentRule] = DEFAULT_DEPARTMENTS,
    default: str = DEFAULT_DEPARTMENT,
) -> str:
    """Return the first department (in table order) with a keyword in the text."""

    text = description.lower()
    for rule in rules:
        if any(keyword in text for keyword in rule.keywords):
            return rule.name
    return default


def classify_status(status_text: str, done_markers: Sequence[str] = DONE_MARKERS) -> TaskStatus:
    text = status_text.lower()
    if any(marker in text for marker in done_markers):
        return TaskStatus.DONE
    return TaskStatus.PENDING
