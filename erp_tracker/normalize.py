from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .classify import classify_department, classify_status
from .columns import ResolvedColumns
from .config import AppConfig
from .dates import DateStrategy, build_strategies, parse_date
from .models import IngestIssues, RawRecord, Task

LOGGER = logging.getLogger(__name__)


def _date_text(record: RawRecord, resolved: ResolvedColumns, date_position: int) -> str:
    text = record.get(resolved.date) or ""
    if not text:
        # Header/value misalignment: fall back to the conventional slot.
        text = record.value_at(date_position) or ""
    return text


def normalize_record(
    index: int,
    record: RawRecord,
    resolved: ResolvedColumns,
    config: AppConfig,
    strategies: Sequence[DateStrategy],
) -> Task:
    parsing = config.parsing

    description = (record.get(resolved.description) or "").strip()
    if not description:
        description = parsing.description_placeholder

    status_text = record.get(resolved.status) or parsing.default_status
    date_text = _date_text(record, resolved, config.columns.date_position)

    return Task(
        id=f"task-{index}",
        description=description,
        status=classify_status(status_text, parsing.done_markers),
        raw_date_text=date_text,
        parsed_date=parse_date(date_text, strategies),
        department=classify_department(
            description, config.departments, config.default_department
        ),
        raw_record=record,
    )


def normalize_records(
    records: Sequence[RawRecord],
    resolved: ResolvedColumns,
    config: AppConfig,
) -> Tuple[List[Task], IngestIssues]:
    """Turn raw rows into tasks; row problems degrade to defaults and are counted."""

    strategies = build_strategies(
        config.parsing.date_formats, fuzzy_fallback=config.parsing.fuzzy_date_fallback
    )
    tasks: List[Task] = []
    placeholder_descriptions = 0
    default_statuses = 0
    missing_dates = 0
    unparsed_dates = 0

    for index, record in enumerate(records):
        task = normalize_record(index, record, resolved, config, strategies)
        tasks.append(task)

        if not (record.get(resolved.description) or "").strip():
            placeholder_descriptions += 1
        if not record.get(resolved.status):
            default_statuses += 1
        if not task.raw_date_text.strip():
            missing_dates += 1
        elif task.parsed_date is None:
            unparsed_dates += 1
            LOGGER.debug(
                "Row %s: keeping unparseable date text %r", task.id, task.raw_date_text
            )

    issues = IngestIssues(
        placeholder_descriptions=placeholder_descriptions,
        default_statuses=default_statuses,
        missing_dates=missing_dates,
        unparsed_dates=unparsed_dates,
    )
    return tasks, issues
