from datetime import date

from conftest import record_from

from erp_tracker.columns import resolve_columns
from erp_tracker.config import ParsingConfig
from erp_tracker.models import TaskStatus
from erp_tracker.normalize import normalize_records
from erp_tracker.tabular import table_from_rows


def _normalize(table, config):
    resolved = resolve_columns(table.headers, config.columns)
    return normalize_records(table.records, resolved, config)


def test_completed_payroll_row(config):
    record = record_from({"Task": "Process payroll adjustments", "Status": "Completed", "EDD": "15-Jan-24"})
    resolved = resolve_columns(["Task", "Status", "EDD"], config.columns)

    (task,), _ = normalize_records([record], resolved, config)

    assert task.id == "task-0"
    assert task.department == "HR & Payroll"
    assert task.status is TaskStatus.DONE
    assert task.parsed_date == date(2024, 1, 15)
    assert task.raw_date_text == "15-Jan-24"
    assert task.raw_record is record


def test_invalid_calendar_date_keeps_raw_text(config):
    record = record_from({"Task": "Tender for new warehouse racks", "Status": "", "EDD": "2024-02-30"})
    resolved = resolve_columns(["Task", "Status", "EDD"], config.columns)

    (task,), issues = normalize_records([record], resolved, config)

    assert task.status is TaskStatus.PENDING
    assert task.parsed_date is None
    assert task.raw_date_text == "2024-02-30"
    assert task.department == "Projects & Sales"
    assert issues.default_statuses == 1
    assert issues.unparsed_dates == 1


def test_empty_description_uses_placeholder_and_ids_follow_row_order(config):
    table = table_from_rows(
        [
            ["Task", "Status"],
            ["", "Done"],
            ["   ", "Pending"],
            ["Salary review", "Pending"],
        ]
    )

    tasks, issues = _normalize(table, config)

    assert [task.id for task in tasks] == ["task-0", "task-1", "task-2"]
    assert tasks[0].description == "Untitled Task"
    assert tasks[1].description == "Untitled Task"
    assert tasks[0].department == "General"
    assert tasks[2].department == "HR & Payroll"
    assert issues.placeholder_descriptions == 2
    assert issues.missing_dates == 3
    assert issues.degraded


def test_empty_date_cell_falls_back_to_column_x_value(config):
    headers = ["Task", "Status", "Deadline"] + [f"Col {i}" for i in range(3, 25)]
    row = ["Audit fixed assets", "Pending", ""] + [""] * 22
    row[23] = "15-Jan-24"
    table = table_from_rows([headers, row])

    (task,), _ = _normalize(table, config)

    assert task.raw_date_text == "15-Jan-24"
    assert task.parsed_date == date(2024, 1, 15)


def test_missing_status_column_defaults_to_pending(config):
    table = table_from_rows([["Description", "Owner"], ["Payment voucher review", "Lina"]])

    (task,), issues = _normalize(table, config)

    assert task.status is TaskStatus.PENDING
    assert task.department == "Finance"
    assert issues.default_statuses == 1


def test_short_row_degrades_instead_of_failing(config):
    table = table_from_rows([["Task", "Status", "EDD"], ["Install database server"]])

    (task,), _ = _normalize(table, config)

    assert task.status is TaskStatus.PENDING
    assert task.parsed_date is None
    assert task.raw_date_text == ""
    assert task.department == "Setup & Admin"


def test_parsing_settings_come_from_config(config):
    custom = config.model_copy(
        update={
            "parsing": ParsingConfig(
                date_formats=("%d.%m.%Y",),
                fuzzy_date_fallback=False,
                done_markers=("closed",),
                description_placeholder="(no title)",
            )
        }
    )
    table = table_from_rows([["Task", "Status", "EDD"], ["", "Closed", "05.03.2024"], ["X", "Done", "2024-03-05"]])

    first, second = _normalize(table, custom)[0]

    assert first.description == "(no title)"
    assert first.status is TaskStatus.DONE
    assert first.parsed_date == date(2024, 3, 5)
    assert second.status is TaskStatus.PENDING
    assert second.parsed_date is None
