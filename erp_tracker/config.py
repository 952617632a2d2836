from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

DEFAULT_EXPORT_URL = (
    "https://docs.google.com/spreadsheets/d/"
    "1NJAWsl2n0i-rbZR0vpSUiFdOEYOV-JAQZyMy3MsjVKA/export?format=csv"
)
SOURCE_URL_ENV = "ERP_TRACKER_SOURCE_URL"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class SourceConfig(_FrozenModel):
    export_url: str = Field(
        DEFAULT_EXPORT_URL,
        description="Published CSV export URL of the tracking spreadsheet",
    )
    request_timeout: int = Field(
        30,
        gt=0,
        description="Timeout in seconds for the export request",
    )

    @field_validator("export_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("export_url must be an http(s) URL")
        return value


class SheetsConfig(_FrozenModel):
    credentials_file: Path = Field(
        ..., description="Path to the Google service account JSON credentials"
    )
    spreadsheet_id: str = Field(..., description="ID of the tracking spreadsheet")
    sheet_name: str = Field(..., description="Tab name that holds the task list")

    @field_validator("credentials_file")
    @classmethod
    def _expand_credentials_path(cls, value: Path) -> Path:
        return value.expanduser().resolve()


class ColumnsConfig(_FrozenModel):
    description: Tuple[str, ...] = Field(
        (
            "Work Breakdown Structure Task Description",
            "Task Description",
            "Description",
            "Task",
        ),
        description="Header synonyms for the task description, most specific first",
    )
    status: Tuple[str, ...] = Field(
        ("Current Status", "Status"),
        description="Header synonyms for the status column, most specific first",
    )
    status_fallback: str = Field(
        "Status",
        description="Header used for status when no synonym matches, even if absent",
    )
    date: Tuple[str, ...] = Field(
        ("EDD at Site", "EDD", "Target Date", "Deadline", "Date"),
        description="Header synonyms for the deadline column, most specific first",
    )
    date_position: int = Field(
        23,
        ge=0,
        description="0-based position conventionally holding the deadline column (column X)",
    )
    date_position_marker: str = Field(
        "edd",
        min_length=1,
        description="Normalized text that makes the positional header win outright",
    )


class DepartmentRule(_FrozenModel):
    name: str = Field(..., min_length=1)
    keywords: Tuple[str, ...] = Field(..., min_length=1)

    @field_validator("keywords")
    @classmethod
    def _lowercase_keywords(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(word.lower() for word in value)


DEFAULT_DEPARTMENTS: Tuple[DepartmentRule, ...] = (
    DepartmentRule(
        name="HR & Payroll",
        keywords=(
            "employee", "payroll", "leave", "salary", "wps",
            "recruit", "candidate", "personnel", "hr",
        ),
    ),
    DepartmentRule(
        name="Finance",
        keywords=(
            "finance", "account", "payment", "voucher", "ledger", "asset",
            "bank", "tax", "p&l", "balance", "audit",
        ),
    ),
    DepartmentRule(
        name="Procurement",
        keywords=("purchase", "supplier", "lpo", "quotation", "procurement", "vendor"),
    ),
    # Must stay ahead of "Inventory & Stores": "tender ... warehouse" is a project row.
    DepartmentRule(
        name="Projects & Sales",
        keywords=(
            "project", "boq", "job", "costing", "estimate", "tender",
            "sales", "crm", "contract",
        ),
    ),
    DepartmentRule(
        name="Inventory & Stores",
        keywords=("stock", "inventory", "material", "store", "warehouse", "item"),
    ),
    DepartmentRule(
        name="Equipment & Workshop",
        keywords=(
            "equipment", "workshop", "vehicle", "service", "maintenance",
            "repair", "machinery",
        ),
    ),
    DepartmentRule(
        name="Setup & Admin",
        keywords=(
            "srs", "database", "master", "installation", "setup", "admin",
            "user", "role", "configuration", "meeting", "kickoff",
        ),
    ),
)

DEFAULT_DATE_FORMATS: Tuple[str, ...] = (
    "%d-%b-%y",  # Google Sheets default export, e.g. 15-Jan-24
    "%d-%b-%Y",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
)


class ParsingConfig(_FrozenModel):
    date_formats: Tuple[str, ...] = Field(
        DEFAULT_DATE_FORMATS,
        min_length=1,
        description="strptime patterns tried in order before the free-form fallback",
    )
    fuzzy_date_fallback: bool = Field(
        True,
        description="Fall back to dateutil for dates no explicit pattern accepts",
    )
    done_markers: Tuple[str, ...] = Field(
        ("done", "completed"),
        min_length=1,
        description="Status substrings that mark a task as Done (case-insensitive)",
    )
    default_status: str = Field("Pending", description="Status text used for empty cells")
    description_placeholder: str = Field(
        "Untitled Task", description="Description used for empty cells"
    )

    @field_validator("done_markers")
    @classmethod
    def _lowercase_markers(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(marker.lower() for marker in value)


class AppConfig(_FrozenModel):
    source: SourceConfig = Field(default_factory=SourceConfig)
    sheets: Optional[SheetsConfig] = Field(
        None,
        description="Read through the Sheets API instead of the CSV export when set",
    )
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    departments: Tuple[DepartmentRule, ...] = Field(
        DEFAULT_DEPARTMENTS,
        description="Department keyword table; scanned in order, first match wins",
    )
    default_department: str = Field(
        "General", min_length=1, description="Catch-all department for unmatched rows"
    )
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)

    @model_validator(mode="after")
    def _validate_departments(self) -> "AppConfig":
        names = [rule.name for rule in self.departments]
        if len(names) != len(set(names)):
            raise ValueError("Department names must be unique")
        if self.default_department in names:
            msg = f"default_department '{self.default_department}' must not be a keyword department"
            raise ValueError(msg)
        return self

    @property
    def department_names(self) -> Tuple[str, ...]:
        """Declared departments followed by the catch-all."""

        return tuple(rule.name for rule in self.departments) + (self.default_department,)


def _apply_env_overrides(data: dict) -> dict:
    url = os.getenv(SOURCE_URL_ENV)
    if not url:
        return data
    source = dict(data.get("source") or {})
    source["export_url"] = url
    return {**data, "source": source}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file and return a validated object.

    Without a path the built-in defaults are used. The export URL may be
    overridden through the ``ERP_TRACKER_SOURCE_URL`` environment variable.
    """

    data: dict = {}
    if path is not None:
        config_path = Path(path).expanduser().resolve()
        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)

        if data is None:
            msg = f"Configuration file is empty: {config_path}"
            raise ValueError(msg)
        if not isinstance(data, dict):
            msg = f"Configuration file must contain a mapping: {config_path}"
            raise ValueError(msg)

    try:
        return AppConfig.model_validate(_apply_env_overrides(data))
    except ValidationError as exc:  # pragma: no cover - passthrough for readability
        raise ValueError(f"Invalid configuration: {exc}") from exc
