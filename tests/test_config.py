import pytest
from pydantic import ValidationError

from erp_tracker.config import DEFAULT_EXPORT_URL, AppConfig, load_config


def test_defaults_without_a_file():
    config = load_config()

    assert config.source.export_url == DEFAULT_EXPORT_URL
    assert config.sheets is None
    assert config.department_names[0] == "HR & Payroll"
    assert config.department_names[-1] == "General"
    names = list(config.department_names)
    assert names.index("Projects & Sales") < names.index("Inventory & Stores")


def test_yaml_overrides(tmp_path):
    path = tmp_path / "tracker.yaml"
    path.write_text(
        """
source:
  export_url: https://example.com/sheet.csv
  request_timeout: 5
columns:
  date: [Due]
departments:
  - name: Civil
    keywords: [Concrete, Rebar]
default_department: Misc
parsing:
  date_formats: ["%d.%m.%Y"]
""",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.source.request_timeout == 5
    assert config.columns.date == ("Due",)
    assert config.departments[0].keywords == ("concrete", "rebar")
    assert config.department_names == ("Civil", "Misc")
    assert config.parsing.date_formats == ("%d.%m.%Y",)


def test_environment_overrides_export_url(monkeypatch):
    monkeypatch.setenv("ERP_TRACKER_SOURCE_URL", "https://example.com/other.csv")

    assert load_config().source.export_url == "https://example.com/other.csv"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="empty"):
        load_config(path)


def test_duplicate_departments_are_rejected(tmp_path):
    path = tmp_path / "dupes.yaml"
    path.write_text(
        "departments:\n"
        "  - {name: Finance, keywords: [bank]}\n"
        "  - {name: Finance, keywords: [tax]}\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="unique"):
        load_config(path)


def test_config_is_immutable():
    config = AppConfig()

    with pytest.raises(ValidationError):
        config.default_department = "Other"
