from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .config import AppConfig, SourceConfig, load_config
from .errors import TrackerError
from .pipeline import run_pipeline
from .views import (
    SORT_KEYS,
    STATUS_FILTERS,
    dashboard_to_dict,
    filter_tasks,
    find_department,
    render_dashboard,
    render_department,
    sort_tasks,
    task_to_dict,
    tasks_for_department,
)

LOGGER = logging.getLogger("erp_tracker")


def _load_env_files(config_path: Path | None) -> None:
    """Load environment variables from .env files."""

    load_dotenv(override=False)
    if config_path is not None:
        config_env = config_path.parent / ".env"
        if config_env.exists():
            load_dotenv(dotenv_path=config_env, override=False)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Summarize ERP implementation progress from the tracking spreadsheet"
    )
    parser.add_argument("--config", default=None, help="Optional YAML configuration file")
    parser.add_argument("--url", default=None, help="Override the CSV export URL")
    parser.add_argument("--department", default=None, help="Show the tasks of one department")
    parser.add_argument("--search", default="", help="Only tasks whose description contains this text")
    parser.add_argument(
        "--status",
        choices=STATUS_FILTERS,
        default="all",
        help="Filter department tasks by status",
    )
    parser.add_argument("--sort", choices=SORT_KEYS, default="date", help="Sort key for tasks")
    parser.add_argument("--desc", action="store_true", help="Sort in descending order")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _with_url(config: AppConfig, url: str | None) -> AppConfig:
    if not url:
        return config
    source = SourceConfig.model_validate(
        {**config.source.model_dump(), "export_url": url}
    )
    return config.model_copy(update={"source": source, "sheets": None})


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config_path = Path(args.config).expanduser().resolve() if args.config else None
    _load_env_files(config_path)
    config = _with_url(load_config(config_path), args.url)

    LOGGER.info("Fetching task sheet...")
    now = datetime.now()
    try:
        data = run_pipeline(config, now=now)
    except TrackerError as exc:
        LOGGER.error("Failed to load data from the spreadsheet: %s", exc)
        return 1

    if args.department is None:
        if args.json:
            print(json.dumps(dashboard_to_dict(data), ensure_ascii=False, indent=2))
        else:
            print(render_dashboard(data))
        return 0

    stats = find_department(data, args.department)
    if stats is None:
        available = ", ".join(s.name for s in data.department_stats) or "none"
        LOGGER.error("Department '%s' not found. Available: %s", args.department, available)
        return 2

    tasks = tasks_for_department(data, stats.name)
    tasks = sort_tasks(filter_tasks(tasks, args.search, args.status), args.sort, args.desc)
    if args.json:
        print(json.dumps([task_to_dict(task) for task in tasks], ensure_ascii=False, indent=2))
    else:
        print(render_department(stats, tasks, now.date()))
    return 0


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
