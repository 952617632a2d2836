from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import ColumnsConfig

LOGGER = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True, slots=True)
class ResolvedColumns:
    """Header names chosen for each role for one ingestion run."""

    description: Optional[str]
    status: str
    date: Optional[str]


def normalize_header(text: str) -> str:
    """Lowercase and drop everything that is not a lowercase letter or digit."""

    return _NON_ALNUM.sub("", text.lower())


def find_column(headers: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    """Return the first header matching the first candidate that matches anything.

    A header matches a candidate when its normalized form equals or contains
    the normalized candidate. Candidates are tried in order, headers in source
    order.
    """

    if not headers:
        return None
    normalized = [(header, normalize_header(header)) for header in headers]
    for candidate in candidates:
        wanted = normalize_header(candidate)
        if not wanted:
            continue
        for header, norm in normalized:
            if norm == wanted or wanted in norm:
                return header
    return None


def _resolve_date_column(headers: Sequence[str], conf: ColumnsConfig) -> Optional[str]:
    positional = headers[conf.date_position] if len(headers) > conf.date_position else None
    if positional is not None and conf.date_position_marker in normalize_header(positional):
        return positional

    matched = find_column(headers, conf.date)
    if matched is not None:
        return matched
    return positional


def resolve_columns(headers: Sequence[str], conf: ColumnsConfig) -> ResolvedColumns:
    description = find_column(headers, conf.description)
    if description is None:
        description = headers[0] if headers else None

    status = find_column(headers, conf.status) or conf.status_fallback
    date_column = _resolve_date_column(headers, conf)

    resolved = ResolvedColumns(description=description, status=status, date=date_column)
    LOGGER.debug(
        "Resolved columns: description=%r status=%r date=%r",
        resolved.description,
        resolved.status,
        resolved.date,
    )
    if date_column is None:
        LOGGER.warning("No deadline column found among %s headers", len(headers))
    return resolved
