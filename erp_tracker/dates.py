"""Best-effort deadline parsing.

Each strategy takes the cleaned cell text and returns a ``date`` or ``None``;
the first strategy that produces a date wins. Unparseable text is not an
error: callers keep the raw text and record the date as missing.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from dateutil import parser as dateparser

from .config import DEFAULT_DATE_FORMATS

LOGGER = logging.getLogger(__name__)

DateStrategy = Callable[[str], Optional[date]]


def explicit_format(fmt: str) -> DateStrategy:
    def _parse(text: str) -> Optional[date]:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            return None

    _parse.__name__ = f"strptime[{fmt}]"
    return _parse


_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def free_form(text: str) -> Optional[date]:
    """Let dateutil interpret whatever the explicit patterns rejected.

    dateutil fills missing fields from its default, so the text is parsed
    against two defaults that differ in day, month and year; a date that
    changes between them was incomplete and is rejected.
    """

    try:
        first, second = (
            dateparser.parse(text, default=default).date() for default in _FILL_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return first


def build_strategies(
    formats: Sequence[str] = DEFAULT_DATE_FORMATS, *, fuzzy_fallback: bool = True
) -> tuple[DateStrategy, ...]:
    strategies = [explicit_format(fmt) for fmt in formats]
    if fuzzy_fallback:
        strategies.append(free_form)
    return tuple(strategies)


DEFAULT_STRATEGIES = build_strategies()


def parse_date(
    text: str | None, strategies: Sequence[DateStrategy] = DEFAULT_STRATEGIES
) -> Optional[date]:
    if not text:
        return None
    cleaned = text.strip()
    if not cleaned:
        return None

    for strategy in strategies:
        parsed = strategy(cleaned)
        if parsed is not None:
            return parsed

    LOGGER.debug("Unable to parse date value '%s'", cleaned)
    return None
