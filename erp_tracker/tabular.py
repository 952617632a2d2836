from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .errors import ParseError
from .models import RawRecord

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Table:
    headers: Tuple[str, ...]
    records: Tuple[RawRecord, ...]

    def __len__(self) -> int:
        return len(self.records)


def _is_blank(row: Sequence[str]) -> bool:
    # Only truly empty lines; delimiter-only rows still become records.
    return not row or (len(row) == 1 and not row[0])


def _build_record(headers: Tuple[str, ...], row: Sequence[str]) -> RawRecord:
    values = tuple("" if cell is None else str(cell) for cell in row)
    pairs = tuple(zip(headers, values))
    return RawRecord(pairs=pairs, values=values)


def table_from_rows(rows: Iterable[Sequence[str]]) -> Table:
    """Build a table from already split rows; the first non-blank row is the header."""

    headers: Tuple[str, ...] | None = None
    records: List[RawRecord] = []
    for row in rows:
        if _is_blank(row):
            continue
        if headers is None:
            headers = tuple(str(cell).strip() for cell in row)
            continue
        records.append(_build_record(headers, row))

    if headers is None:
        LOGGER.warning("Source contained no header row")
        return Table(headers=(), records=())

    LOGGER.debug("Parsed %s headers and %s data rows", len(headers), len(records))
    return Table(headers=headers, records=tuple(records))


def parse_csv(text: str) -> Table:
    """Parse CSV text into a table, raising ParseError on malformed quoting."""

    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        rows = list(reader)
    except csv.Error as exc:
        raise ParseError(
            f"Malformed CSV near line {reader.line_num}: {exc}",
            line=reader.line_num,
        ) from exc
    return table_from_rows(rows)
