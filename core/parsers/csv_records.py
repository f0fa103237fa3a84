"""Best-effort CSV parsing for bulk run imports.

Accepted line shapes:

- `YYYY-MM-DD,seconds` (explicit date),
- `seconds` (the caller's default date is used).

Guiding rules:

- A first line mentioning "second" is treated as a header and skipped.
- Malformed lines are non-fatal; they are skipped and reported by line number.
- Rows keep file order through millisecond offsets on their timestamps.
"""

from __future__ import annotations

import csv
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SECONDS_QUANTUM = Decimal("0.0001")
MAX_SECONDS = Decimal("99999.9999")


@dataclass(frozen=True, slots=True)
class ParsedCsvRow:
    """One importable run extracted from a CSV line.

    Attributes:
        line_number: 1-based line number in the uploaded text.
        date: Run date (explicit or the default date).
        seconds: Positive run time.
        timestamp: Midnight UTC of `date` plus a per-line millisecond offset.
    """

    line_number: int
    date: date
    seconds: float
    timestamp: datetime


@dataclass(frozen=True)
class ParsedCsvImport:
    """Parsed output for a CSV upload.

    Attributes:
        rows: Importable rows in file order.
        skipped_lines: 1-based numbers of non-empty lines that were rejected.
    """

    rows: tuple[ParsedCsvRow, ...] = ()
    skipped_lines: tuple[int, ...] = ()


def parse_records_csv(text: str, *, default_date: date) -> ParsedCsvImport:
    """Parse uploaded CSV text into importable runs.

    Args:
        text: Raw CSV text.
        default_date: Date applied to lines that only contain seconds.

    Returns:
        ParsedCsvImport with accepted rows and skipped line numbers.
    """

    lines = text.replace("\ufeff", "").splitlines()
    if not lines:
        return ParsedCsvImport()

    start_index = 1 if "second" in lines[0].casefold() else 0
    rows: list[ParsedCsvRow] = []
    skipped: list[int] = []

    for index, cells in enumerate(csv.reader(lines[start_index:]), start=start_index):
        values = [cell.strip() for cell in cells]
        if not any(values):
            continue
        parsed = _parse_cells(values, default_date=default_date)
        if parsed is None:
            skipped.append(index + 1)
            continue
        row_date, seconds = parsed
        rows.append(
            ParsedCsvRow(
                line_number=index + 1,
                date=row_date,
                seconds=seconds,
                timestamp=datetime.combine(row_date, time.min, tzinfo=timezone.utc)
                + timedelta(milliseconds=index),
            )
        )

    if skipped:
        logger.info("CSV import skipped %d malformed line(s): %s", len(skipped), skipped[:20])
    return ParsedCsvImport(rows=tuple(rows), skipped_lines=tuple(skipped))


def _parse_cells(values: list[str], *, default_date: date) -> tuple[date, float] | None:
    """Return (date, seconds) for one CSV line, or None when malformed."""

    if len(values) == 2:
        raw_date, raw_seconds = values
        if not _DATE_RE.match(raw_date):
            return None
        try:
            row_date = date.fromisoformat(raw_date)
        except ValueError:
            return None
    elif len(values) == 1:
        row_date = default_date
        raw_seconds = values[0]
    else:
        return None

    seconds = _parse_seconds(raw_seconds)
    if seconds is None:
        return None
    return row_date, seconds


def _parse_seconds(value: str) -> float | None:
    """Parse a finite seconds value that stays positive at 4 decimal places."""

    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    # Stored times keep 4 decimal places; anything that rounds to 0 is rejected.
    try:
        quantized = Decimal(str(seconds)).quantize(SECONDS_QUANTUM)
    except InvalidOperation:
        return None
    if quantized <= 0 or quantized > MAX_SECONDS:
        return None
    return float(quantized)
