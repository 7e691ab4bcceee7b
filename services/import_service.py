from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

import pandas as pd

from .errors import RemoteOperationError, ValidationError
from .models import SESSION_STROKES
from .repositories import SessionRepository
from .validation import canonical_stroke, clamp_distance, clamp_duration, clamp_rpe, clean_text, parse_date


logger = logging.getLogger(__name__)

IMPORT_BATCH_SIZE = 500
NO_ROWS_MESSAGE = "No rows found. Ensure your CSV has a header row."


@dataclass
class ImportReport:
    rows_parsed: int
    rows_inserted: int = 0
    skipped_rows: int = 0
    batches_total: int = 0
    batches_committed: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def summary(self) -> str:
        text = f"Imported {self.rows_inserted} of {self.rows_parsed} rows"
        if self.batches_total:
            text += f" ({self.batches_committed}/{self.batches_total} batches)"
        if self.skipped_rows:
            text += f", skipped {self.skipped_rows} with an invalid date"
        if self.error:
            text += f". Stopped at batch {self.batches_committed + 1}: {self.error}"
        return text + "."


def parse_csv_rows(text: str) -> list[dict[str, Any]]:
    """Read CSV text into one dict per data row, keyed by lower-cased header."""
    if not (text or "").strip():
        return []
    try:
        header = pd.read_csv(io.StringIO(text), nrows=0, dtype=str)
    except pd.errors.EmptyDataError:
        return []
    width = len(header.columns)

    frame = pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        index_col=False,
        engine="python",
        # unquoted commas in notes make long rows; keep the leading fields
        on_bad_lines=lambda bad: bad[:width],
    )
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    rows = frame.to_dict(orient="records")
    return [r for r in rows if any(_present(v) for v in r.values())]


def _present(value: Any) -> bool:
    return not pd.isna(value) and bool(str(value).strip())


def _cell(row: dict[str, Any], *names: str) -> str | None:
    for name in names:
        value = row.get(name)
        if value is not None and _present(value):
            return str(value).strip()
    return None


def normalize_import_row(row: dict[str, Any], today: date) -> dict[str, Any]:
    date_text = _cell(row, "date")
    return {
        "date": parse_date(date_text) if date_text else today,
        "distance_m": clamp_distance(_cell(row, "distance_m", "distance")),
        "duration_min": clamp_duration(_cell(row, "duration_min", "duration")),
        "stroke": canonical_stroke(_cell(row, "stroke"), SESSION_STROKES) or "Free",
        "rpe": clamp_rpe(_cell(row, "rpe")),
        "notes": clean_text(_cell(row, "notes")),
    }


async def import_sessions_csv(
    repo: SessionRepository,
    text: str,
    batch_size: int = IMPORT_BATCH_SIZE,
    today: date | None = None,
) -> ImportReport:
    """Normalize CSV rows and insert them in sequential batches.

    Stops at the first failing batch; batches before it stay committed and
    the report says how far the import got. The repository is re-listed from
    the store afterwards either way.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    repo.require_owner()
    today = today or date.today()

    raw_rows = parse_csv_rows(text)
    if not raw_rows:
        raise ValidationError(NO_ROWS_MESSAGE)

    drafts: list[dict[str, Any]] = []
    skipped = 0
    for number, row in enumerate(raw_rows, start=1):
        try:
            drafts.append(normalize_import_row(row, today))
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping CSV row %d: %s", number, exc)

    batches = [drafts[i : i + batch_size] for i in range(0, len(drafts), batch_size)]
    report = ImportReport(rows_parsed=len(raw_rows), skipped_rows=skipped, batches_total=len(batches))

    for number, batch in enumerate(batches, start=1):
        try:
            report.rows_inserted += await repo.bulk_insert(batch)
        except RemoteOperationError as exc:
            report.error = exc.message
            logger.warning("Import stopped at batch %d/%d: %s", number, len(batches), exc.message)
            break
        report.batches_committed += 1
        logger.info("Imported batch %d/%d (%d rows)", number, len(batches), len(batch))

    await repo.load()
    return report
