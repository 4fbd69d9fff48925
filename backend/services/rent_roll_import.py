"""
CSV rows -> validated rent-roll records.

Column mapping runs once for the whole file; if it fails nothing is imported.
Every row is then normalized independently and checked against RentRollImportRecord.
A row that fails that check rejects the whole batch.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from errors import ImportValidationError
from llm_client import LLMCallable
from models import RentRollImportRecord
from services.column_mapper import ColumnMapping, infer_column_mapping
from services.date_normalizer import normalize_entered_date
from services.row_normalizer import DATE_FIELDS, normalize_row

logger = logging.getLogger(__name__)


def csv_headers(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    """Headers as seen in the first row."""
    return [str(k) for k in rows[0].keys()]


def build_import_records(
    rows: Sequence[Mapping[str, Any]],
    mapping: ColumnMapping,
) -> list[RentRollImportRecord]:
    records = []
    for idx, row in enumerate(rows):
        normalized = normalize_row(row, mapping)
        try:
            records.append(
                RentRollImportRecord(**normalized.record, invalid_columns=normalized.invalid_columns)
            )
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ImportValidationError(
                f"Row {idx + 1} could not be imported (fields: {', '.join(fields)})"
            ) from e
    return records


def prepare_import(
    rows: Sequence[Mapping[str, Any]],
    llm: Optional[LLMCallable] = None,
) -> list[RentRollImportRecord]:
    """Map, normalize and validate raw CSV rows. Raises ColumnMappingError or ImportValidationError."""
    if not rows:
        raise ImportValidationError("No CSV data provided")
    if not all(isinstance(r, Mapping) for r in rows):
        raise ImportValidationError("CSV rows must be objects keyed by header")
    headers = csv_headers(rows)
    mapping = infer_column_mapping(headers, llm=llm)
    records = build_import_records(rows, mapping)
    flagged = sum(1 for r in records if r.invalid_columns)
    logger.info("[import] rows=%d flagged=%d", len(records), flagged)
    return records


def revalidate_dates(values: dict[str, Any], current_invalid: Sequence[str]) -> list[str]:
    """
    Normalize any lease date present in values (in place) and return the updated
    invalid_columns list. Date fields not in values keep their existing flag.
    """
    invalid = [c for c in current_invalid if c not in DATE_FIELDS or c not in values]
    for field in DATE_FIELDS:
        if field not in values:
            continue
        result = normalize_entered_date(values[field])
        values[field] = result.value
        if result.invalid:
            invalid.append(field)
    return invalid
