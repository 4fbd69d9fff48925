"""Apply a ColumnMapping to raw CSV rows, producing canonical rent-roll records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from services.column_mapper import CANONICAL_FIELDS, ColumnMapping
from services.date_normalizer import normalize_date

DATE_FIELDS = ("lease_start", "lease_end")


@dataclass(frozen=True)
class NormalizedRow:
    record: dict[str, Any]
    invalid_columns: list[str] = field(default_factory=list)


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def normalize_value(row: Mapping[str, Any], source: Optional[str], target: str, invalid: list[str]) -> Any:
    """
    Value for one canonical field. Missing header, missing column or blank cell -> None
    and never invalid. Date fields that fail to parse keep the trimmed raw text and are
    appended to invalid.
    """
    if not source or source not in row:
        return None
    raw = row[source]
    if _is_blank(raw):
        return None
    if target in DATE_FIELDS:
        result = normalize_date(raw)
        if result.invalid:
            invalid.append(target)
        return result.value
    return raw


def normalize_row(row: Mapping[str, Any], mapping: ColumnMapping) -> NormalizedRow:
    invalid: list[str] = []
    record = {
        name: normalize_value(row, mapping.source_for(name), name, invalid)
        for name in CANONICAL_FIELDS
    }
    return NormalizedRow(record=record, invalid_columns=invalid)


def normalize_rows(rows: list[Mapping[str, Any]], mapping: ColumnMapping) -> list[NormalizedRow]:
    return [normalize_row(row, mapping) for row in rows]
