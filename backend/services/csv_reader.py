"""Parse an uploaded CSV into header-keyed rows (first line is the header, blank lines skipped)."""
from __future__ import annotations

import csv
import io

from errors import ImportValidationError


def decode_csv_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Spreadsheet exports on Windows are often cp1252.
        return data.decode("latin-1")


def read_csv_rows(data: bytes) -> list[dict[str, str]]:
    text = decode_csv_bytes(data)
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ImportValidationError("CSV has no header row")
    rows = []
    for row in reader:
        # DictReader puts overflow cells under None; drop them.
        row.pop(None, None)
        if all(v is None or not str(v).strip() for v in row.values()):
            continue
        rows.append(row)
    if not rows:
        raise ImportValidationError("No CSV data provided")
    return rows
