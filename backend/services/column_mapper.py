"""
Infer which CSV header feeds each canonical rent-roll field.

One LLM call per import. The response must be a JSON object with all eight
canonical keys, each a header string or null; anything else raises
ColumnMappingError and the import stops before a single row is touched.
"""
from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError

from errors import ColumnMappingError
from llm_client import LLMCallable, llm_for, strip_code_fence

logger = logging.getLogger(__name__)

CANONICAL_FIELDS = (
    "address",
    "property",
    "unit",
    "tenant",
    "lease_start",
    "lease_end",
    "sqft",
    "monthly_payment",
)

FIELD_DESCRIPTIONS = {
    "address": "street address of the building",
    "property": "property or building name",
    "unit": "unit, suite or apartment number",
    "tenant": "tenant or lessee name",
    "lease_start": "lease start / commencement / move-in date",
    "lease_end": "lease end / expiration / move-out date",
    "sqft": "unit size in square feet",
    "monthly_payment": "monthly rent or payment amount",
}


class ColumnMapping(BaseModel):
    """Canonical field -> raw CSV header (None when no header fits). Every key is required."""
    model_config = ConfigDict(strict=True, frozen=True)

    address: Optional[str]
    property: Optional[str]
    unit: Optional[str]
    tenant: Optional[str]
    lease_start: Optional[str]
    lease_end: Optional[str]
    sqft: Optional[str]
    monthly_payment: Optional[str]

    def source_for(self, field: str) -> Optional[str]:
        return getattr(self, field)


def build_mapping_prompt(headers: Sequence[str]) -> str:
    fields = "\n".join(f'- "{name}": {FIELD_DESCRIPTIONS[name]}' for name in CANONICAL_FIELDS)
    template = {name: "<raw header or null>" for name in CANONICAL_FIELDS}
    return f"""Given the following raw CSV column headers, produce a JSON object mapping each
standardized column name to the raw header that holds that data.
Match by meaning, not exact spelling ("Move In" can be lease_start, "Rent" can be monthly_payment).
Use each raw header exactly as written. If no raw header fits a standardized column, use null.

Standardized columns:
{fields}

Raw CSV headers:
{json.dumps(list(headers))}

Return ONLY valid JSON with exactly these keys, no markdown, no prose:
{json.dumps(template, indent=2)}

JSON:"""


def parse_column_mapping(text: Optional[str]) -> ColumnMapping:
    """Validate raw model output. Never repairs: any mismatch raises ColumnMappingError."""
    if not text or not text.strip():
        raise ColumnMappingError("Model returned no column mapping")
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise ColumnMappingError(f"Column mapping is not valid JSON: {e}", raw=text) from e
    if not isinstance(data, dict):
        raise ColumnMappingError("Column mapping must be a JSON object", raw=text)
    try:
        return ColumnMapping.model_validate(data)
    except ValidationError as e:
        raise ColumnMappingError(f"Column mapping failed schema validation: {e}", raw=text) from e


def infer_column_mapping(headers: Sequence[str], llm: Optional[LLMCallable] = None) -> ColumnMapping:
    if llm is None:
        llm = llm_for("OPENAI_MAPPING_MODEL", tag="column-map")
    prompt = build_mapping_prompt(headers)
    try:
        text = llm(prompt)
    except Exception as e:
        raise ColumnMappingError(f"Column mapping request failed: {e}") from e
    mapping = parse_column_mapping(text)

    known = set(headers)
    for field in CANONICAL_FIELDS:
        source = mapping.source_for(field)
        if source is not None and source not in known:
            logger.warning("[column-map] field=%s mapped to unknown header=%r", field, source)
    logger.info(
        "[column-map] headers=%d mapped=%d",
        len(headers),
        sum(1 for f in CANONICAL_FIELDS if mapping.source_for(f) is not None),
    )
    return mapping
