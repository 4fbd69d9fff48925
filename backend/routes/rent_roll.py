"""
Rent roll: owner-scoped CRUD, CSV import through LLM column mapping, occupancy.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Optional, Union

from fastapi import APIRouter, Body, Depends, File, HTTPException, Query, UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import AuthClaims, require_auth
from db.models import RentRoll
from db.queries import distinct_values, get_owned, list_owned
from db.session import get_db
from errors import ColumnMappingError, ImportValidationError
from llm_client import LLMCallable, get_mapping_llm
from models import DeleteRequest, RentRollCreate, RentRollUpdate
from services.csv_reader import read_csv_rows
from services.date_normalizer import parse_query_date
from services.occupancy import compute_occupancy
from services.rent_roll_import import prepare_import, revalidate_dates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["rent_roll"])

MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
ALLOWED_CSV_CONTENT_TYPES = {"text/csv", "application/csv", "application/vnd.ms-excel", "text/plain"}


def _import_rent_roll(rows: list, owner_id: str, db: Session, llm: LLMCallable) -> dict:
    try:
        records = prepare_import(rows, llm=llm)
    except ColumnMappingError as e:
        logger.error("[rent_roll] column mapping failed owner=%s error=%s raw=%r", owner_id, e, e.raw)
        raise HTTPException(status_code=502, detail="Column mapping inference failed")
    except ImportValidationError as e:
        logger.warning("[rent_roll] import rejected owner=%s error=%s", owner_id, e)
        raise HTTPException(status_code=400, detail=str(e))

    entities = [RentRoll(user_id=owner_id, **r.model_dump()) for r in records]
    try:
        db.add_all(entities)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[rent_roll] bulk insert failed owner=%s rows=%d error=%s", owner_id, len(entities), e)
        raise HTTPException(status_code=400, detail="Bulk insert failed")
    invalid_rows = sum(1 for r in records if r.invalid_columns)
    logger.info("[rent_roll] imported owner=%s rows=%d invalid_rows=%d", owner_id, len(entities), invalid_rows)
    return {"message": "Import successful", "inserted": len(entities), "invalid_rows": invalid_rows}


@router.get("/rent_roll")
def list_rent_roll(
    property: Optional[str] = Query(default=None),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    rows = list_owned(db, RentRoll, claims.sub, property=property)
    return {"result": [r.to_dict() for r in rows]}


@router.get("/rent_roll/properties")
def list_properties(
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return {"result": distinct_values(db, RentRoll.property, claims.sub)}


@router.get("/rent_roll/occupancy")
def occupancy(
    start: str = Query(...),
    end: str = Query(...),
    property: Optional[str] = Query(default=None),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    try:
        period_start = parse_query_date(start)
        period_end = parse_query_date(end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    rows = list_owned(db, RentRoll, claims.sub, property=property)
    result = compute_occupancy((r.to_dict() for r in rows), period_start, period_end)
    return {"result": result.model_dump()}


@router.post("/rent_roll", status_code=201)
def create_rent_roll(
    body: Union[list[Any], dict[str, Any]] = Body(...),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
    llm: LLMCallable = Depends(get_mapping_llm),
):
    if isinstance(body, list):
        return _import_rent_roll(body, claims.sub, db, llm)

    try:
        data = RentRollCreate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Error creating rent roll data")
    values = data.model_dump()
    invalid = revalidate_dates(values, [])
    row = RentRoll(user_id=claims.sub, invalid_columns=invalid, **values)
    try:
        db.add(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[rent_roll] create failed owner=%s error=%s", claims.sub, e)
        raise HTTPException(status_code=400, detail="Error creating rent roll data")
    return {"message": "Rent roll data created", "id": row.id}


@router.post("/rent_roll/upload", status_code=201)
async def upload_rent_roll(
    file: UploadFile = File(...),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
    llm: LLMCallable = Depends(get_mapping_llm),
):
    filename = (file.filename or "").lower().strip()
    content_type = (file.content_type or "").lower().strip()
    if not filename.endswith(".csv") and content_type not in ALLOWED_CSV_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="File must be a CSV")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="CSV exceeds upload limit")
    try:
        rows = read_csv_rows(data)
    except ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _import_rent_roll(rows, claims.sub, db, llm)


@router.put("/rent_roll")
def update_rent_roll(
    body: dict[str, Any] = Body(...),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    if not body.get("id"):
        raise HTTPException(status_code=400, detail="Missing item ID")
    try:
        data = RentRollUpdate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Error updating rent roll data")
    row = get_owned(db, RentRoll, claims.sub, data.id)
    if not row:
        raise HTTPException(status_code=404, detail="Rent roll data not found")

    values = {f: getattr(data, f) for f in data.model_fields_set - {"id"}}
    if "property" in values and values["property"] is None:
        raise HTTPException(status_code=400, detail="property cannot be empty")
    row.invalid_columns = revalidate_dates(values, row.invalid_columns or [])
    for field, value in values.items():
        setattr(row, field, value)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[rent_roll] update failed owner=%s id=%s error=%s", claims.sub, data.id, e)
        raise HTTPException(status_code=400, detail="Error updating rent roll data")
    return {"message": "updated", "result": row.to_dict()}


@router.delete("/rent_roll")
def delete_rent_roll(
    body: DeleteRequest,
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    row = get_owned(db, RentRoll, claims.sub, body.id)
    if not row:
        raise HTTPException(status_code=404, detail="Rent roll data not found")
    db.delete(row)
    db.commit()
    return {"message": "deleted"}
