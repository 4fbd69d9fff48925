"""
Leads: owner-scoped CRUD, CSV bulk import and LLM seniority ranking.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import AuthClaims, require_auth
from db.models import Lead
from db.queries import distinct_values, get_owned, list_owned, owned
from db.session import get_db
from errors import ImportValidationError, LLMResponseError
from llm_client import LLMCallable, get_rank_llm
from models import DeleteRequest, LeadCreate, LeadImportRow, LeadUpdate, RankLead
from services.lead_ranker import RankOutcome, rank_leads
from services.seniority import is_bracket

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["leads"])


def _lead_from_import_row(row: LeadImportRow, owner_id: str) -> Lead:
    employees = row.account_employee_range
    if employees is not None and not is_bracket(employees):
        logger.warning("[leads] unknown employee range=%r stored as null", employees)
        employees = None
    return Lead(
        user_id=owner_id,
        organization=row.account_name,
        first_name=row.lead_first_name,
        last_name=row.lead_last_name,
        title=row.lead_job_title,
        employees=employees,
    )


def _import_leads(rows: list, owner_id: str, db: Session) -> dict:
    if not rows:
        raise HTTPException(status_code=400, detail="No CSV data provided")
    leads = []
    for idx, raw in enumerate(rows):
        try:
            row = LeadImportRow.model_validate(raw)
        except ValidationError:
            raise HTTPException(status_code=400, detail=f"Row {idx + 1} is not a valid lead row")
        if not row.account_name:
            raise HTTPException(status_code=400, detail=f"Row {idx + 1} is missing account_name")
        leads.append(_lead_from_import_row(row, owner_id))
    try:
        db.add_all(leads)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[leads] bulk insert failed owner=%s rows=%d error=%s", owner_id, len(leads), e)
        raise HTTPException(status_code=400, detail="Bulk insert failed")
    logger.info("[leads] imported owner=%s rows=%d", owner_id, len(leads))
    return {"message": "Import successful", "inserted": len(leads)}


@router.get("/leads")
def list_leads(
    organization: Optional[str] = Query(default=None),
    sort: Optional[str] = Query(default=None, pattern="^(id|rank)$"),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    if sort == "rank":
        q = owned(db, Lead, claims.sub)
        if organization is not None:
            q = q.filter(Lead.organization == organization)
        rows = q.order_by(case((Lead.rank.is_(None), 1), else_=0), Lead.rank.asc(), Lead.id.asc()).all()
    else:
        rows = list_owned(db, Lead, claims.sub, organization=organization)
    return {"result": [r.to_dict() for r in rows]}


@router.get("/leads/organizations")
def list_lead_organizations(
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return {"result": distinct_values(db, Lead.organization, claims.sub)}


@router.post("/leads", status_code=201)
def create_leads(
    body: Union[list[Any], dict[str, Any]] = Body(...),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    if isinstance(body, list):
        return _import_leads(body, claims.sub, db)

    try:
        data = LeadCreate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Error creating lead")
    lead = Lead(
        user_id=claims.sub,
        organization=data.organization,
        first_name=data.first_name,
        last_name=data.last_name,
        title=data.title,
        employees=data.employees,
        rank=data.rank,
    )
    try:
        db.add(lead)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[leads] create failed owner=%s error=%s", claims.sub, e)
        raise HTTPException(status_code=400, detail="Error creating lead")
    return {"message": "Lead created", "id": lead.id}


@router.put("/leads")
def update_lead(
    body: dict[str, Any] = Body(...),
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    if not body.get("id"):
        raise HTTPException(status_code=400, detail="Missing item ID")
    try:
        data = LeadUpdate.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Error updating lead")
    lead = get_owned(db, Lead, claims.sub, data.id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    for field in data.model_fields_set - {"id"}:
        value = getattr(data, field)
        if field == "organization" and value is None:
            raise HTTPException(status_code=400, detail="organization cannot be empty")
        setattr(lead, field, value)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[leads] update failed owner=%s id=%s error=%s", claims.sub, data.id, e)
        raise HTTPException(status_code=400, detail="Error updating lead")
    return {"message": "updated", "result": lead.to_dict()}


@router.delete("/leads")
def delete_lead(
    body: DeleteRequest,
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
):
    lead = get_owned(db, Lead, claims.sub, body.id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    db.delete(lead)
    db.commit()
    return {"message": "deleted"}


@router.post("/rank", status_code=201)
def rank(
    body: list[RankLead],
    claims: AuthClaims = Depends(require_auth),
    db: Session = Depends(get_db),
    llm: LLMCallable = Depends(get_rank_llm),
):
    ids = [lead.id for lead in body]
    rows = owned(db, Lead, claims.sub).filter(Lead.id.in_(ids)).all() if ids else []
    by_id = {r.id: r for r in rows}
    # Keep the order the caller sent; ids the caller does not own are dropped here.
    leads = [by_id[i].to_dict() for i in dict.fromkeys(ids) if i in by_id]

    def persist_rank(lead_id: int, value: int) -> None:
        try:
            owned(db, Lead, claims.sub).filter(Lead.id == lead_id).update(
                {Lead.rank: value}, synchronize_session=False
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

    try:
        result = rank_leads(leads, persist_rank, llm=llm)
    except ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMResponseError as e:
        logger.error("[rank] malformed model response owner=%s error=%s", claims.sub, e)
        raise HTTPException(status_code=502, detail="Error ranking leads")
    except Exception as e:
        logger.exception("[rank] ranking failed owner=%s error=%s", claims.sub, e)
        raise HTTPException(status_code=502, detail="Error ranking leads")

    if result.outcome == RankOutcome.RANKED:
        return {"message": "success"}
    if result.outcome == RankOutcome.NO_RANKABLE_LEADS:
        return {"message": "warning"}
    if result.ranked:
        raise HTTPException(status_code=500, detail="Error updating lead ranks")
    raise HTTPException(status_code=502, detail="No response from model")
