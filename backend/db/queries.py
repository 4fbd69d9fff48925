"""Owner-scoped queries. Every read, update and delete goes through owned()."""
from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlalchemy.orm import Query, Session

from .models import Lead, RentRoll

ModelT = TypeVar("ModelT", Lead, RentRoll)


def owned(db: Session, model: Type[ModelT], owner_id: str) -> Query:
    return db.query(model).filter(model.user_id == owner_id)


def get_owned(db: Session, model: Type[ModelT], owner_id: str, row_id: int) -> Optional[ModelT]:
    return owned(db, model, owner_id).filter(model.id == row_id).first()


def list_owned(db: Session, model: Type[ModelT], owner_id: str, **filters) -> list[ModelT]:
    q = owned(db, model, owner_id)
    for column, value in filters.items():
        if value is not None:
            q = q.filter(getattr(model, column) == value)
    return q.order_by(model.id.asc()).all()


def distinct_values(db: Session, column, owner_id: str) -> list[str]:
    model = column.class_
    rows = (
        db.query(column)
        .filter(model.user_id == owner_id, column.isnot(None))
        .distinct()
        .order_by(column)
        .all()
    )
    return [r[0] for r in rows]
