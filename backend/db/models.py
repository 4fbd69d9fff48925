"""SQLAlchemy models for leads and rent-roll rows. Use Alembic for migrations."""
from __future__ import annotations

from datetime import datetime
from sqlalchemy import JSON, Column, DateTime, Float, Integer, String
from sqlalchemy.dialects.postgresql import JSONB

from .session import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column("user_id", String, nullable=False, index=True)
    organization = Column(String, nullable=False)
    first_name = Column("firstName", String, nullable=True)
    last_name = Column("lastName", String, nullable=True)
    title = Column(String, nullable=True)
    employees = Column(String, nullable=True)  # one of services.seniority.EMPLOYEE_BRACKETS
    rank = Column(Integer, nullable=True)  # 1 = most senior within organization + bracket
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
    updated_at = Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organization": self.organization,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "title": self.title,
            "employees": self.employees,
            "rank": self.rank,
        }


class RentRoll(Base):
    __tablename__ = "rent_roll"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column("user_id", String, nullable=False, index=True)
    address = Column(String, nullable=True)
    property = Column(String, nullable=False)
    unit = Column(String, nullable=True)
    tenant = Column(String, nullable=True)
    # DD-MM-YYYY when valid, raw import text when listed in invalid_columns
    lease_start = Column("lease_start", String, nullable=True)
    lease_end = Column("lease_end", String, nullable=True)
    sqft = Column(Float, nullable=True)
    monthly_payment = Column("monthly_payment", Float, nullable=True)
    invalid_columns = Column("invalid_columns", JSONList, nullable=False, default=list)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
    updated_at = Column("updated_at", DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "property": self.property,
            "unit": self.unit,
            "tenant": self.tenant,
            "lease_start": self.lease_start,
            "lease_end": self.lease_end,
            "sqft": self.sqft,
            "monthly_payment": self.monthly_payment,
            "invalid_columns": list(self.invalid_columns or []),
        }
