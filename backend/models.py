from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

EmployeeBracket = Literal["2-10", "11-50", "51-200", "201-1000", "1001-5000", "5001-10000", "10001+"]


def _trim_or_none(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# --- Leads ---

class LeadFields(BaseModel):
    """Editable lead fields. Accepts the camelCase names the frontend stores (firstName, lastName)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    organization: Optional[str] = None
    first_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("first_name", "firstName"))
    last_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("last_name", "lastName"))
    title: Optional[str] = None
    employees: Optional[EmployeeBracket] = None
    rank: Optional[int] = Field(default=None, ge=1)

    @field_validator("organization", "first_name", "last_name", "title", "employees", mode="before")
    @classmethod
    def _trim_text_fields(cls, value):
        return _trim_or_none(value)


class LeadCreate(LeadFields):
    organization: str = Field(min_length=1)


class LeadUpdate(LeadFields):
    id: int


class LeadImportRow(BaseModel):
    """One row of a lead CSV export. Header names are fixed."""
    model_config = ConfigDict(extra="ignore")

    account_name: Optional[str] = None
    lead_first_name: Optional[str] = None
    lead_last_name: Optional[str] = None
    lead_job_title: Optional[str] = None
    account_employee_range: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _trim(cls, value):
        return _trim_or_none(value)


class RankLead(BaseModel):
    """Lead as submitted to /rank. Only id is trusted; the rest is re-read from the database."""
    model_config = ConfigDict(extra="ignore")

    id: int
    organization: Optional[str] = None
    employees: Optional[str] = None


class DeleteRequest(BaseModel):
    id: int


# --- Rent roll ---

class RentRollFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    address: Optional[str] = None
    property: Optional[str] = None
    unit: Optional[str] = None
    tenant: Optional[str] = None
    lease_start: Optional[str] = None
    lease_end: Optional[str] = None
    sqft: Optional[float] = Field(default=None, ge=0)
    monthly_payment: Optional[float] = None

    @field_validator("address", "property", "unit", "tenant", "lease_start", "lease_end", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None or str(value).strip() == "":
            return None
        return str(value)

    @field_validator("sqft", "monthly_payment", mode="before")
    @classmethod
    def _blank_number_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class RentRollCreate(RentRollFields):
    property: str


class RentRollUpdate(RentRollFields):
    id: int


class RentRollImportRecord(RentRollCreate):
    """A normalized CSV row ready for insert."""
    invalid_columns: List[str] = Field(default_factory=list)
