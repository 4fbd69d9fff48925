"""Seniority of sales-buyer titles by company size. Prompt context for lead ranking; 1 is most senior."""
from __future__ import annotations

from types import MappingProxyType

EMPLOYEE_BRACKETS = (
    "2-10",
    "11-50",
    "51-200",
    "201-1000",
    "1001-5000",
    "5001-10000",
    "10001+",
)

_SMALL_COMPANY = MappingProxyType({
    "Founder / Co-Founder": 1,
    "CEO / President": 2,
    "Owner / Co-Owner": 3,
    "Managing Director": 4,
    "Head of Sales": 5,
})

_MID_MARKET = MappingProxyType({
    "VP of Sales": 1,
    "Head of Sales": 2,
    "Sales Director": 3,
    "Director of Sales Development": 4,
    "CRO (Chief Revenue Officer)": 5,
    "Head of Revenue Operations": 6,
    "VP of Growth": 7,
})

_ENTERPRISE = MappingProxyType({
    "VP of Sales Development": 1,
    "VP of Sales": 2,
    "Head of Sales Development": 3,
    "Director of Sales Development": 4,
    "CRO (Chief Revenue Officer)": 5,
    "VP of Revenue Operations": 6,
    "VP of GTM": 7,
})

_LARGE_ENTERPRISE = MappingProxyType({
    "VP of Sales Development": 1,
    "VP of Inside Sales": 2,
    "Head of Sales Development": 3,
    "CRO (Chief Revenue Officer)": 4,
    "VP of Revenue Operations": 5,
    "Director of Sales Development": 6,
    "VP of Field Sales": 7,
})

SENIORITY_BY_BRACKET = MappingProxyType({
    "2-10": _SMALL_COMPANY,
    "11-50": _SMALL_COMPANY,
    "51-200": _MID_MARKET,
    "201-1000": _ENTERPRISE,
    "1001-5000": _ENTERPRISE,
    "5001-10000": _ENTERPRISE,
    "10001+": _LARGE_ENTERPRISE,
})


def is_bracket(value) -> bool:
    return isinstance(value, str) and value in SENIORITY_BY_BRACKET
