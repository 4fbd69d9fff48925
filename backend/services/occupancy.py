"""
Occupancy of leased units over a reporting window [period_start, period_end).

Time is counted in days. A unit counts toward capacity when its lease_start parses;
its leased span is lease_start..lease_end clamped to the window. A missing or
unparseable lease_end collapses the span to zero length.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel

from services.date_normalizer import to_comparable_date

NO_DATA_LABEL = "No data"


class OccupancySlice(BaseModel):
    name: str
    value: float


class OccupancyResult(BaseModel):
    occupied_percent: Optional[float] = None
    vacant_percent: Optional[float] = None
    valid_units: int = 0
    total_units: int = 0
    slices: List[OccupancySlice]

    @property
    def has_data(self) -> bool:
        return self.occupied_percent is not None


def _no_data(total_units: int, valid_units: int = 0) -> OccupancyResult:
    return OccupancyResult(
        valid_units=valid_units,
        total_units=total_units,
        slices=[OccupancySlice(name=NO_DATA_LABEL, value=100.0)],
    )


def unit_overlap_days(start: date, end: Optional[date], period_start: date, period_end: date) -> int:
    """Days of [start, end) that fall inside [period_start, period_end)."""
    effective_end = end if end is not None else start
    if effective_end <= start:
        return 0
    overlap = (min(effective_end, period_end) - max(start, period_start)).days
    return max(0, overlap)


def compute_occupancy(
    units: Iterable[Mapping[str, Any]],
    period_start: date,
    period_end: date,
) -> OccupancyResult:
    units = list(units)
    window_days = (period_end - period_start).days
    if not units or window_days <= 0:
        return _no_data(len(units))

    total_overlap = 0
    valid_units = 0
    for unit in units:
        start = to_comparable_date(unit.get("lease_start"))
        if start is None:
            continue
        valid_units += 1
        end = to_comparable_date(unit.get("lease_end"))
        total_overlap += unit_overlap_days(start, end, period_start, period_end)

    if valid_units == 0:
        return _no_data(len(units))

    total_available = window_days * valid_units
    occupied = 100.0 * total_overlap / total_available
    vacant = max(0.0, 100.0 - occupied)
    return OccupancyResult(
        occupied_percent=occupied,
        vacant_percent=vacant,
        valid_units=valid_units,
        total_units=len(units),
        slices=[
            OccupancySlice(name="Occupied", value=occupied),
            OccupancySlice(name="Vacant", value=vacant),
        ],
    )
