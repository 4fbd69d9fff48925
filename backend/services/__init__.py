"""Backend services."""

from services.column_mapper import CANONICAL_FIELDS, ColumnMapping, infer_column_mapping
from services.date_normalizer import normalize_date, to_comparable_date
from services.lead_ranker import RankOutcome, RankResult, rank_leads
from services.occupancy import OccupancyResult, compute_occupancy
from services.row_normalizer import NormalizedRow, normalize_row

__all__ = [
    "CANONICAL_FIELDS",
    "ColumnMapping",
    "infer_column_mapping",
    "normalize_date",
    "to_comparable_date",
    "RankOutcome",
    "RankResult",
    "rank_leads",
    "OccupancyResult",
    "compute_occupancy",
    "NormalizedRow",
    "normalize_row",
]
