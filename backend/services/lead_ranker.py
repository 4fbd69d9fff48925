"""
Rank leads within a company by job-title seniority using the LLM.

The model gets every lead plus the seniority table for the batch's bracket and
returns lead ids from most to least senior, leaving out titles that match nothing
in the table. Each returned lead is persisted with rank = position + 1. Rank
writes are independent: one failure is logged and the rest still commit.

The bracket comes from the first lead that has one. A batch spanning several
brackets is ranked against that single table; callers should send one company
(one bracket) at a time.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import StrictInt, TypeAdapter, ValidationError

from errors import ImportValidationError, LLMResponseError
from llm_client import LLMCallable, llm_for, strip_code_fence
from services.seniority import SENIORITY_BY_BRACKET

logger = logging.getLogger(__name__)

_RANKING_ADAPTER = TypeAdapter(list[StrictInt])

PROMPT_FIELDS = ("id", "organization", "firstName", "lastName", "title")


class RankOutcome(str, Enum):
    RANKED = "ranked"
    NO_RANKABLE_LEADS = "no_rankable_leads"
    UPSTREAM_FAILURE = "upstream_failure"


@dataclass
class RankResult:
    outcome: RankOutcome
    # (lead_id, rank) pairs in rank order, including any whose write failed.
    ranked: list[tuple[int, int]] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


def select_bracket(leads: Sequence[Mapping[str, Any]]) -> Optional[str]:
    brackets = [lead.get("employees") for lead in leads if lead.get("employees")]
    if not brackets:
        return None
    distinct = sorted(set(brackets))
    if len(distinct) > 1:
        logger.warning(
            "[rank] mixed employee brackets=%s; ranking all leads against bracket=%s",
            distinct,
            brackets[0],
        )
    return brackets[0]


def build_rank_prompt(leads: Sequence[Mapping[str, Any]], bracket: str) -> str:
    lead_rows = [{k: lead.get(k) for k in PROMPT_FIELDS} for lead in leads]
    titles = dict(SENIORITY_BY_BRACKET.get(bracket, {}))
    return f"""Please rank the following leads:

{json.dumps(lead_rows, indent=2)}

Use the following ranking of titles to help with ranking the leads:

{json.dumps(titles, indent=2)}

Where 1 represents the highest rank, and the highest number represents the lowest rank.

If a lead's position does not represent one of these titles, do not include them in the rankings.
The title does not have to exactly match, but should be more or less the same thing.

Example: "Head of Sales" and "VP of Sales" are interchangeable

Return ONLY a JSON array of lead ids where the order of the items in the array represents the ranking of the leads.
Do not return anything else.

Example:
[3, 4, 8, 2]

This example would represent the leads with ids 3, 4, 8, and 2 ranked in that order."""


def parse_ranking(text: str) -> list[int]:
    """Model output must be a JSON array of integers."""
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Ranking is not valid JSON: {e}", raw=text) from e
    try:
        return _RANKING_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise LLMResponseError(f"Ranking must be an array of integer ids: {e}", raw=text) from e


def order_leads(leads: Sequence[Mapping[str, Any]], ranking: Sequence[int]) -> list[Mapping[str, Any]]:
    """Leads in ranking order. Unknown ids are skipped; a repeated id only counts the first time."""
    by_id = {lead["id"]: lead for lead in leads}
    ordered = []
    for lead_id in ranking:
        lead = by_id.pop(lead_id, None)
        if lead is not None:
            ordered.append(lead)
    return ordered


def rank_leads(
    leads: Sequence[Mapping[str, Any]],
    persist_rank: Callable[[int, int], None],
    llm: Optional[LLMCallable] = None,
) -> RankResult:
    """
    Ask the model for a seniority order and persist rank values.
    Raises ImportValidationError when no lead has an employee bracket and
    LLMResponseError when the model text is not a list of ids.
    """
    bracket = select_bracket(leads)
    if bracket is None:
        raise ImportValidationError("No lead with employee count")
    if llm is None:
        llm = llm_for("OPENAI_RANK_MODEL", tag="rank")

    text = llm(build_rank_prompt(leads, bracket))
    if not text:
        logger.error("[rank] no response from model leads=%d bracket=%s", len(leads), bracket)
        return RankResult(outcome=RankOutcome.UPSTREAM_FAILURE)

    ranking = parse_ranking(text)
    ordered = order_leads(leads, ranking)
    if not ordered:
        logger.info("[rank] model returned no rankable leads leads=%d", len(leads))
        return RankResult(outcome=RankOutcome.NO_RANKABLE_LEADS)

    result = RankResult(outcome=RankOutcome.RANKED)
    for idx, lead in enumerate(ordered):
        rank = idx + 1
        result.ranked.append((lead["id"], rank))
        try:
            persist_rank(lead["id"], rank)
        except Exception as e:
            result.failed.append(lead["id"])
            logger.warning("[rank] error updating rank of lead %s: %s", lead["id"], e)
    if len(result.failed) == len(result.ranked):
        logger.error("[rank] every rank update failed leads=%d", len(result.ranked))
        result.outcome = RankOutcome.UPSTREAM_FAILURE
    logger.info(
        "[rank] bracket=%s ranked=%d failed=%d dropped=%d",
        bracket,
        len(result.ranked),
        len(result.failed),
        len(leads) - len(ordered),
    )
    return result
