"""LLM-assisted seniority ranking: response validation, id re-association, partial persistence."""
import pytest

from conftest import FakeLLM
from errors import ImportValidationError, LLMResponseError
from services.lead_ranker import (
    RankOutcome,
    build_rank_prompt,
    order_leads,
    parse_ranking,
    rank_leads,
    select_bracket,
)
from services.seniority import EMPLOYEE_BRACKETS, SENIORITY_BY_BRACKET


def _lead(id, title, employees="51-200", organization="Acme"):
    return {"id": id, "organization": organization, "firstName": f"F{id}", "lastName": f"L{id}",
            "title": title, "employees": employees}


class Recorder:
    def __init__(self, fail_ids=()):
        self.calls = []
        self.fail_ids = set(fail_ids)

    def __call__(self, lead_id, rank):
        if lead_id in self.fail_ids:
            raise RuntimeError(f"write failed for {lead_id}")
        self.calls.append((lead_id, rank))


def test_ranks_follow_model_order():
    leads = [_lead(1, "VP of Sales"), _lead(2, "Sales Director")]
    persist = Recorder()
    result = rank_leads(leads, persist, llm=FakeLLM("[1, 2]"))
    assert result.outcome == RankOutcome.RANKED
    assert persist.calls == [(1, 1), (2, 2)]


def test_unknown_ids_are_ignored():
    leads = [_lead(1, "VP of Sales"), _lead(2, "Sales Director")]
    persist = Recorder()
    result = rank_leads(leads, persist, llm=FakeLLM("[99, 2, 1]"))
    assert result.outcome == RankOutcome.RANKED
    assert persist.calls == [(2, 1), (1, 2)]


def test_duplicate_ids_apply_once():
    leads = [_lead(1, "VP of Sales"), _lead(2, "Sales Director")]
    assert [l["id"] for l in order_leads(leads, [2, 2, 1, 2])] == [2, 1]


def test_empty_ranking_is_no_rankable_leads():
    persist = Recorder()
    result = rank_leads([_lead(1, "Intern")], persist, llm=FakeLLM("[]"))
    assert result.outcome == RankOutcome.NO_RANKABLE_LEADS
    assert persist.calls == []


def test_only_unknown_ids_is_no_rankable_leads():
    result = rank_leads([_lead(1, "Intern")], Recorder(), llm=FakeLLM("[42]"))
    assert result.outcome == RankOutcome.NO_RANKABLE_LEADS


@pytest.mark.parametrize("text", [None, ""])
def test_no_model_text_is_upstream_failure(text):
    persist = Recorder()
    result = rank_leads([_lead(1, "VP of Sales")], persist, llm=FakeLLM(text))
    assert result.outcome == RankOutcome.UPSTREAM_FAILURE
    assert persist.calls == []


def test_no_bracket_is_rejected_before_calling_model():
    fake = FakeLLM()
    with pytest.raises(ImportValidationError):
        rank_leads([_lead(1, "VP of Sales", employees=None)], Recorder(), llm=fake)
    assert fake.prompts == []


@pytest.mark.parametrize("text", ['{"ranking": [1]}', '["1", "2"]', "[1.5]", "[true]", "1, 2", "[1, null]"])
def test_malformed_ranking_fails_closed(text):
    persist = Recorder()
    with pytest.raises(LLMResponseError):
        rank_leads([_lead(1, "VP of Sales")], persist, llm=FakeLLM(text))
    assert persist.calls == []


def test_parse_ranking_accepts_integer_array():
    assert parse_ranking("[3, 4, 8, 2]") == [3, 4, 8, 2]


def test_one_failed_write_does_not_stop_the_batch():
    leads = [_lead(1, "VP of Sales"), _lead(2, "Head of Sales"), _lead(3, "Sales Director")]
    persist = Recorder(fail_ids={2})
    result = rank_leads(leads, persist, llm=FakeLLM("[1, 2, 3]"))
    assert result.outcome == RankOutcome.RANKED
    assert persist.calls == [(1, 1), (3, 3)]
    assert result.failed == [2]


def test_every_write_failing_is_upstream_failure():
    leads = [_lead(1, "VP of Sales")]
    result = rank_leads(leads, Recorder(fail_ids={1}), llm=FakeLLM("[1]"))
    assert result.outcome == RankOutcome.UPSTREAM_FAILURE
    assert result.ranked == [(1, 1)]


def test_first_bracket_selects_table_for_mixed_batch(caplog):
    leads = [_lead(1, "Founder", employees=None), _lead(2, "VP of Sales", employees="51-200"),
             _lead(3, "VP of Field Sales", employees="10001+")]
    with caplog.at_level("WARNING"):
        assert select_bracket(leads) == "51-200"
    assert any("mixed employee brackets" in r.message for r in caplog.records)

    fake = FakeLLM("[2]")
    rank_leads(leads, Recorder(), llm=fake)
    assert "VP of Growth" in fake.prompts[0]
    assert "VP of Field Sales\": 7" not in fake.prompts[0]


def test_prompt_contains_leads_and_title_table():
    prompt = build_rank_prompt([_lead(7, "CRO")], "201-1000")
    assert '"id": 7' in prompt
    assert '"title": "CRO"' in prompt
    assert '"VP of GTM": 7' in prompt
    assert '"employees"' not in prompt


def test_seniority_table_covers_every_bracket_and_is_read_only():
    assert set(SENIORITY_BY_BRACKET) == set(EMPLOYEE_BRACKETS)
    for table in SENIORITY_BY_BRACKET.values():
        assert sorted(table.values()) == list(range(1, len(table) + 1))
    with pytest.raises(TypeError):
        SENIORITY_BY_BRACKET["2-10"] = {}
    with pytest.raises(TypeError):
        SENIORITY_BY_BRACKET["51-200"]["Intern"] = 8
