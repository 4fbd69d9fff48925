"""Strict multi-format date parsing for imported lease dates."""
from datetime import date

import pytest

from services.date_normalizer import (
    DATE_FORMATS,
    normalize_date,
    normalize_entered_date,
    parse_query_date,
    strict_parse,
    to_comparable_date,
)

# 25 March 2024 written in every supported format. Day > 12 keeps the
# month/day formats unambiguous.
SAMPLES = {
    "YYYY-MM-DD": "2024-03-25",
    "MM-DD-YYYY": "03-25-2024",
    "DD-MM-YYYY": "25-03-2024",
    "MM/DD/YYYY": "03/25/2024",
    "DD/MM/YYYY": "25/03/2024",
    "YYYY/MM/DD": "2024/03/25",
    "MMM DD, YYYY": "Mar 25, 2024",
    "DD MMM YYYY": "25 Mar 2024",
    "YYYYMMDD": "20240325",
    "MMDDYYYY": "03252024",
}


def test_samples_cover_every_supported_format():
    assert set(SAMPLES) == set(DATE_FORMATS)


@pytest.mark.parametrize("fmt", DATE_FORMATS)
def test_every_format_normalizes_to_same_calendar_date(fmt):
    text = SAMPLES[fmt]
    assert strict_parse(text, fmt) == date(2024, 3, 25)
    result = normalize_date(text)
    assert result.invalid is False
    assert result.value == "25-03-2024"


def test_iso_date_becomes_day_month_year():
    result = normalize_date("2024-03-05")
    assert result.invalid is False
    assert result.value == "05-03-2024"


def test_unparseable_text_is_kept_and_flagged():
    result = normalize_date("not-a-date")
    assert result.invalid is True
    assert result.value == "not-a-date"


def test_raw_value_is_trimmed_when_invalid():
    result = normalize_date("  13/45/2024 ")
    assert result.invalid is True
    assert result.value == "13/45/2024"


@pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
def test_absent_value_is_valid_and_none(value):
    result = normalize_date(value)
    assert result.value is None
    assert result.invalid is False


def test_ambiguous_dash_date_prefers_month_first():
    # YYYY-MM-DD cannot match, MM-DD-YYYY is tried before DD-MM-YYYY.
    assert normalize_date("01-02-2024").value == "02-01-2024"


def test_day_first_used_when_month_first_impossible():
    assert normalize_date("25-12-2024").value == "25-12-2024"


@pytest.mark.parametrize(
    "value",
    [
        "2024-3-5",  # no zero padding
        "2024-02-30",  # not a calendar date
        "31-02-2024",
        "mar 25, 2024",  # month abbreviation is case sensitive
        "March 25, 2024",
        "Mar 25 2024",
        "2024.03.25",
        "2024-03-25T00:00:00",
        "324-03-25",
        "\u0662\u0660\u0662\u0664-\u0660\u0663-\u0660\u0665",  # Arabic-Indic digits
        "\uff12\uff10\uff12\uff14\uff10\uff13\uff12\uff15",  # fullwidth digits
    ],
)
def test_strict_parsing_rejects_near_misses(value):
    result = normalize_date(value)
    assert result.invalid is True
    assert result.value == value.strip()


def test_leap_day():
    assert normalize_date("2024-02-29").value == "29-02-2024"
    assert normalize_date("2023-02-29").invalid is True


def test_non_string_input_is_stringified():
    assert normalize_date(20240325).value == "25-03-2024"


def test_canonical_output_with_day_above_twelve_reparses_unchanged():
    once = normalize_date("Mar 25, 2024").value
    assert normalize_date(once).value == once


def test_to_comparable_date_accepts_canonical_and_iso():
    assert to_comparable_date("05-03-2024") == date(2024, 3, 5)
    assert to_comparable_date("2024-03-05") == date(2024, 3, 5)
    assert to_comparable_date(" 05-03-2024 ") == date(2024, 3, 5)


def test_to_comparable_date_passes_dates_through():
    d = date(2024, 1, 1)
    assert to_comparable_date(d) is d


@pytest.mark.parametrize("value", [None, "", "03/05/2024", "Mar 05, 2024", "garbage", "31-02-2024", 20240305])
def test_to_comparable_date_rejects_other_forms(value):
    assert to_comparable_date(value) is None


def test_parse_query_date_raises_on_bad_input():
    assert parse_query_date("2024-01-31") == date(2024, 1, 31)
    with pytest.raises(ValueError):
        parse_query_date("01/31/2024")


@pytest.mark.parametrize("value", ["05-03-2024", "01-02-2024", "12-11-2023", " 05-03-2024 "])
def test_entered_canonical_date_is_kept_day_first(value):
    result = normalize_entered_date(value)
    assert result.invalid is False
    assert result.value == value.strip()


def test_entered_date_in_other_formats_still_normalizes():
    assert normalize_entered_date("2024-03-05").value == "05-03-2024"
    assert normalize_entered_date("03/25/2024").value == "25-03-2024"
    assert normalize_entered_date(None).value is None
    assert normalize_entered_date("31-02-2024").invalid is True
