import pytest

from errors import ImportValidationError
from services.csv_reader import read_csv_rows


def test_header_row_keys_each_record():
    data = b"Property,Unit,Start\nTower,101,2024-01-01\nTower,102,\n"
    rows = read_csv_rows(data)
    assert rows == [
        {"Property": "Tower", "Unit": "101", "Start": "2024-01-01"},
        {"Property": "Tower", "Unit": "102", "Start": ""},
    ]


def test_bom_and_blank_lines_are_skipped():
    data = "\ufeffProperty,Unit\r\nTower,101\r\n\r\n,\r\nTower,102\r\n".encode("utf-8")
    rows = read_csv_rows(data)
    assert [r["Unit"] for r in rows] == ["101", "102"]
    assert "Property" in rows[0]


def test_quoted_commas_survive():
    data = b'Address,Property\n"500 Congress Ave, Austin",Tower\n'
    assert read_csv_rows(data)[0]["Address"] == "500 Congress Ave, Austin"


def test_cp1252_bytes_fall_back():
    data = "Tenant,Property\nCaf\xe9 Uno,Tower\n".encode("latin-1")
    assert read_csv_rows(data)[0]["Tenant"] == "Caf\xe9 Uno"


@pytest.mark.parametrize("data", [b"", b"Property,Unit\n", b"Property,Unit\n\n,\n"])
def test_empty_csv_is_rejected(data):
    with pytest.raises(ImportValidationError):
        read_csv_rows(data)
