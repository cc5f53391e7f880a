# tests/test_normalizers.py

"""
Tests for statement CSV parsing and normalization.
"""

import pytest

from app.core.normalizers import (
    is_valid_check_number,
    normalize,
    normalize_with_report,
    parse_csv_text,
    read_statement,
)
from app.exceptions import CSVInputError
from app.models import STATEMENT_HEADERS


# ============================================
# Test Data
# ============================================

def raw_row(check_number: str = "", credit: str = "", **overrides) -> dict:
    row = {
        "Date": "01/15/2025",
        "Description": "CHECK",
        "Debit": "50.00",
        "Credit": credit,
        "Check Number": check_number,
        "Account Running Balance": "1,000.00",
        "": "",
    }
    row.update(overrides)
    return row


STATEMENT = (
    "Date,Description,Debit,Credit,Check Number,Account Running Balance,\n"
    "01/02/2025,CHECK 101,250.00,,101,9750.00,\n"
    "01/03/2025,DEPOSIT,,500.00,,10250.00,\n"
    "01/04/2025,AMAZON MKTPLACE,42.10,,,10207.90,\n"
    "01/05/2025,CHECK,80.00,,12.5,10127.90,\n"
    "01/06/2025,CHECK,75.00,,ABC,10052.90,\n"
)


# ============================================
# Filter Tests
# ============================================

class TestFilterRules:
    """A row survives iff Credit is empty and Check Number is empty or a positive integer."""

    def test_debit_with_check_kept(self):
        assert len(normalize([raw_row("101")]).rows) == 1

    def test_credit_dropped(self):
        assert normalize([raw_row("101", credit="5.00")]).rows == []

    def test_whitespace_credit_counts_as_empty(self):
        assert len(normalize([raw_row("101", credit="   ")]).rows) == 1

    def test_fractional_check_number_dropped(self):
        assert normalize([raw_row("12.5")]).rows == []

    def test_empty_check_number_kept(self):
        assert len(normalize([raw_row("")]).rows) == 1

    def test_missing_check_number_kept(self):
        row = raw_row()
        del row["Check Number"]

        assert len(normalize([row]).rows) == 1

    @pytest.mark.parametrize("value", ["0", "-5", "ABC", "12abc", "inf", "nan", "0x1A", "0o17", "0b101", "1_000"])
    def test_invalid_check_numbers_dropped(self, value):
        assert normalize([raw_row(value)]).rows == []

    @pytest.mark.parametrize("value", ["1", "101", " 101 ", "12.0", "1e3", "+7"])
    def test_valid_check_numbers_kept(self, value):
        assert is_valid_check_number(value)
        assert len(normalize([raw_row(value)]).rows) == 1

    def test_order_preserved(self):
        rows = [raw_row("3"), raw_row("x"), raw_row("1"), raw_row("2", credit="1")]

        csv = normalize(rows)

        assert [r.check_number for r in csv.rows] == ["3", "1"]


# ============================================
# Projection Tests
# ============================================

class TestProjection:
    """Test the six-column output schema."""

    def test_fixed_headers(self):
        csv = normalize([raw_row("101")])

        assert csv.headers == STATEMENT_HEADERS
        assert "Credit" not in csv.headers

    def test_fields_passed_through(self):
        row = normalize([raw_row(" 101 ", Description="  CHECK 101 ", Debit="$250.00")]).rows[0]

        assert row.date == "01/15/2025"
        assert row.description == "  CHECK 101 "
        assert row.debit == "$250.00"
        assert row.check_number == "101"
        assert row.check_name == ""
        assert row.reason == ""

    def test_missing_fields_become_empty(self):
        row = normalize([{"Check Number": "7"}]).rows[0]

        assert row.date == ""
        assert row.description == ""
        assert row.debit == ""

    def test_normalizing_twice_is_noop(self):
        once = normalize([raw_row("101"), raw_row(""), raw_row("9", credit="1")])

        twice = normalize(once.rows)
        from_dicts = normalize([r.model_dump(by_alias=True) for r in once.rows])

        assert twice == once
        assert from_dicts == once


# ============================================
# Diagnostics Tests
# ============================================

class TestDiagnostics:
    """Dropped rows are reported, never raised."""

    def test_drop_reasons(self):
        report = normalize_with_report([
            raw_row("101"),
            raw_row("101", credit="5.00"),
            raw_row("ABC"),
            raw_row("12.5"),
            raw_row("0"),
        ])

        assert len(report.csv.rows) == 1
        assert [(d.line, d.reason) for d in report.dropped] == [
            (2, "credit"),
            (3, "invalid_check_number"),
            (4, "fractional_check_number"),
            (5, "non_positive_check_number"),
        ]
        assert report.dropped[1].value == "ABC"


# ============================================
# CSV Parsing Tests
# ============================================

class TestParseCSV:
    """Test the CSV parse step."""

    def test_parse_and_normalize_statement(self):
        report = normalize_with_report(parse_csv_text(STATEMENT))

        assert [r.description for r in report.csv.rows] == ["CHECK 101", "AMAZON MKTPLACE"]
        assert report.csv.rows[0].check_number == "101"
        assert len(report.dropped) == 3

    def test_blank_lines_skipped(self):
        records = parse_csv_text(STATEMENT + "\n,,,,,,\n\n")

        assert len(records) == 5

    def test_bom_and_padded_headers(self):
        text = "\ufeffDate, Description ,Debit,Credit,Check Number\n1/1,CHECK,5,,10\n"

        records = parse_csv_text(text)

        assert records[0]["Description"] == "CHECK"
        assert records[0]["Check Number"] == "10"

    def test_quoted_commas_in_description(self):
        text = 'Date,Description,Debit,Credit,Check Number\n1/1,"ACME, INC",5,,\n'

        assert parse_csv_text(text)[0]["Description"] == "ACME, INC"

    def test_empty_file_rejected(self):
        with pytest.raises(CSVInputError):
            parse_csv_text("   \n")

    def test_missing_columns_rejected(self):
        with pytest.raises(CSVInputError) as exc:
            parse_csv_text("Date,Description,Amount\n1/1,X,5\n")

        assert "Credit" in str(exc.value)
        assert "Check Number" in str(exc.value)

    def test_read_statement_bytes(self):
        report = read_statement(STATEMENT.encode("utf-8"))

        assert len(report.csv.rows) == 2

    def test_read_statement_rejects_binary(self):
        with pytest.raises(CSVInputError):
            read_statement(b"\xff\xfe\x00\x81garbage")
