# app/core/normalizers.py

"""
Bank-statement CSV normalization.

Turns raw CSV records into the fixed six-column statement:
- rows with any credit amount are dropped (debit-only reconciliation)
- rows whose check number is present but not a positive whole number are dropped
- Credit, running balance and unnamed trailing columns never reach the output
"""

import csv
import io
import logging
import re
from typing import Any, Iterable, Mapping, Optional

from app.exceptions import CSVInputError
from app.models.statement import (
    REQUIRED_INPUT_COLUMNS,
    STATEMENT_HEADERS,
    CanonicalRow,
    NormalizationReport,
    ProcessedCSV,
    RowDiagnostic,
)

logger = logging.getLogger(__name__)

# Plain decimal notation, optionally signed, optional exponent
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Raw export keys first, then canonical (already normalized) keys
_DATE_KEYS = ("Date", "date")
_DESCRIPTION_KEYS = ("Description", "description")
_DEBIT_KEYS = ("Debit", "debit")
_CREDIT_KEYS = ("Credit", "credit")
_CHECK_NUMBER_KEYS = ("Check Number", "checkNumber", "check_number")


# ============================================
# Field helpers
# ============================================

def _field(row: Mapping[str, Any], keys: tuple[str, ...]) -> Optional[Any]:
    """Return the first present value for any of keys."""
    for key in keys:
        if key in row:
            return row[key]
    return None


def _text(value: Any) -> str:
    """Pass a cell through verbatim, with a missing cell as empty text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _as_mapping(row: Any) -> Mapping[str, Any]:
    if isinstance(row, CanonicalRow):
        return row.model_dump()
    return row


def _check_number_problem(check_num_str: str) -> Optional[str]:
    """
    Classify a trimmed, non-empty check number.

    Returns None when it is a positive whole number, otherwise the
    diagnostic reason it gets dropped for. Only plain decimal notation
    counts as a number: hex, octal and binary literals (0x1A, 0o17, 0b101),
    inf, nan and digit separators are deliberately rejected even though
    some number parsers accept them.
    """
    if not _NUMBER_RE.fullmatch(check_num_str):
        return "invalid_check_number"

    value = float(check_num_str)
    if not value.is_integer():
        return "fractional_check_number"
    if value <= 0:
        return "non_positive_check_number"
    return None


def is_valid_check_number(value: Any) -> bool:
    """
    True when a row with this check number survives normalization.

    Empty check numbers are valid: rows without checks (card debits,
    transfers) are kept.
    """
    check_num_str = _text(value).strip()
    if not check_num_str:
        return True
    return _check_number_problem(check_num_str) is None


# ============================================
# Normalization
# ============================================

def normalize_with_report(raw_rows: Iterable[Any]) -> NormalizationReport:
    """
    Normalize raw CSV records and report every dropped row.

    Rules, applied per row in order:
    1. Credit present and non-empty after trimming -> drop
    2. Check Number empty -> keep; not a number -> drop;
       otherwise keep only whole numbers greater than zero
    3. Project survivors onto the fixed schema with empty Check Name and Reason

    Row order is preserved. Malformed rows are reported, never raised.
    """
    rows: list[CanonicalRow] = []
    dropped: list[RowDiagnostic] = []

    for line, raw in enumerate(raw_rows, start=1):
        row = _as_mapping(raw)

        credit = _text(_field(row, _CREDIT_KEYS)).strip()
        if credit:
            dropped.append(RowDiagnostic(line=line, reason="credit", value=credit))
            continue

        check_num_str = _text(_field(row, _CHECK_NUMBER_KEYS)).strip()
        if check_num_str:
            problem = _check_number_problem(check_num_str)
            if problem:
                dropped.append(RowDiagnostic(line=line, reason=problem, value=check_num_str))
                continue

        rows.append(CanonicalRow(
            date=_text(_field(row, _DATE_KEYS)),
            description=_text(_field(row, _DESCRIPTION_KEYS)),
            debit=_text(_field(row, _DEBIT_KEYS)),
            check_number=check_num_str,
            check_name="",
            reason="",
        ))

    if dropped:
        logger.debug("Dropped %d of %d statement rows", len(dropped), len(rows) + len(dropped))

    return NormalizationReport(
        csv=ProcessedCSV(headers=list(STATEMENT_HEADERS), rows=rows),
        dropped=dropped,
    )


def normalize(raw_rows: Iterable[Any]) -> ProcessedCSV:
    """Normalize raw CSV records into the fixed six-column statement."""
    return normalize_with_report(raw_rows).csv


# ============================================
# CSV input
# ============================================

def parse_csv_text(text: str) -> list[dict[str, str]]:
    """
    Parse statement CSV text with a header row into records.

    Blank lines are skipped. Header names are trimmed. Raises
    CSVInputError when the text is empty, malformed, or missing a
    required column.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    if not text.strip():
        raise CSVInputError("The CSV file is empty")

    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        fieldnames = reader.fieldnames
        if not fieldnames:
            raise CSVInputError("The CSV file has no header row")

        reader.fieldnames = [name.strip() for name in fieldnames]
        missing = [col for col in REQUIRED_INPUT_COLUMNS if col not in reader.fieldnames]
        if missing:
            raise CSVInputError(f"Missing required columns: {', '.join(missing)}")

        records = []
        for record in reader:
            values = [v for k, v in record.items() if k is not None]
            if all(v is None or not str(v).strip() for v in values):
                continue
            records.append(record)
    except csv.Error as e:
        raise CSVInputError(f"Error parsing CSV file: {e}") from e

    return records


def read_statement(content: bytes) -> NormalizationReport:
    """Decode, parse and normalize an uploaded statement file."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVInputError("The CSV file is not valid UTF-8 text") from e

    return normalize_with_report(parse_csv_text(text))
