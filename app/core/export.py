# app/core/export.py

"""
Final statement serialization.

Fields are written as-is, without quoting. A description containing a
comma or newline therefore shifts or breaks the columns of its line;
downstream spreadsheets expect exactly this format.
"""

from app.models.statement import STATEMENT_HEADERS, CanonicalRow, ProcessedCSV

OUTPUT_FILENAME = "modified_statement.csv"
OUTPUT_MEDIA_TYPE = "text/csv"


def _row_line(row: CanonicalRow) -> str:
    return ",".join([
        row.date,
        row.description,
        row.debit,
        row.check_number,
        row.check_name or "",
        row.reason or "",
    ])


def serialize(csv: ProcessedCSV) -> str:
    """Render the header line plus one line per row, joined by newlines."""
    lines = [",".join(STATEMENT_HEADERS)]
    lines.extend(_row_line(row) for row in csv.rows)
    return "\n".join(lines)
