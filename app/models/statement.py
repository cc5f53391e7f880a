# app/models/statement.py

from typing import Literal
from pydantic import BaseModel, Field


# Fixed output schema, in column order
STATEMENT_HEADERS = [
    "Date",
    "Description",
    "Debit",
    "Check Number",
    "Check Name",
    "Reason",
]

# Columns a raw bank export must carry
REQUIRED_INPUT_COLUMNS = ["Date", "Description", "Debit", "Credit", "Check Number"]


class CanonicalRow(BaseModel):
    """A bank-statement debit that survived normalization."""

    date: str = ""
    description: str = ""
    debit: str = ""
    check_number: str = Field("", alias="checkNumber")
    check_name: str = Field("", alias="checkName")
    reason: str = ""

    class Config:
        populate_by_name = True


class ProcessedCSV(BaseModel):
    """Normalized statement: fixed headers plus rows in input order."""

    headers: list[str] = Field(default_factory=lambda: list(STATEMENT_HEADERS))
    rows: list[CanonicalRow] = Field(default_factory=list)


DropReason = Literal[
    "credit",
    "invalid_check_number",
    "non_positive_check_number",
    "fractional_check_number",
]


class RowDiagnostic(BaseModel):
    """Why a raw row was dropped during normalization."""

    line: int = Field(ge=1, description="1-based data row index")
    reason: DropReason
    value: str = ""


class NormalizationReport(BaseModel):
    """Normalized statement together with the rows that were dropped."""

    csv: ProcessedCSV
    dropped: list[RowDiagnostic] = Field(default_factory=list)
