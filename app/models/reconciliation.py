# app/models/reconciliation.py

from pydantic import BaseModel, Field

from app.models.statement import ProcessedCSV


class MatchSummary(BaseModel):
    """Counts shown to the user after reconciliation."""

    matched: int = Field(0, ge=0, description="Rows with at least one matching image")
    unmatched: int = Field(0, ge=0, description="Total rows minus matched")
    with_reason: int = Field(0, ge=0, alias="withReason", description="Rows with a non-empty reason")

    class Config:
        populate_by_name = True


class ImageMatchStatus(BaseModel):
    """Whether an analyzed image found a statement row."""

    check_number: str = Field("", alias="checkNumber")
    check_name: str = Field("", alias="checkName")
    matched: bool

    class Config:
        populate_by_name = True


class ReconciliationResult(BaseModel):
    """Final statement rows and the match summary."""

    csv: ProcessedCSV
    summary: MatchSummary
