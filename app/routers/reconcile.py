# app/routers/reconcile.py

"""
Reconciliation routes.

The workflow session keeps the normalized statement and the analyzed
check images; each call here is a pure transform over what it is sent.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from app.core.export import OUTPUT_FILENAME, OUTPUT_MEDIA_TYPE, serialize
from app.core.matching import image_match_status, reconcile, summarize
from app.dependencies import get_current_user, get_rule_store
from app.exceptions import RuleStorageError
from app.models import (
    CheckImageResult,
    ImageMatchStatus,
    MatchSummary,
    ProcessedCSV,
    ReasonMapping,
    User,
)
from app.rule_store import RuleStore

logger = logging.getLogger(__name__)
router = APIRouter()


class ReconcileRequest(BaseModel):
    csv: ProcessedCSV
    images: list[CheckImageResult] = Field(default_factory=list)
    rules: Optional[list[ReasonMapping]] = None  # stored rules when omitted


class ReconcileResponse(BaseModel):
    success: bool
    csv: ProcessedCSV
    summary: MatchSummary
    images: list[ImageMatchStatus]


class SummaryResponse(BaseModel):
    success: bool
    total_rows: int
    total_images: int
    summary: MatchSummary
    images: list[ImageMatchStatus]


def _rules_for(request: ReconcileRequest, store: RuleStore) -> list[ReasonMapping]:
    if request.rules is not None:
        return request.rules
    try:
        return store.load()
    except RuleStorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


# ============================================
# Pre-processing summary
# ============================================

@router.post("/reconcile/summary", response_model=SummaryResponse)
async def reconciliation_summary(
    request: ReconcileRequest,
    user: User = Depends(get_current_user),
):
    """
    Match counts before final processing.

    Reasons are not assigned yet, so withReason is always 0.
    """
    return SummaryResponse(
        success=True,
        total_rows=len(request.csv.rows),
        total_images=len(request.images),
        summary=summarize(request.csv, request.images),
        images=image_match_status(request.csv, request.images),
    )


# ============================================
# Main Reconciliation Endpoint
# ============================================

@router.post("/reconcile", response_model=ReconcileResponse)
async def run_reconciliation(
    request: ReconcileRequest,
    store: RuleStore = Depends(get_rule_store),
):
    """
    Run reconciliation.

    1. Joins check images to statement rows by check number
    2. Assigns a reason to every row from the matching rules
    3. Returns the enriched rows and the match summary
    """
    result = reconcile(request.csv, request.images, _rules_for(request, store))

    logger.info(
        "Reconciled %d rows: %d matched, %d with reason",
        len(result.csv.rows), result.summary.matched, result.summary.with_reason,
    )

    return ReconcileResponse(
        success=True,
        csv=result.csv,
        summary=result.summary,
        images=image_match_status(request.csv, request.images),
    )


@router.post("/reconcile/download")
async def download_reconciliation(
    request: ReconcileRequest,
    store: RuleStore = Depends(get_rule_store),
):
    """Run reconciliation and return the final statement as a CSV download."""
    result = reconcile(request.csv, request.images, _rules_for(request, store))

    return Response(
        content=serialize(result.csv),
        media_type=OUTPUT_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{OUTPUT_FILENAME}"',
            "X-Matched-Rows": str(result.summary.matched),
            "X-Unmatched-Rows": str(result.summary.unmatched),
            "X-Rows-With-Reason": str(result.summary.with_reason),
        },
    )
