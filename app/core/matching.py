# app/core/matching.py

"""
Core reconciliation engine.

Joins statement rows to analyzed check images by check number, then
assigns every row a reason from the matching rules.
"""

from typing import Iterable, Optional

from app.core.rules import assign_reason
from app.models import (
    STATEMENT_HEADERS,
    CanonicalRow,
    CheckImageResult,
    ImageMatchStatus,
    MatchSummary,
    ProcessedCSV,
    ReasonMapping,
    ReconciliationResult,
)


def find_matching_image(
    row: CanonicalRow,
    images: list[CheckImageResult],
) -> Optional[CheckImageResult]:
    """
    First image whose check number equals the row's, compared as text.

    A row without a check number never matches, even an image that
    also has no check number.
    """
    if not row.check_number:
        return None

    for image in images:
        if image.check_number == row.check_number:
            return image
    return None


def reconcile(
    csv: ProcessedCSV,
    images: Iterable[CheckImageResult],
    rules: Iterable[ReasonMapping],
) -> ReconciliationResult:
    """
    Main reconciliation function.

    For each row:
    1. Copy the payee name from the first image with the same check number
    2. Assign a reason from the description and (possibly new) payee name

    Inputs are left untouched; rows are copied before being enriched.
    The result always carries the fixed six-column headers, whatever
    headers the input arrived with.
    """
    images = list(images)
    rules = list(rules)

    rows: list[CanonicalRow] = []
    matched = 0
    with_reason = 0

    for original in csv.rows:
        row = original.model_copy()

        image = find_matching_image(row, images)
        if image is not None:
            row.check_name = image.check_name
            matched += 1

        row.reason = assign_reason(row.description, row.check_name, rules)
        if row.reason:
            with_reason += 1

        rows.append(row)

    summary = MatchSummary(
        matched=matched,
        unmatched=len(rows) - matched,
        with_reason=with_reason,
    )

    return ReconciliationResult(
        csv=ProcessedCSV(headers=list(STATEMENT_HEADERS), rows=rows),
        summary=summary,
    )


def summarize(
    csv: ProcessedCSV,
    images: Iterable[CheckImageResult],
) -> MatchSummary:
    """Match counts before reasons are assigned (with_reason stays 0)."""
    images = list(images)
    matched = sum(1 for row in csv.rows if find_matching_image(row, images) is not None)
    return MatchSummary(matched=matched, unmatched=len(csv.rows) - matched, with_reason=0)


def image_match_status(
    csv: ProcessedCSV,
    images: Iterable[CheckImageResult],
) -> list[ImageMatchStatus]:
    """Report, per image, whether some statement row carries its check number."""
    check_numbers = {row.check_number for row in csv.rows if row.check_number}
    return [
        ImageMatchStatus(
            check_number=image.check_number,
            check_name=image.check_name,
            matched=image.check_number in check_numbers,
        )
        for image in images
    ]
