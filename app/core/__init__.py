# app/core/__init__.py

from app.core.matching import reconcile, summarize, image_match_status
from app.core.rules import assign_reason, add_rule, update_rule, delete_rule
from app.core.export import serialize, OUTPUT_FILENAME
from app.core.analysis_queue import AnalysisQueue, CancellationToken, CheckAnalyzer
from app.core.normalizers import (
    normalize,
    normalize_with_report,
    parse_csv_text,
    read_statement,
    is_valid_check_number,
)

__all__ = [
    "reconcile",
    "summarize",
    "image_match_status",
    "assign_reason",
    "add_rule",
    "update_rule",
    "delete_rule",
    "serialize",
    "OUTPUT_FILENAME",
    "AnalysisQueue",
    "CancellationToken",
    "CheckAnalyzer",
    "normalize",
    "normalize_with_report",
    "parse_csv_text",
    "read_statement",
    "is_valid_check_number",
]
