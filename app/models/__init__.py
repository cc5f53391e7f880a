# app/models/__init__.py

from app.models.statement import (
    STATEMENT_HEADERS,
    REQUIRED_INPUT_COLUMNS,
    CanonicalRow,
    ProcessedCSV,
    RowDiagnostic,
    NormalizationReport,
)
from app.models.check import (
    CheckAnalysis,
    CheckImageResult,
    ImageUpload,
)
from app.models.rule import ReasonMapping
from app.models.user import User, LOCAL_USER
from app.models.reconciliation import (
    MatchSummary,
    ImageMatchStatus,
    ReconciliationResult,
)

__all__ = [
    # Statement
    "STATEMENT_HEADERS",
    "REQUIRED_INPUT_COLUMNS",
    "CanonicalRow",
    "ProcessedCSV",
    "RowDiagnostic",
    "NormalizationReport",
    # Check images
    "CheckAnalysis",
    "CheckImageResult",
    "ImageUpload",
    # Rules
    "ReasonMapping",
    # User
    "User",
    "LOCAL_USER",
    # Reconciliation
    "MatchSummary",
    "ImageMatchStatus",
    "ReconciliationResult",
]
