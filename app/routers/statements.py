# app/routers/statements.py

"""
Statement upload route.

Parses a bank export and returns the normalized six-column statement.
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from app.core.normalizers import read_statement
from app.dependencies import get_current_user
from app.exceptions import CSVInputError
from app.models import NormalizationReport, User

router = APIRouter()


@router.post("/normalize", response_model=NormalizationReport)
async def normalize_statement(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    """
    Normalize an uploaded statement CSV.

    Credit rows and rows with a malformed check number are dropped and
    listed under "dropped". A file that can't be parsed is rejected as a
    whole.
    """
    content = await file.read()

    try:
        return read_statement(content)
    except CSVInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
