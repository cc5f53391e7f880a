# app/routers/checks.py

"""
Check image analysis routes.

1. /analyze-check - relay: base64 image in, check number and payee out.
   Holds the API key so the browser never sees it.
2. /checks/analyze - multipart upload of many images, analyzed through
   the bounded analysis queue.
"""

import base64
import binascii
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.analysis_queue import AnalysisQueue, CheckAnalyzer
from app.dependencies import get_analysis_queue, get_check_analyzer, get_current_user
from app.exceptions import (
    AnalysisOutputError,
    CheckAnalysisError,
    TooManyImagesError,
    VisionNotConfiguredError,
)
from app.models import CheckImageResult, ImageUpload, User

logger = logging.getLogger(__name__)
router = APIRouter()

_DATA_URL_RE = re.compile(r"^data:(?P<media_type>[\w/+.-]+);base64,")


class AnalyzeChecksResponse(BaseModel):
    success: bool
    results: list[CheckImageResult]
    analyzed: int
    failed: int
    notices: list[str]


def _error(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    body = {"error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


def decode_image(value: str) -> tuple[bytes, str]:
    """
    Decode a base64 image, with or without a data URL prefix.

    Returns (image bytes, media type). Raises ValueError if the text is
    not valid base64.
    """
    media_type = "image/jpeg"
    match = _DATA_URL_RE.match(value)
    if match:
        media_type = match.group("media_type")
        value = value[match.end():]

    try:
        image = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid base64 image") from e

    if not image:
        raise ValueError("Empty image")
    return image, media_type


# ============================================
# Relay
# ============================================

@router.post("/analyze-check")
async def analyze_check(
    request: Request,
    analyzer: CheckAnalyzer = Depends(get_check_analyzer),
    user: User = Depends(get_current_user),
):
    """
    Analyze one check image.

    Body: {"base64Image": "..."}. Upstream failures keep their status
    code but only a generic message is returned.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    base64_image = payload.get("base64Image") if isinstance(payload, dict) else None
    if not base64_image or not isinstance(base64_image, str):
        return _error(400, "No image provided")

    try:
        image, media_type = decode_image(base64_image)
    except ValueError:
        return _error(400, "No image provided", "Image is not valid base64")

    try:
        analysis = await analyzer.analyze(image, media_type)
    except VisionNotConfiguredError:
        return _error(500, "Server configuration error")
    except AnalysisOutputError as e:
        return _error(500, "Internal server error", e.message)
    except CheckAnalysisError as e:
        return _error(e.status_code, "Failed to analyze image", e.message)
    except Exception:
        logger.exception("Check analysis relay failed")
        return _error(500, "Internal server error", "Failed to process the request")

    return {
        "checkNumber": analysis.check_number,
        "checkName": analysis.check_name,
    }


# ============================================
# Batch upload
# ============================================

@router.post("/checks/analyze", response_model=AnalyzeChecksResponse)
async def analyze_checks(
    files: list[UploadFile] = File(...),
    queue: AnalysisQueue = Depends(get_analysis_queue),
    user: User = Depends(get_current_user),
):
    """
    Analyze uploaded check images in upload order.

    A failed image is returned with its error and empty fields; the
    remaining images are still analyzed.
    """
    if queue.max_images is not None and len(files) > queue.max_images:
        raise HTTPException(status_code=400, detail=f"Maximum {queue.max_images} images allowed")

    uploads = [
        ImageUpload(
            filename=f.filename or f"image-{i + 1}",
            content=await f.read(),
            media_type=f.content_type or "image/jpeg",
        )
        for i, f in enumerate(files)
    ]

    try:
        results = await queue.run(uploads)
    except TooManyImagesError as e:
        raise HTTPException(status_code=400, detail=str(e))

    notices = [f"Analysis error: {r.error}" for r in results if r.error]

    return AnalyzeChecksResponse(
        success=True,
        results=results,
        analyzed=len(results) - len(notices),
        failed=len(notices),
        notices=notices,
    )
