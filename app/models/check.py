# app/models/check.py

from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class CheckAnalysis(BaseModel):
    """What the vision model read off a check."""

    check_number: str = Field("", alias="checkNumber")
    check_name: str = Field("", alias="checkName")

    @field_validator("check_number", "check_name", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        # Models sometimes answer with numbers or null
        return _as_text(value)

    class Config:
        populate_by_name = True


class CheckImageResult(BaseModel):
    """One analyzed check image. Never mutated once created."""

    check_number: str = Field("", alias="checkNumber")
    check_name: str = Field("", alias="checkName")
    image_url: str = Field("", alias="imageUrl")
    error: Optional[str] = None

    @field_validator("check_number", "check_name", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    class Config:
        populate_by_name = True
        frozen = True


class ImageUpload(BaseModel):
    """A check image waiting to be analyzed."""

    filename: str
    content: bytes
    media_type: str = "image/jpeg"
