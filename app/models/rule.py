# app/models/rule.py

from pydantic import BaseModel, Field, field_validator


class ReasonMapping(BaseModel):
    """A search term and the category label it assigns."""

    search_term: str = Field(alias="searchTerm", min_length=1)
    reason: str

    @field_validator("search_term")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("search term must not be blank")
        return value

    class Config:
        populate_by_name = True
