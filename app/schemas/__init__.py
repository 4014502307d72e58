"""Pydantic schemas for request/response validation."""

from typing import Optional, List
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ─── Alumni ──────────────────────────────────────────────────────────────────

class AlumniPayload(BaseModel):
    """Body of create and update requests.

    Update is a full replace: any optional field left out is written as null.
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=150)
    phone: Optional[str] = Field(None, max_length=20)
    graduation_year: Optional[int] = None
    degree: Optional[str] = Field(None, max_length=100)
    branch: Optional[str] = Field(None, max_length=100)
    current_company: Optional[str] = Field(None, max_length=150)
    current_position: Optional[str] = Field(None, max_length=150)
    location: Optional[str] = Field(None, max_length=200)

    @field_validator("graduation_year", mode="before")
    @classmethod
    def empty_year_is_null(cls, value):
        return _blank_to_none(value)


class AlumniFilters(BaseModel):
    """Optional equality filters for the list endpoint. Blank values are ignored."""

    degree: Optional[str] = None
    graduation_year: Optional[int] = None
    branch: Optional[str] = None

    @field_validator("degree", "graduation_year", "branch", mode="before")
    @classmethod
    def blank_is_omitted(cls, value):
        return _blank_to_none(value)


class AlumniResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    graduation_year: Optional[int] = None
    degree: Optional[str] = None
    branch: Optional[str] = None
    current_company: Optional[str] = None
    current_position: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FilterOptionsResponse(BaseModel):
    degrees: List[str]
    graduation_years: List[int]
    branches: List[str]


# ─── Misc ────────────────────────────────────────────────────────────────────

class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    message: str
