"""Request-scoped dependencies shared by the endpoints."""

from typing import Optional

from fastapi import Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas import AlumniFilters
from app.services.alumni_service import AlumniService


def get_alumni_service(db: AsyncSession = Depends(get_db)) -> AlumniService:
    """Bind the record service to this request's session."""
    return AlumniService(db)


def get_alumni_filters(
    degree: Optional[str] = Query(None, description="Filter by degree"),
    graduation_year: Optional[str] = Query(None, description="Filter by graduation year"),
    branch: Optional[str] = Query(None, description="Filter by branch"),
) -> AlumniFilters:
    """Collect list filters from the query string.

    Values arrive as raw strings so that ``?graduation_year=`` means "no filter"
    instead of a validation error; ``AlumniFilters`` does the conversion.
    """
    try:
        return AlumniFilters(degree=degree, graduation_year=graduation_year, branch=branch)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        raise RequestValidationError(
            [{**error, "loc": ("query", *error["loc"])} for error in errors]
        ) from exc
