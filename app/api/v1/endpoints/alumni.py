"""Alumni CRUD endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies import get_alumni_filters, get_alumni_service
from app.schemas import (
    AlumniFilters,
    AlumniPayload,
    AlumniResponse,
    FilterOptionsResponse,
    MessageResponse,
)
from app.services.alumni_service import AlumniService

router = APIRouter()


@router.get("", response_model=List[AlumniResponse])
async def list_alumni(
    filters: AlumniFilters = Depends(get_alumni_filters),
    service: AlumniService = Depends(get_alumni_service),
):
    """List alumni, newest first. Filters by degree, graduation_year and branch combine with AND."""
    return await service.list_alumni(filters)


# Declared before /{alumni_id} so the literal path wins
@router.get("/filters/options", response_model=FilterOptionsResponse)
async def get_filter_options(service: AlumniService = Depends(get_alumni_service)):
    """Distinct degrees, graduation years and branches for building filter controls."""
    return await service.filter_options()


@router.get("/{alumni_id}", response_model=AlumniResponse)
async def get_alumni(alumni_id: int, service: AlumniService = Depends(get_alumni_service)):
    return await service.get_alumni(alumni_id)


@router.post("", response_model=AlumniResponse, status_code=status.HTTP_201_CREATED)
async def create_alumni(
    data: AlumniPayload,
    service: AlumniService = Depends(get_alumni_service),
):
    """Create an alumni record. 400 if the email is already taken."""
    return await service.create_alumni(data)


@router.put("/{alumni_id}", response_model=AlumniResponse)
async def update_alumni(
    alumni_id: int,
    data: AlumniPayload,
    service: AlumniService = Depends(get_alumni_service),
):
    """Replace every editable field of an alumni record."""
    return await service.update_alumni(alumni_id, data)


@router.delete("/{alumni_id}", response_model=MessageResponse)
async def delete_alumni(alumni_id: int, service: AlumniService = Depends(get_alumni_service)):
    message = await service.delete_alumni(alumni_id)
    return MessageResponse(message=message)
