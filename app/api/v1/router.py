from fastapi import APIRouter

from app.api.v1.endpoints import alumni

api_router = APIRouter()

api_router.include_router(alumni.router, prefix="/alumni", tags=["Alumni"])
