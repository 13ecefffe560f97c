"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import lecturer

api_router = APIRouter()

# Include all route modules
api_router.include_router(lecturer.router, prefix="/lecturer", tags=["Lecturer"])
