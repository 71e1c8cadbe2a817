"""
Main router for the Competency Catalog API.

This module combines all competency routes into a single router
that can be included in the main FastAPI application.
"""
from fastapi import APIRouter

from api.competency.api.routes_competencies import competencies_router

catalog_router = APIRouter()

catalog_router.include_router(competencies_router)

__all__ = ["catalog_router", "competencies_router"]
